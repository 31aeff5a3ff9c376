from __future__ import annotations

import logging

from collections import deque
from types import MappingProxyType
from typing import Any, Callable, Mapping

from ._errors import RuntimeFailure
from ._reducer import Action, _require_callable, _require_name
from ._scheduler import Scheduler, call_soon


__all__ = (
    "Hook",
    "HookQueue",
    "HookRegistry",
    "Next",
)


logger = logging.getLogger(__name__)


Next = Callable[[], None]
Hook = Callable[[Mapping[str, Any], Action, Next], None]


class HookRegistry:
    _hooks: dict[str, list[Hook]]

    def __init__(self, phase: str) -> None:
        self.phase = phase
        self._hooks = {}

    def register(self, event: str, hook: Hook) -> None:
        _require_name(event, "event name")
        _require_callable(hook, f"{self.phase} hook")

        self._hooks.setdefault(event, []).append(hook)

    def lookup(self, event: Any) -> list[Hook]:
        if not isinstance(event, str):
            return []

        return list(self._hooks.get(event, ()))

    def as_dict(self) -> dict[str, list[Hook]]:
        return {event: list(hooks) for event, hooks in self._hooks.items()}

    def clear(self) -> None:
        self._hooks.clear()


class _QueuedHook:
    __slots__ = ("hook", "state", "action")

    def __init__(self, hook: Hook, state: Mapping[str, Any], action: Action) -> None:
        self.hook = hook
        self.state = MappingProxyType(dict(state))
        self.action = action


class HookQueue:
    """Hooks collected during one dispatch, run strictly one at a time.

    Each hook receives a ``next`` continuation; the following hook is
    scheduled only once that continuation is invoked. A hook that never
    calls ``next`` stalls every hook queued after it.
    """

    _entries: deque[_QueuedHook]

    def __init__(self, scheduler: Scheduler = call_soon) -> None:
        self._entries = deque()
        self._scheduler = scheduler

    def push(self, hook: Hook, state: Mapping[str, Any], action: Action) -> None:
        self._entries.append(_QueuedHook(hook, state, action))

    def __len__(self) -> int:
        return len(self._entries)

    def step(self) -> None:
        if not self._entries:
            return

        entry = self._entries.popleft()
        called = False

        def next_() -> None:
            nonlocal called

            if called:
                return

            called = True
            self._scheduler(self.step)

        try:
            entry.hook(entry.state, entry.action, next_)
        except Exception as exc:
            self._entries.clear()

            raise RuntimeFailure(
                f"hook {entry.hook!r} failed for action {entry.action!r}"
            ) from exc

        if not called:
            logger.debug("Hook %r returned without advancing the queue", entry.hook)
