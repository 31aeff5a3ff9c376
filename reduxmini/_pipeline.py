"""The dispatch pipeline.

A dispatch is computed in a single synchronous collection pass: for every
action, in order, its before-hooks are queued against the state as it
stood before the action, its reducers are applied to the working state,
and its after-hooks are queued against the result. No hook runs during
this pass.
"""

from __future__ import annotations

import logging

from typing import Any, Mapping, NamedTuple, Sequence

from ._errors import InvalidArgument, RuntimeFailure
from ._hooks import HookQueue
from ._reducer import Action
from ._registry import Registry
from ._scheduler import Scheduler, call_soon


__all__ = (
    "DispatchPipeline",
    "DispatchResult",

    "normalize_actions"
)


logger = logging.getLogger(__name__)


def normalize_actions(actions: Any) -> list[Action]:
    if isinstance(actions, Mapping):
        return [actions]

    if isinstance(actions, Sequence) and not isinstance(actions, (str, bytes)):
        for index, action in enumerate(actions):
            if not isinstance(action, Mapping):
                raise InvalidArgument(
                    f"Action at index {index} must be a mapping, got {action!r}"
                )

        return list(actions)

    raise InvalidArgument(
        f"Actions must be a mapping or a sequence of mappings, got {actions!r}"
    )


class DispatchResult(NamedTuple):
    state: dict[str, Any]
    actions: list[Action]
    hooks: HookQueue


class DispatchPipeline:
    def __init__(
        self,
        registry: Registry,
        action_key: str = "type",
        scheduler: Scheduler = call_soon
    ) -> None:
        self.registry = registry
        self.action_key = action_key
        self.scheduler = scheduler

    def run(self, state: Mapping[str, Any], actions: Any) -> DispatchResult:
        normalized = normalize_actions(actions)

        working = dict(state)
        hooks = HookQueue(self.scheduler)

        for action in normalized:
            event = action.get(self.action_key)

            reducers = self.registry.reducers.lookup(event)
            before = self.registry.before.lookup(event)
            after = self.registry.after.lookup(event)

            for hook in before:
                hooks.push(hook, working, action)

            for reducer in reducers:
                try:
                    working[reducer.path] = reducer(working.get(reducer.path), action)
                except Exception as exc:
                    raise RuntimeFailure(
                        f"Reducer for {reducer.path!r} failed on {event!r}"
                    ) from exc

            for hook in after:
                hooks.push(hook, working, action)

            logger.debug(
                "Reduced %r: %d reducers, %d before hooks, %d after hooks",
                event, len(reducers), len(before), len(after)
            )

        return DispatchResult(working, normalized, hooks)
