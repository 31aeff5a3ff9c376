from __future__ import annotations

from ._hooks import HookRegistry
from ._reducer import ReducerRegistry


__all__ = (
    "Registry",
)


class Registry:
    reducers: ReducerRegistry
    before: HookRegistry
    after: HookRegistry

    load_from_cache: bool

    def __init__(self) -> None:
        self.reducers = ReducerRegistry()
        self.before = HookRegistry("before")
        self.after = HookRegistry("after")

        self.load_from_cache = False

    def clear(self) -> None:
        self.reducers.clear()
        self.before.clear()
        self.after.clear()

        self.load_from_cache = False
