from __future__ import annotations

from typing import Any, Callable, Mapping, NamedTuple, Optional

from ._errors import InvalidArgument


__all__ = (
    "Action",
    "RegisteredReducer",
    "Reducer",
    "ReducerRegistry",
)


Action = Mapping[str, Any]
Reducer = Callable[[Optional[Any], Action], Any]


def _require_name(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidArgument(f"{what} must be a non-empty string, got {value!r}")

    return value


def _require_callable(value: Any, what: str) -> Callable:
    if not callable(value):
        raise InvalidArgument(f"{what} must be callable, got {value!r}")

    return value


class RegisteredReducer(NamedTuple):
    path: str
    event: str
    fn: Reducer

    def __call__(self, state: Optional[Any], action: Action) -> Any:
        return self.fn(state, action)


class ReducerRegistry:
    _reducers: dict[str, list[RegisteredReducer]]

    def __init__(self) -> None:
        self._reducers = {}

    def register(self, path: str, event: str, fn: Reducer) -> RegisteredReducer:
        reducer = RegisteredReducer(
            _require_name(path, "path"),
            _require_name(event, "event name"),
            _require_callable(fn, "reducer")
        )

        self._reducers.setdefault(event, []).append(reducer)

        return reducer

    def lookup(self, event: Any) -> list[RegisteredReducer]:
        if not isinstance(event, str):
            return []

        return list(self._reducers.get(event, ()))

    def as_dict(self) -> dict[str, list[RegisteredReducer]]:
        return {
            event: list(reducers)
            for event, reducers in self._reducers.items()
        }

    def clear(self) -> None:
        self._reducers.clear()

    def __len__(self) -> int:
        return sum(map(len, self._reducers.values()))
