from __future__ import annotations

import logging

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from pydantic import RootModel, ValidationError
from pydantic_core import PydanticSerializationError

from ._errors import CacheError
from ._reducer import Action


__all__ = (
    "CACHE_KEY",
    "ActionLog",
    "MemorySessionStorage",
    "SessionStorage",

    "dump_actions",
    "load_actions",
    "session_storage"
)


logger = logging.getLogger(__name__)


CACHE_KEY = "redux-mini-cache"


@runtime_checkable
class SessionStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemorySessionStorage:
    _items: dict[str, str]

    def __init__(self) -> None:
        self._items = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


session_storage = MemorySessionStorage()


class ActionLog(RootModel[list[dict[str, Any]]]):
    pass


def load_actions(
    storage: Optional[SessionStorage],
    key: str = CACHE_KEY
) -> Optional[list[dict[str, Any]]]:
    if storage is None:
        return None

    data = storage.get_item(key)

    if data is None:
        return None

    try:
        log = ActionLog.model_validate_json(data)
    except ValidationError as exc:
        raise CacheError(f"Cached action log under {key!r} is malformed") from exc

    logger.debug("Loaded %d cached actions from %r", len(log.root), key)

    return log.root


def dump_actions(
    storage: Optional[SessionStorage],
    actions: Sequence[Action],
    key: str = CACHE_KEY
) -> bool:
    if storage is None:
        return False

    try:
        data = ActionLog([dict(action) for action in actions]).model_dump_json()
    except (ValidationError, PydanticSerializationError) as exc:
        raise CacheError(f"Action log cannot be persisted under {key!r}") from exc

    storage.set_item(key, data)

    logger.debug("Persisted %d actions under %r", len(actions), key)

    return True
