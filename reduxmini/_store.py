from __future__ import annotations

import logging

from types import MappingProxyType
from typing import Any, Callable, ClassVar, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ._cache import SessionStorage, dump_actions, load_actions, session_storage
from ._errors import InvalidArgument
from ._hooks import Hook
from ._pipeline import DispatchPipeline
from ._reducer import Action, RegisteredReducer, Reducer, _require_callable
from ._registry import Registry
from ._scheduler import Scheduler, call_soon, run_deferred


__all__ = (
    "Store",
    "StoreOptions",
    "Subscriber",
)


logger = logging.getLogger(__name__)


Subscriber = Callable[[Mapping[str, Any]], None]


class StoreOptions(BaseModel):
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
        frozen=True
    )

    subscribers: list[Callable[..., Any]] = Field(default_factory=list)
    action_key: str = "type"
    enable_caching: bool = False
    should_load_from_cache: bool = False

    @field_validator("action_key")
    @classmethod
    def validate_action_key(cls, value: str) -> str:
        if not value:
            raise ValueError("action_key must not be empty")

        return value

    @field_validator("enable_caching", "should_load_from_cache", mode="before")
    @classmethod
    def validate_flag(cls, value: Any) -> bool:
        return bool(value)


def _parse_options(options: Union[StoreOptions, Mapping[str, Any], None]) -> StoreOptions:
    if options is None:
        return StoreOptions()

    if isinstance(options, StoreOptions):
        return options

    if not isinstance(options, Mapping):
        raise InvalidArgument(f"Options must be a mapping, got {options!r}")

    try:
        return StoreOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise InvalidArgument(str(exc)) from exc


class Store:
    """Single process-wide store driven by registered reducers.

    Constructing a ``Store`` while one exists returns the existing
    instance and ignores the arguments; ``Store.clear_all()`` drops it.
    """

    registry: ClassVar[Registry] = Registry()

    _instance: ClassVar[Optional[Store]] = None

    _initialized: bool

    _state: dict[str, Any]
    _actions: list[Action]
    _subscribers: list[Subscriber]

    _caching_enabled: bool
    _load_from_cache: bool
    _storage: Optional[SessionStorage]
    _pipeline: DispatchPipeline
    _starting: bool

    def __new__(cls, *args: Any, **kwargs: Any) -> Store:
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._initialized = False

            cls._instance = instance

        return cls._instance

    def __init__(
        self,
        initial_data: Optional[Mapping[str, Any]] = None,
        options: Union[StoreOptions, Mapping[str, Any], None] = None,
        *,
        storage: Optional[SessionStorage] = session_storage,
        scheduler: Scheduler = call_soon,
        registry: Optional[Registry] = None
    ) -> None:
        if self._initialized:
            return

        self._initialized = True

        try:
            self._setup(initial_data, options, storage, scheduler, registry)
            self._startup()
        except Exception:
            type(self)._instance = None

            raise

    def _setup(
        self,
        initial_data: Optional[Mapping[str, Any]],
        options: Union[StoreOptions, Mapping[str, Any], None],
        storage: Optional[SessionStorage],
        scheduler: Scheduler,
        registry: Optional[Registry]
    ) -> None:
        if initial_data is not None and not isinstance(initial_data, Mapping):
            raise InvalidArgument(
                f"Initial data must be a mapping, got {initial_data!r}"
            )

        parsed = _parse_options(options)

        self._state = dict(initial_data or {})
        self._actions = []
        self._subscribers = list(parsed.subscribers)

        self._caching_enabled = parsed.enable_caching
        self._load_from_cache = parsed.should_load_from_cache
        self._storage = storage
        self._pipeline = DispatchPipeline(
            registry or type(self).registry,
            parsed.action_key,
            scheduler
        )
        self._starting = True

    def _startup(self) -> None:
        cached = None

        if self._load_from_cache or self._pipeline.registry.load_from_cache:
            cached = load_actions(self._storage)

            if cached is None:
                logger.info("No cached actions found, starting fresh")

        if cached is not None:
            logger.debug("Rehydrating store from %d cached actions", len(cached))
            actions: Any = cached
        else:
            actions = {self.action_key: "INIT"}

        self._reduce(actions, self._started)

    def _started(self, state: Mapping[str, Any]) -> None:
        self._starting = False

        logger.debug("Store started with %d keys", len(state))

    @property
    def action_key(self) -> str:
        return self._pipeline.action_key

    def get_state(self) -> Mapping[str, Any]:
        return MappingProxyType(self._state)

    def subscribe(self, callback: Subscriber) -> None:
        _require_callable(callback, "subscriber")

        callback(self.get_state())
        self._subscribers.append(callback)

    def dispatch(self, actions: Union[Action, list[Action]]) -> None:
        self._reduce(actions)

    def get_executed_actions(self) -> list[Action]:
        return list(self._actions)

    def enable_caching(self, flag: Any) -> None:
        self._caching_enabled = bool(flag)

    def is_caching_enabled(self) -> bool:
        return self._caching_enabled

    def is_started(self) -> bool:
        return not self._starting

    def _log_actions(self, actions: list[Action]) -> None:
        if self._caching_enabled:
            dump_actions(self._storage, [*self._actions, *actions])

        self._actions.extend(actions)

    def _reduce(
        self,
        actions: Any,
        done: Optional[Callable[[Mapping[str, Any]], None]] = None
    ) -> None:
        result = self._pipeline.run(self._state, actions)

        self._log_actions(result.actions)

        self._state = {**self._state, **result.state}

        logger.debug(
            "Committed %d actions, %d hooks pending",
            len(result.actions), len(result.hooks)
        )

        for subscriber in list(self._subscribers):
            subscriber(self.get_state())

        if done is not None:
            done(self.get_state())

        run_deferred(result.hooks.step)

    @classmethod
    def register_reducer(cls, path: str, event: str, reducer: Reducer) -> None:
        cls.registry.reducers.register(path, event, reducer)

    @classmethod
    def get_registered_reducers(cls) -> dict[str, list[RegisteredReducer]]:
        return cls.registry.reducers.as_dict()

    @classmethod
    def on_before(cls, event: str, hook: Hook) -> None:
        cls.registry.before.register(event, hook)

    @classmethod
    def on_after(cls, event: str, hook: Hook) -> None:
        cls.registry.after.register(event, hook)

    on_complete = on_after

    @classmethod
    def should_load_from_cache(cls, flag: Any) -> None:
        cls.registry.load_from_cache = bool(flag)

    @classmethod
    def will_load_from_cache(cls) -> bool:
        return cls.registry.load_from_cache

    @classmethod
    def clear_all(cls) -> None:
        cls._instance = None
        cls.registry.clear()

    def __repr__(self) -> str:
        return f"Store(keys={list(self._state)!r}, actions={len(self._actions)})"
