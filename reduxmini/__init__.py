from ._cache import (
    CACHE_KEY,
    ActionLog,
    MemorySessionStorage,
    SessionStorage,
    session_storage
)
from ._errors import CacheError, InvalidArgument, RuntimeFailure, StoreError
from ._hooks import Hook, HookQueue, HookRegistry, Next
from ._pipeline import DispatchPipeline, DispatchResult, normalize_actions
from ._reducer import Action, Reducer, ReducerRegistry, RegisteredReducer
from ._registry import Registry
from ._scheduler import Scheduler, call_soon, run_deferred
from ._store import Store, StoreOptions, Subscriber


__all__ = (
    "CACHE_KEY",
    "Action",
    "ActionLog",
    "CacheError",
    "DispatchPipeline",
    "DispatchResult",
    "Hook",
    "HookQueue",
    "HookRegistry",
    "InvalidArgument",
    "MemorySessionStorage",
    "Next",
    "Reducer",
    "ReducerRegistry",
    "RegisteredReducer",
    "Registry",
    "RuntimeFailure",
    "Scheduler",
    "SessionStorage",
    "Store",
    "StoreError",
    "StoreOptions",
    "Subscriber",

    "call_soon",
    "normalize_actions",
    "run_deferred",
    "session_storage"
)
