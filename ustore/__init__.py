from ._actions import Action, ActionTypes, is_action
from ._errors import (
    ConcurrencyError,
    InvalidActionError,
    InvalidEnhancerError,
    InvalidListenerError,
    InvalidReducerError,
    ReentrantDispatchError,
    StoreError
)
from ._logging import configure_logging, get_logger
from ._middleware import (
    Dispatch,
    Middleware,
    MiddlewareAPI,
    apply_middleware,
    compose,
    logging_middleware
)
from ._reducer import Reducer, combine_reducers
from ._store import (
    Listener,
    Store,
    StoreCreator,
    StoreEnhancer,
    Unsubscribe,
    create_store
)


__all__ = (
    "Action",
    "ActionTypes",
    "ConcurrencyError",
    "Dispatch",
    "InvalidActionError",
    "InvalidEnhancerError",
    "InvalidListenerError",
    "InvalidReducerError",
    "Listener",
    "Middleware",
    "MiddlewareAPI",
    "Reducer",
    "ReentrantDispatchError",
    "Store",
    "StoreCreator",
    "StoreEnhancer",
    "StoreError",
    "Unsubscribe",

    "apply_middleware",
    "combine_reducers",
    "compose",
    "configure_logging",
    "create_store",
    "get_logger",
    "is_action",
    "logging_middleware",
)
