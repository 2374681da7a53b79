from __future__ import annotations

from functools import reduce
from typing import Any, Callable, Generic, Optional, TypeVar

from ._actions import action_type
from ._errors import StoreError
from ._logging import get_logger
from ._reducer import Reducer
from ._store import (
    Listener,
    Store,
    StoreCreator,
    StoreEnhancer,
    Unsubscribe
)


A = TypeVar("A")
S = TypeVar("S")


__all__ = (
    "Dispatch",
    "Middleware",
    "MiddlewareAPI",

    "apply_middleware",
    "compose",
    "logging_middleware",
)


Dispatch = Callable[[Any], Any]


logger = get_logger(__name__)


def compose(*funcs: Callable) -> Callable:
    """Compose single-argument functions from right to left.

    ``compose(f, g, h)(x)`` is ``f(g(h(x)))``.
    """
    if not funcs:
        return lambda arg: arg

    if len(funcs) == 1:
        return funcs[0]

    return reduce(
        lambda outer, inner: lambda *args, **kwargs: outer(inner(*args, **kwargs)),
        funcs
    )


class MiddlewareAPI(Generic[S, A]):
    def __init__(
        self,
        get_state: Callable[[], S],
        dispatch: Callable[[A], A]
    ) -> None:
        self._get_state = get_state
        self._dispatch = dispatch

    def get_state(self) -> S:
        return self._get_state()

    def dispatch(self, action: A) -> A:
        return self._dispatch(action)


Middleware = Callable[[MiddlewareAPI], Callable[[Dispatch], Dispatch]]


class _EnhancedStore(Store[S, A]):
    def __init__(self, original_store: Store[S, A], dispatch: Dispatch) -> None:
        self._original_store = original_store
        self._dispatch = dispatch

    def dispatch(self, action: A) -> A:
        return self._dispatch(action)

    def get_state(self) -> S:
        return self._original_store.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._original_store.subscribe(listener)

    def replace_reducer(self, next_reducer: Reducer[S, A]) -> None:
        self._original_store.replace_reducer(next_reducer)


def apply_middleware(*middleware: Middleware) -> StoreEnhancer:
    def enhancer(create_store: StoreCreator) -> StoreCreator:
        def create_enhanced_store(
            reducer: Reducer[S, A],
            preloaded_state: Optional[S] = None
        ) -> Store[S, A]:
            original_store = create_store(reducer, preloaded_state)
            enhanced_dispatch: Optional[Dispatch] = None

            def dispatch(action: A) -> A:
                if enhanced_dispatch is None:
                    raise StoreError(
                        "Dispatching while constructing your middleware is not "
                        "allowed; other middleware would not be applied"
                    )

                return enhanced_dispatch(action)

            api: MiddlewareAPI[S, A] = MiddlewareAPI(original_store.get_state, dispatch)
            chain = [factory(api) for factory in middleware]
            enhanced_dispatch = compose(*chain)(original_store.dispatch)

            return _EnhancedStore(original_store, dispatch)

        return create_enhanced_store

    return enhancer


def logging_middleware(api: MiddlewareAPI) -> Callable[[Dispatch], Dispatch]:
    def wrap(next_dispatch: Dispatch) -> Dispatch:
        def dispatch(action: Any) -> Any:
            kind = action_type(action)

            logger.debug("Dispatching action", action_type=kind)

            result = next_dispatch(action)

            logger.debug(
                "Action dispatched",
                action_type=kind,
                state_type=type(api.get_state()).__name__
            )

            return result

        return dispatch

    return wrap
