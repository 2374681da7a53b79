from __future__ import annotations

import itertools

from threading import RLock
from typing import Any, Callable, Generic, Optional, TypeVar

from ._actions import Action, ActionTypes, ensure_action
from ._errors import (
    InvalidEnhancerError,
    InvalidListenerError,
    InvalidReducerError,
    ReentrantDispatchError
)
from ._logging import get_logger
from ._reducer import Reducer


A = TypeVar("A")
S = TypeVar("S")


__all__ = (
    "Listener",
    "Store",
    "StoreCreator",
    "StoreEnhancer",
    "Unsubscribe",

    "create_store",
)


Listener = Callable[[], None]
Unsubscribe = Callable[[], None]


logger = get_logger(__name__)


class Store(Generic[S, A]):
    def dispatch(self, action: A) -> A:
        raise NotImplementedError

    def get_state(self) -> S:
        raise NotImplementedError

    def subscribe(self, listener: Listener) -> Unsubscribe:
        raise NotImplementedError

    def replace_reducer(self, next_reducer: Reducer[S, A]) -> None:
        raise NotImplementedError


StoreCreator = Callable[..., Store]
StoreEnhancer = Callable[[StoreCreator], StoreCreator]


def _ensure_reducer(reducer: Any) -> None:
    if not callable(reducer):
        raise InvalidReducerError(
            f"Expected the reducer to be callable, got {type(reducer).__name__}"
        )


class _DefaultStore(Store[S, A]):
    _reducer: Reducer[S, A]
    _state: Optional[S]

    _listeners: dict[int, Listener]
    _listener_ids: itertools.count

    _lock: RLock
    _is_dispatching: bool

    def __init__(
        self,
        reducer: Reducer[S, A],
        preloaded_state: Optional[S] = None
    ) -> None:
        self._reducer = reducer
        self._state = preloaded_state

        self._listeners = {}
        self._listener_ids = itertools.count()

        self._lock = RLock()
        self._is_dispatching = False

    def _ensure_idle(self, operation: str) -> None:
        if self._is_dispatching:
            raise ReentrantDispatchError(
                f"Cannot {operation} while a dispatch is in progress"
            )

    def dispatch(self, action: A) -> A:
        ensure_action(action)

        with self._lock:
            self._ensure_idle("dispatch")

            self._is_dispatching = True

            try:
                # The reducer's result is only published once it returns.
                self._state = self._reducer(self._state, action)

                for listener in list(self._listeners.values()):
                    listener()
            finally:
                self._is_dispatching = False

        return action

    def get_state(self) -> S:
        return self._state  # type: ignore[return-value]

    def subscribe(self, listener: Listener) -> Unsubscribe:
        if not callable(listener):
            raise InvalidListenerError(
                f"Expected the listener to be callable, got {type(listener).__name__}"
            )

        with self._lock:
            listener_id = next(self._listener_ids)
            self._listeners[listener_id] = listener

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    def replace_reducer(self, next_reducer: Reducer[S, A]) -> None:
        _ensure_reducer(next_reducer)

        with self._lock:
            self._ensure_idle("replace the reducer")

            self._reducer = next_reducer

            logger.debug("Reducer replaced", reducer=repr(next_reducer))

            self.dispatch(Action(type=ActionTypes.REPLACE))  # type: ignore[arg-type]


def create_store(
    reducer: Reducer[S, A],
    preloaded_state: Optional[S] = None,
    enhancer: Optional[StoreEnhancer] = None
) -> Store[S, A]:
    _ensure_reducer(reducer)

    if enhancer is not None:
        if not callable(enhancer):
            raise InvalidEnhancerError(
                f"Expected the enhancer to be callable, got {type(enhancer).__name__}"
            )

        return enhancer(create_store)(reducer, preloaded_state)

    store: _DefaultStore[S, A] = _DefaultStore(reducer, preloaded_state)

    if preloaded_state is None:
        init = Action(type=ActionTypes.INIT)
        store.dispatch(init)  # type: ignore[arg-type]

    logger.debug(
        "Store created",
        preloaded=preloaded_state is not None,
        initial_state_type=type(store.get_state()).__name__
    )

    return store
