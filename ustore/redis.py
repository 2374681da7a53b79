from __future__ import annotations

from threading import RLock
from typing import Callable, Generic, Optional, TypeVar, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, field_serializer, field_validator
from redis import Redis, WatchError

from ._errors import ConcurrencyError
from ._logging import get_logger
from ._reducer import Reducer
from ._store import (
    Listener,
    Store,
    StoreCreator,
    StoreEnhancer,
    Unsubscribe
)


__all__ = (
    "NamespaceFactory",

    "default_redis_namespace",
    "redis_persistence",
)


A = TypeVar("A")
S = TypeVar("S", bound=BaseModel)


NamespaceFactory = Callable[[type[BaseModel]], str]


logger = get_logger(__name__)


def default_redis_namespace(state_type: type[BaseModel]) -> str:
    return f"ustore:{state_type.__qualname__}"


def _parse_version(value: Union[UUID, str, bytes]) -> UUID:
    if isinstance(value, UUID):
        return value

    if isinstance(value, bytes):
        value = value.decode()

    return UUID(value)


class _StateContainer(BaseModel, Generic[S]):
    version: UUID
    state: S

    @field_serializer("version")
    def serialize_version(self, value: UUID) -> str:
        return str(value)

    @field_serializer("state")
    def serialize_state(self, value: S) -> str:
        return value.model_dump_json()

    @field_validator("version", mode="before")
    @classmethod
    def validate_version(cls, value: Union[UUID, str, bytes]) -> UUID:
        return _parse_version(value)

    @field_validator("state", mode="before")
    @classmethod
    def validate_state(cls, value: Union[S, str, bytes]) -> S:
        state_model: type[S]
        state_model = cls.__pydantic_generic_metadata__["args"][0]

        if isinstance(value, state_model):
            return value

        assert isinstance(value, (str, bytes))

        return state_model.model_validate_json(value)

    @staticmethod
    def version_key(namespace: str) -> str:
        return f"{namespace}:version"

    @staticmethod
    def state_key(namespace: str) -> str:
        return f"{namespace}:state"


def _get_state_container(
    state_type: type[S],
    client: Redis,
    namespace: str
) -> Optional[_StateContainer[S]]:
    version, state = client.mget(
        _StateContainer.version_key(namespace),
        _StateContainer.state_key(namespace)
    )

    if version is None or state is None:
        return None

    return _StateContainer[state_type](version=version, state=state)  # type: ignore[valid-type]


def _set_state_container(
    container: _StateContainer[S],
    expected_version: Optional[UUID],
    client: Redis,
    namespace: str
) -> None:
    version_key = _StateContainer.version_key(namespace)

    with client.pipeline(transaction=True) as pipe:
        pipe.watch(version_key)

        remote_version = pipe.get(version_key)

        if remote_version is not None:
            remote_version = _parse_version(remote_version)

        if remote_version != expected_version:
            raise ConcurrencyError(
                f"Remote version {remote_version} of {namespace!r} does not "
                f"match the local version {expected_version}"
            )

        pipe.multi()

        data = container.model_dump()

        pipe.mset(
            {
                version_key: data["version"],
                _StateContainer.state_key(namespace): data["state"]
            }
        )

        try:
            pipe.execute()
        except WatchError as error:
            raise ConcurrencyError(
                f"{namespace!r} was modified while being written"
            ) from error


class _Persistence(Generic[S]):
    def __init__(
        self,
        client: Redis,
        namespace: str,
        state_type: type[S],
        version: Optional[UUID],
        state: Optional[S]
    ) -> None:
        self._client = client
        self._namespace = namespace
        self._state_type = state_type
        self._version = version
        self._state = state

    def _resync(self) -> None:
        container = _get_state_container(
            self._state_type,
            self._client,
            self._namespace
        )

        self._version = container.version if container else None
        self._state = container.state if container else None

    def write(self, state: S) -> None:
        if state is self._state:
            return

        container = _StateContainer[self._state_type](  # type: ignore[name-defined]
            version=uuid4(),
            state=state
        )

        try:
            _set_state_container(
                container,
                self._version,
                self._client,
                self._namespace
            )
        except ConcurrencyError:
            logger.warning(
                "State write rejected",
                namespace=self._namespace,
                local_version=str(self._version)
            )

            # Adopt the remote version so the next write can go through.
            self._resync()

            raise

        self._version = container.version
        self._state = state

        logger.debug(
            "State written",
            namespace=self._namespace,
            version=str(self._version)
        )


class _PersistedStore(Store[S, A]):
    def __init__(self, original_store: Store[S, A], persistence: _Persistence[S]) -> None:
        self._original_store = original_store
        self._persistence = persistence
        self._lock = RLock()

    def dispatch(self, action: A) -> A:
        with self._lock:
            self._original_store.dispatch(action)
            self._persistence.write(self._original_store.get_state())

        return action

    def get_state(self) -> S:
        return self._original_store.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._original_store.subscribe(listener)

    def replace_reducer(self, next_reducer: Reducer[S, A]) -> None:
        with self._lock:
            self._original_store.replace_reducer(next_reducer)
            self._persistence.write(self._original_store.get_state())


def redis_persistence(
    client: Redis,
    state_type: type[S],
    namespace: Optional[str] = None,
    namespace_factory: NamespaceFactory = default_redis_namespace
) -> StoreEnhancer:
    """Persist the store's state to Redis after every dispatch.

    A state already stored under the namespace takes precedence over the
    preloaded state passed to ``create_store``. The write happens once all
    listeners have been notified. It checks that the remote version is still
    the one this store last read or wrote and raises ``ConcurrencyError``
    from ``dispatch`` otherwise; the store then adopts the remote version,
    keeps its own state and overwrites the remote state on its next write.
    """
    resolved_namespace = namespace or namespace_factory(state_type)

    def enhancer(create_store: StoreCreator) -> StoreCreator:
        def create_persisted_store(
            reducer: Reducer[S, A],
            preloaded_state: Optional[S] = None
        ) -> Store[S, A]:
            container = _get_state_container(
                state_type,
                client,
                resolved_namespace
            )

            if container is not None:
                logger.debug(
                    "State loaded",
                    namespace=resolved_namespace,
                    version=str(container.version)
                )

                preloaded_state = container.state

            store = create_store(reducer, preloaded_state)

            persistence = _Persistence(
                client,
                resolved_namespace,
                state_type,
                container.version if container else None,
                container.state if container else None
            )

            persistence.write(store.get_state())

            return _PersistedStore(store, persistence)

        return create_persisted_store

    return enhancer
