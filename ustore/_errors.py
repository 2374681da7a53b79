__all__ = (
    "ConcurrencyError",
    "InvalidActionError",
    "InvalidEnhancerError",
    "InvalidListenerError",
    "InvalidReducerError",
    "ReentrantDispatchError",
    "StoreError",
)


class StoreError(Exception):
    pass


class InvalidReducerError(StoreError, TypeError):
    pass


class InvalidEnhancerError(StoreError, TypeError):
    pass


class InvalidActionError(StoreError, TypeError):
    pass


class InvalidListenerError(StoreError, TypeError):
    pass


class ReentrantDispatchError(StoreError, RuntimeError):
    pass


class ConcurrencyError(StoreError):
    pass
