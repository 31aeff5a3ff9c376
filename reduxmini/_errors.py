__all__ = (
    "CacheError",
    "InvalidArgument",
    "RuntimeFailure",
    "StoreError",
)


class StoreError(Exception):
    pass


class InvalidArgument(StoreError, TypeError):
    pass


class RuntimeFailure(StoreError):
    pass


class CacheError(StoreError):
    pass
