from __future__ import annotations

from typing import Optional

from redis import Redis

from ._errors import CacheError


__all__ = (
    "RedisSessionStorage",

    "default_redis_namespace"
)


def default_redis_namespace() -> str:
    return "reduxmini"


class RedisSessionStorage:
    def __init__(
        self,
        client: Redis,
        namespace: Optional[str] = None
    ) -> None:
        self._client = client
        self._namespace = namespace or default_redis_namespace()

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get_item(self, key: str) -> Optional[str]:
        value = self._client.get(self._key(key))

        if value is None:
            return None

        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise CacheError(f"Value under {self._key(key)!r} is not UTF-8") from exc

        return value

    def set_item(self, key: str, value: str) -> None:
        self._client.set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self._client.delete(self._key(key))
