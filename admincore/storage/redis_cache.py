"""Cache backed by a Redis server."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta
from typing import Any

import redis

from admincore.storage.types import AdapterCache, CacheError


@contextmanager
def _translate() -> Iterator[None]:
    try:
        yield
    except redis.exceptions.RedisError as exc:
        raise CacheError(str(exc)) from exc


def _decode(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    return str(value)


class RedisCache(AdapterCache):
    """A cache that stores its data on a Redis server."""

    name = "redis"

    def __init__(self, client: redis.Redis | None = None, **options: Any) -> None:
        """Use ``client`` or build one from ``options``, then check the connection."""
        self._client = client if client is not None else redis.Redis(**options)
        with _translate():
            self._client.ping()

    @property
    def client(self) -> redis.Redis:
        """The underlying Redis client."""
        return self._client

    def get(self, key: str) -> str:
        with _translate():
            value = self._client.get(key)
        if value is None:
            raise CacheError(f"{key} not exist")
        return _decode(value)

    def set(self, key: str, value: Any, expire: int) -> None:
        """Store ``value`` for ``expire`` seconds; zero or less keeps it forever."""
        with _translate():
            self._client.set(key, value, ex=expire if expire > 0 else None)

    def delete(self, key: str) -> None:
        with _translate():
            self._client.delete(key)

    def hash_get(self, hk: str, key: str) -> str:
        with _translate():
            value = self._client.hget(hk, key)
        if value is None:
            raise CacheError(f"{hk} {key} not exist")
        return _decode(value)

    def hash_del(self, hk: str, key: str) -> None:
        with _translate():
            self._client.hdel(hk, key)

    def increase(self, key: str) -> None:
        with _translate():
            self._client.incr(key)

    def decrease(self, key: str) -> None:
        with _translate():
            self._client.decr(key)

    def expire(self, key: str, duration: timedelta | float) -> None:
        """Make ``key`` expire ``duration`` (seconds or timedelta) from now."""
        if not isinstance(duration, timedelta):
            duration = timedelta(seconds=duration)
        with _translate():
            self._client.pexpire(key, duration)