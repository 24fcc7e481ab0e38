"""Distributed locks kept in Redis."""

from __future__ import annotations

import base64
import os
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import redis

from admincore.storage.types import AdapterLocker

_TOKEN_LENGTH = 22

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""

_REFRESH_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("pexpire", KEYS[1], ARGV[2])
else
    return 0
end
"""

_PTTL_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("pttl", KEYS[1])
else
    return -3
end
"""


class LockNotObtained(Exception):
    """Raised when a lock is already held by someone else."""


class LockNotHeld(Exception):
    """Raised when releasing a lock that is no longer held."""


@dataclass
class _LockOptions:
    retry_count: int = 0
    retry_delay: float = 0.1
    metadata: str = ""


def _new_token() -> str:
    return base64.urlsafe_b64encode(os.urandom(16)).rstrip(b"=").decode()


def _to_millis(seconds: float) -> int:
    return int(seconds * 1000)


@dataclass
class Lock:
    """A lock held on ``key``, identified by a random ``token``."""

    client: redis.Redis
    key: str
    token: str

    @property
    def metadata(self) -> str:
        """The metadata given when the lock was obtained."""
        return self.token[_TOKEN_LENGTH:]

    def ttl(self) -> timedelta:
        """Time left on the lock, zero when it is no longer held."""
        result = int(self.client.eval(_PTTL_SCRIPT, 1, self.key, self.token))
        if result < 0:
            return timedelta(0)
        return timedelta(milliseconds=result)

    def refresh(self, ttl: float) -> None:
        """Extend the lock to ``ttl`` seconds from now."""
        result = self.client.eval(_REFRESH_SCRIPT, 1, self.key, self.token, _to_millis(ttl))
        if not int(result):
            raise LockNotObtained(f"lock {self.key} not obtained")

    def release(self) -> None:
        """Give up the lock."""
        result = self.client.eval(_RELEASE_SCRIPT, 1, self.key, self.token)
        if not int(result):
            raise LockNotHeld(f"lock {self.key} not held")

    def __enter__(self) -> Lock:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


class RedisLocker(AdapterLocker):
    """Hands out locks stored on a Redis server."""

    name = "redis"

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    def lock(self, key: str, ttl: int, **kwargs: Any) -> Lock:
        """Obtain a lock on ``key`` for ``ttl`` seconds.

        Accepts ``retry_count``, ``retry_delay`` (seconds) and ``metadata``.
        """
        options = _LockOptions(**kwargs)
        token = _new_token() + options.metadata
        millis = _to_millis(ttl)
        for attempt in range(options.retry_count + 1):
            if self.client.set(key, token, nx=True, px=millis):
                return Lock(self.client, key, token)
            if attempt < options.retry_count:
                time.sleep(options.retry_delay)
        raise LockNotObtained(f"lock {key} not obtained")