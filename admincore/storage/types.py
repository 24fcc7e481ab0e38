"""Abstract interfaces shared by the cache, queue and locker back ends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from admincore.storage.message import Message

PREFIX_KEY = "__host"

ConsumerFunc = Callable[["Message"], None]
"""A queue consumer; raising an exception marks the message as failed."""


class CacheError(Exception):
    """Raised when a cache operation cannot be carried out."""


class _Named:
    name: str = ""

    def __str__(self) -> str:
        return self.name


class AdapterCache(_Named, ABC):
    """A key/value cache with expiry, counters and hash fields."""

    @abstractmethod
    def get(self, key: str) -> str:
        """Return the value stored under ``key``."""

    @abstractmethod
    def set(self, key: str, value: Any, expire: int) -> None:
        """Store ``value`` under ``key`` for ``expire`` seconds."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``."""

    @abstractmethod
    def hash_get(self, hk: str, key: str) -> str:
        """Return field ``key`` of hash ``hk``."""

    @abstractmethod
    def hash_del(self, hk: str, key: str) -> None:
        """Remove field ``key`` of hash ``hk``."""

    @abstractmethod
    def increase(self, key: str) -> None:
        """Add one to the integer stored under ``key``."""

    @abstractmethod
    def decrease(self, key: str) -> None:
        """Subtract one from the integer stored under ``key``."""

    @abstractmethod
    def expire(self, key: str, duration: timedelta | float) -> None:
        """Make ``key`` expire ``duration`` from now."""


class AdapterQueue(_Named, ABC):
    """A message queue that delivers messages to registered consumers."""

    @abstractmethod
    def append(self, message: Message) -> None:
        """Publish ``message`` to its stream."""

    @abstractmethod
    def register(self, name: str, consumer: ConsumerFunc) -> None:
        """Attach ``consumer`` to the stream called ``name``."""

    @abstractmethod
    def run(self) -> None:
        """Block while consumers are served."""

    @abstractmethod
    def shutdown(self) -> None:
        """Stop serving consumers."""


class AdapterLocker(_Named, ABC):
    """A distributed lock provider."""

    @abstractmethod
    def lock(self, key: str, ttl: int, **kwargs: Any) -> Any:
        """Obtain a lock on ``key`` held for ``ttl`` seconds."""