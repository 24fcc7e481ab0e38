"""In-process cache keeping string values with expiry times."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Callable

from admincore.storage.types import AdapterCache, CacheError


@dataclass
class _Item:
    value: str
    expires: float


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format(Decimal(repr(value)).normalize(), "f")
    raise TypeError(f"unable to cast {value!r} of type {type(value).__name__} to string")


def _to_int(text: str) -> int:
    body = text.lstrip("+-")
    lowered = body.lower()
    try:
        if lowered.startswith(("0x", "0o", "0b")):
            return int(text, 0)
        if len(body) > 1 and body.startswith("0"):
            return int(text, 8)
        return int(text, 10)
    except ValueError as exc:
        raise CacheError(f"unable to cast {text!r} to int") from exc


class MemoryCache(AdapterCache):
    """A thread-safe cache held in memory."""

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._items: dict[str, _Item] = {}
        self._lock = threading.RLock()
        self._clock = clock

    def _get_item(self, key: str) -> _Item | None:
        item = self._items.get(key)
        if item is None:
            return None
        if item.expires < self._clock():
            self._items.pop(key, None)
            return None
        return item

    def _require_item(self, key: str) -> _Item:
        item = self._get_item(key)
        if item is None:
            raise CacheError(f"{key} not exist")
        return item

    def get(self, key: str) -> str:
        """Return the value for ``key``, or an empty string if absent or expired."""
        with self._lock:
            item = self._get_item(key)
            return "" if item is None else item.value

    def set(self, key: str, value: Any, expire: int) -> None:
        """Store ``value`` as a string for ``expire`` seconds."""
        text = _to_string(value)
        with self._lock:
            self._items[key] = _Item(text, self._clock() + expire)

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def hash_get(self, hk: str, key: str) -> str:
        return self.get(hk + key)

    def hash_del(self, hk: str, key: str) -> None:
        self.delete(hk + key)

    def increase(self, key: str) -> None:
        self._calculate(key, 1)

    def decrease(self, key: str) -> None:
        self._calculate(key, -1)

    def _calculate(self, key: str, step: int) -> None:
        with self._lock:
            item = self._require_item(key)
            item.value = str(_to_int(item.value) + step)

    def expire(self, key: str, duration: timedelta | float) -> None:
        """Make ``key`` expire ``duration`` (seconds or timedelta) from now."""
        seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
        with self._lock:
            item = self._require_item(key)
            item.expires = self._clock() + seconds