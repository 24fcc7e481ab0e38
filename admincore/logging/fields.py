"""A mutable collection of structured log fields."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class Fields:
    """Named values attached to a log line."""

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._values: dict[str, Any] = dict(values or {})
        self._values.update(kwargs)

    @classmethod
    def of(cls, key: str, value: Any) -> Fields:
        """Fields holding the single pair ``key``/``value``."""
        fields = cls()
        fields.set(key, value)
        return fields

    def set(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value``."""
        self._values[key] = value

    def values(self) -> dict[str, Any]:
        """The fields as a dictionary."""
        return self._values

    def merge(self, other: Fields) -> None:
        """Copy every field of ``other`` into these fields."""
        for key, value in other.values().items():
            self.set(key, value)

    def copy(self) -> Fields:
        """An independent copy of these fields."""
        return Fields(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fields):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Fields({self._values!r})"