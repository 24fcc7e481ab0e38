"""Queue message carrying an id, a stream name and a value mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from admincore.storage.types import PREFIX_KEY


@dataclass
class Message:
    """A message travelling through a queue."""

    id: str = ""
    stream: str = ""
    values: dict[str, Any] | None = field(default_factory=dict)
    error_count: int = 0

    @property
    def prefix(self) -> str:
        """The host prefix kept in the values, or an empty string."""
        if self.values is None:
            return ""
        value = self.values.get(PREFIX_KEY)
        return value if isinstance(value, str) else ""

    @prefix.setter
    def prefix(self, prefix: str) -> None:
        if self.values is None:
            self.values = {}
        self.values[PREFIX_KEY] = prefix

    def copy(self) -> Message:
        """Return a new message with the same fields and a copy of the values."""
        values = None if self.values is None else dict(self.values)
        return Message(
            id=self.id,
            stream=self.stream,
            values=values,
            error_count=self.error_count,
        )