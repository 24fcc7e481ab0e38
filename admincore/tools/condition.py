"""Query conditions collected from search structures, and search tag parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class GormPublic:
    """Where, or and order clauses shared by conditions and joins."""

    where: dict[str, list[Any]] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    or_: dict[str, list[Any]] = field(default_factory=dict)

    def set_where(self, key: str, values: list[Any]) -> None:
        """Set the arguments of the where clause ``key``."""
        self.where[key] = values

    def set_or(self, key: str, values: list[Any]) -> None:
        """Set the arguments of the or clause ``key``."""
        self.or_[key] = values

    def set_order(self, key: str) -> None:
        """Append an order clause."""
        self.order.append(key)


@dataclass
class GormJoin(GormPublic):
    """A joined table with its own clauses."""

    join_type: str = ""
    join_on: str = ""

    def set_join_on(self, join_type: str, on: str) -> None:
        """Joins cannot be nested; always returns None."""
        return None


@dataclass
class GormCondition(GormPublic):
    """The top-level condition with its joins."""

    join: list[GormJoin] = field(default_factory=list)

    def set_join_on(self, join_type: str, on: str) -> GormJoin:
        """Add a join and return it so its clauses can be filled in."""
        joined = GormJoin(join_type=join_type, join_on=on)
        self.join.append(joined)
        return joined


@dataclass
class SearchTag:
    """The parts of a ``search`` tag."""

    type: str = ""
    column: str = ""
    table: str = ""
    on: list[str] = field(default_factory=list)
    join: str = ""


def make_tag(tag: str) -> SearchTag:
    """Parse a tag such as ``type:exact;column:id;table:users``."""
    result = SearchTag()
    for part in tag.split(";"):
        key, *rest = part.split(":")
        if not rest:
            continue
        if key == "type":
            result.type = rest[0]
        elif key == "column":
            result.column = rest[0]
        elif key == "table":
            result.table = rest[0]
        elif key == "on":
            result.on = rest
        elif key == "join":
            result.join = rest[0]
    return result