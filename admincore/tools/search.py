"""Build query conditions from dataclasses whose fields carry search tags.

Supported tag types: exact/iexact, contains/icontains, gt/gte, lt/lte,
startswith/istartswith, endswith/iendswith, in, isnull, order and left
(a left join whose nested dataclass supplies the joined conditions).
"""

from __future__ import annotations

import dataclasses
from typing import Any

from admincore.tools.condition import GormCondition, GormJoin, SearchTag, make_tag

FROM_QUERY_TAG = "search"
MYSQL = "mysql"
POSTGRES = "postgres"

_COMPARISONS = {
    "exact": "= ?",
    "iexact": "= ?",
    "gt": "> ?",
    "gte": ">= ?",
    "lt": "< ?",
    "lte": "<= ?",
    "in": "in (?)",
}

# (prefix, suffix, case-insensitive) for pattern matches
_PATTERNS = {
    "contains": ("%", "%", False),
    "icontains": ("%", "%", True),
    "startswith": ("", "%", False),
    "istartswith": ("", "%", True),
    "endswith": ("%", "", False),
    "iendswith": ("%", "", True),
}


def search_field(tag: str, **kwargs: Any) -> Any:
    """A dataclass field carrying the search tag ``tag``."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[FROM_QUERY_TAG] = tag
    return dataclasses.field(metadata=metadata, **kwargs)


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, int, float, complex)):
        return not value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(_is_zero(getattr(value, f.name)) for f in dataclasses.fields(value))
    return False


def _quote(driver: str, name: str) -> str:
    return name if driver == POSTGRES else f"`{name}`"


def _apply(
    driver: str, tag: SearchTag, condition: GormCondition | GormJoin, value: Any
) -> None:
    column = f"{_quote(driver, tag.table)}.{_quote(driver, tag.column)}"
    kind = tag.type
    if kind == "left":
        if len(tag.on) < 2:
            raise ValueError("a left join tag needs two 'on' columns")
        q = lambda name: _quote(driver, name)  # noqa: E731
        joined = condition.set_join_on(
            kind,
            f"left join {q(tag.join)} on {q(tag.join)}.{q(tag.on[0])} "
            f"= {q(tag.table)}.{q(tag.on[1])}",
        )
        if joined is None:
            raise TypeError("joins cannot be nested")
        resolve_search_query(driver, value, joined)
    elif kind in _COMPARISONS:
        condition.set_where(f"{column} {_COMPARISONS[kind]}", [value])
    elif kind in _PATTERNS:
        prefix, suffix, insensitive = _PATTERNS[kind]
        operator = "ilike" if insensitive and driver == POSTGRES else "like"
        condition.set_where(f"{column} {operator} ?", [f"{prefix}{value}{suffix}"])
    elif kind == "isnull":
        condition.set_where(f"{column} isnull", [])
    elif kind == "order":
        text = str(value)
        if text.lower() in ("desc", "asc"):
            condition.set_order(f"{column} {text}")


def resolve_search_query(
    driver: str, query: Any, condition: GormCondition | GormJoin
) -> None:
    """Fill ``condition`` from the tagged fields of the dataclass ``query``.

    Fields without a tag must hold dataclasses, which are searched in turn;
    fields tagged ``-`` and fields holding zero values are skipped.
    """
    if not dataclasses.is_dataclass(query) or isinstance(query, type):
        raise TypeError(f"search query must be a dataclass instance, not {type(query).__name__}")
    for f in dataclasses.fields(query):
        value = getattr(query, f.name)
        tag = f.metadata.get(FROM_QUERY_TAG)
        if tag is None:
            resolve_search_query(driver, value, condition)
            continue
        if tag == "-":
            continue
        parsed = make_tag(tag)
        if _is_zero(value):
            continue
        _apply(driver, parsed, condition, value)