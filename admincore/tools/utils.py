"""Spreadsheet column naming and request header helpers."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from typing import Union

REQUEST_ID_KEY = "x-request-id"
USERNAME_KEY = "x-username"

COLS = ["", *"ABCDEFGHIJKLMNOPQRSTUVWXYZ"]

Metadata = Union[Mapping[str, Union[str, Iterable[str]]], Iterable[tuple[str, str]], None]


def convert_num_to_chars(num: int) -> str:
    """Return the spreadsheet column name for the zero-based index ``num``."""
    chars = ""
    v = num + 1
    while v > 0:
        k = v % 26 or 26
        v = (v - k) // 26
        chars = COLS[k] + chars
    return chars


def _header_values(metadata: Metadata, key: str) -> list[str]:
    if not metadata:
        return []
    wanted = key.lower()
    pairs = metadata.items() if isinstance(metadata, Mapping) else metadata
    found: list[str] = []
    for name, value in pairs:
        if name.lower() != wanted:
            continue
        if isinstance(value, (str, bytes)):
            found.append(value.decode() if isinstance(value, bytes) else value)
        else:
            found.extend(value)
    return found


def get_header_first(metadata: Metadata, key: str) -> str:
    """Return the first value of header ``key`` in ``metadata``, or an empty string.

    ``metadata`` is a mapping of names to a value or list of values, or a
    sequence of (name, value) pairs; names are compared case-insensitively.
    """
    values = _header_values(metadata, key)
    return values[0] if values else ""


def new_request_id() -> str:
    """Generate a fresh request id."""
    return str(uuid.uuid4())


def get_request_id(metadata: Metadata) -> str:
    """Return the request id from ``metadata``, generating one if it is missing."""
    return get_header_first(metadata, REQUEST_ID_KEY) or new_request_id()


def get_username(metadata: Metadata) -> str:
    """Return the username header from ``metadata``, or an empty string."""
    return get_header_first(metadata, USERNAME_KEY)