"""Log levels for RPC status codes and options of the logging interceptors."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping
from datetime import timedelta
from enum import IntEnum
from typing import Any, Optional

from admincore.logging.fields import Fields

_log = logging.getLogger(__name__)

RFC3339 = "%Y-%m-%dT%H:%M:%S%z"


class Level(IntEnum):
    """Log levels, valued so they can be passed to the standard logging module."""

    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL


_CODE_NAMES = {
    0: "OK",
    1: "Canceled",
    2: "Unknown",
    3: "InvalidArgument",
    4: "DeadlineExceeded",
    5: "NotFound",
    6: "AlreadyExists",
    7: "PermissionDenied",
    8: "ResourceExhausted",
    9: "FailedPrecondition",
    10: "Aborted",
    11: "OutOfRange",
    12: "Unimplemented",
    13: "Internal",
    14: "Unavailable",
    15: "DataLoss",
    16: "Unauthenticated",
}


class Code(IntEnum):
    """RPC status codes."""

    OK = 0
    CANCELED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    def __str__(self) -> str:
        return _CODE_NAMES[self.value]


_SERVER_LEVELS = {
    Code.OK: Level.INFO,
    Code.CANCELED: Level.INFO,
    Code.UNKNOWN: Level.ERROR,
    Code.INVALID_ARGUMENT: Level.INFO,
    Code.DEADLINE_EXCEEDED: Level.WARN,
    Code.NOT_FOUND: Level.INFO,
    Code.ALREADY_EXISTS: Level.INFO,
    Code.PERMISSION_DENIED: Level.WARN,
    Code.UNAUTHENTICATED: Level.INFO,
    Code.RESOURCE_EXHAUSTED: Level.WARN,
    Code.FAILED_PRECONDITION: Level.WARN,
    Code.ABORTED: Level.WARN,
    Code.OUT_OF_RANGE: Level.WARN,
    Code.UNIMPLEMENTED: Level.ERROR,
    Code.INTERNAL: Level.ERROR,
    Code.UNAVAILABLE: Level.WARN,
    Code.DATA_LOSS: Level.ERROR,
}

_CLIENT_LEVELS = {
    Code.OK: Level.DEBUG,
    Code.CANCELED: Level.DEBUG,
    Code.UNKNOWN: Level.INFO,
    Code.INVALID_ARGUMENT: Level.DEBUG,
    Code.DEADLINE_EXCEEDED: Level.INFO,
    Code.NOT_FOUND: Level.DEBUG,
    Code.ALREADY_EXISTS: Level.DEBUG,
    Code.PERMISSION_DENIED: Level.INFO,
    Code.UNAUTHENTICATED: Level.INFO,
    Code.RESOURCE_EXHAUSTED: Level.DEBUG,
    Code.FAILED_PRECONDITION: Level.DEBUG,
    Code.ABORTED: Level.DEBUG,
    Code.OUT_OF_RANGE: Level.DEBUG,
    Code.UNIMPLEMENTED: Level.WARN,
    Code.INTERNAL: Level.WARN,
    Code.UNAVAILABLE: Level.WARN,
    Code.DATA_LOSS: Level.WARN,
}


def default_code_to_level(code: int) -> Level:
    """Server-side log level for a status code; unknown codes log as errors."""
    return _SERVER_LEVELS.get(code, Level.ERROR)


def default_client_code_to_level(code: int) -> Level:
    """Client-side log level for a status code; unknown codes log as info."""
    return _CLIENT_LEVELS.get(code, Level.INFO)


def _microseconds(duration: timedelta | float) -> int:
    if isinstance(duration, timedelta):
        return duration // timedelta(microseconds=1)
    return int(duration * 1_000_000)


def duration_to_time_millis_field(duration: timedelta | float) -> Fields:
    """Fields holding the duration in milliseconds under ``grpc.time_ms``."""
    return Fields.of("grpc.time_ms", _microseconds(duration) / 1000)


def duration_to_duration_field(duration: timedelta | float) -> dict[str, Any]:
    """A mapping holding the duration itself under ``grpc.duration``."""
    return {"grpc.duration": duration}


def default_decider(full_method: str, error: Optional[BaseException]) -> bool:
    """Log every call."""
    return True


def default_error_to_code(error: Optional[BaseException]) -> Code:
    """OK without an error, the error's ``code`` if it has one, else UNKNOWN."""
    if error is None:
        return Code.OK
    code = getattr(error, "code", None)
    if callable(code):
        code = code()
    if isinstance(code, int) and code in _CODE_NAMES:
        return Code(code)
    return Code.UNKNOWN


def default_message_producer(
    context: Optional[Mapping[str, Any]],
    msg: str,
    level: Level,
    code: Code,
    error: Optional[BaseException],
    duration: Fields,
) -> None:
    """Log ``msg`` at ``level`` with the context fields, duration and code."""
    fields = duration.copy()
    fields.set("grpc.code", str(code))
    merged = dict(context or {})
    merged.update(fields.values())
    text = msg if error is None else f"{msg} {error}"
    _log.log(int(level), text, extra={"fields": merged})


@dataclasses.dataclass
class LoggingOptions:
    """How the logging interceptors decide on, classify and write log lines."""

    level_func: Callable[[int], Level] = default_code_to_level
    should_log: Callable[[str, Optional[BaseException]], bool] = default_decider
    code_func: Callable[[Optional[BaseException]], Code] = default_error_to_code
    duration_func: Callable[[Any], Fields] = duration_to_time_millis_field
    message_func: Callable[..., None] = default_message_producer
    timestamp_format: str = RFC3339


def evaluate_server_options(**kwargs: Any) -> LoggingOptions:
    """Server-side options: defaults with server levels, overridden by ``kwargs``."""
    return dataclasses.replace(LoggingOptions(level_func=default_code_to_level), **kwargs)


def evaluate_client_options(**kwargs: Any) -> LoggingOptions:
    """Client-side options: defaults with client levels, overridden by ``kwargs``."""
    return dataclasses.replace(
        LoggingOptions(level_func=default_client_code_to_level), **kwargs
    )