import logging
from datetime import timedelta

import pytest

from admincore.logging.fields import Fields
from admincore.logging.levels import (
    Code,
    Level,
    LoggingOptions,
    default_client_code_to_level,
    default_code_to_level,
    default_error_to_code,
    default_message_producer,
    duration_to_duration_field,
    duration_to_time_millis_field,
    evaluate_client_options,
    evaluate_server_options,
)


@pytest.mark.parametrize(
    "code, level",
    [
        (Code.OK, Level.INFO),
        (Code.CANCELED, Level.INFO),
        (Code.UNKNOWN, Level.ERROR),
        (Code.DEADLINE_EXCEEDED, Level.WARN),
        (Code.PERMISSION_DENIED, Level.WARN),
        (Code.UNAUTHENTICATED, Level.INFO),
        (Code.UNIMPLEMENTED, Level.ERROR),
        (Code.INTERNAL, Level.ERROR),
        (Code.UNAVAILABLE, Level.WARN),
        (Code.DATA_LOSS, Level.ERROR),
        (99, Level.ERROR),
    ],
)
def test_server_levels(code, level):
    assert default_code_to_level(code) is level


@pytest.mark.parametrize(
    "code, level",
    [
        (Code.OK, Level.DEBUG),
        (Code.UNKNOWN, Level.INFO),
        (Code.DEADLINE_EXCEEDED, Level.INFO),
        (Code.NOT_FOUND, Level.DEBUG),
        (Code.RESOURCE_EXHAUSTED, Level.DEBUG),
        (Code.UNIMPLEMENTED, Level.WARN),
        (Code.INTERNAL, Level.WARN),
        (Code.DATA_LOSS, Level.WARN),
        (99, Level.INFO),
    ],
)
def test_client_levels(code, level):
    assert default_client_code_to_level(code) is level


def test_every_code_has_a_level():
    for code in Code:
        assert default_code_to_level(code) in Level
        assert default_client_code_to_level(code) in Level


def test_code_string_names():
    assert Code.__str__(Code.OK) == "OK"
    assert Code.__str__(Code.INVALID_ARGUMENT) == "InvalidArgument"


def test_time_millis_field():
    fields = duration_to_time_millis_field(timedelta(milliseconds=1500))
    assert fields.values() == {"grpc.time_ms": 1500.0}


def test_time_millis_field_seconds_matches_timedelta():
    a = duration_to_time_millis_field(2)
    b = duration_to_time_millis_field(timedelta(seconds=2))
    assert a == b


def test_duration_field_keeps_value():
    d = timedelta(seconds=3)
    assert duration_to_duration_field(d) == {"grpc.duration": d}


class _StatusError(Exception):
    def __init__(self, code):
        super().__init__("failed")
        self.code = code


def test_error_to_code():
    assert default_error_to_code(None) is Code.OK
    assert default_error_to_code(ValueError("x")) is Code.UNKNOWN
    assert default_error_to_code(_StatusError(Code.NOT_FOUND)) is Code.NOT_FOUND


def test_server_options_defaults():
    opts = evaluate_server_options()
    assert opts.level_func is default_code_to_level
    assert opts.should_log("/svc/Method", None) is True
    assert opts.duration_func is duration_to_time_millis_field


def test_client_options_use_client_levels():
    opts = evaluate_client_options()
    assert opts.level_func is default_client_code_to_level


def test_options_override():
    opts = evaluate_server_options(timestamp_format="%H", should_log=lambda m, e: False)
    assert opts.timestamp_format == "%H"
    assert opts.should_log("/a/b", None) is False


def test_options_reject_unknown():
    with pytest.raises(TypeError):
        evaluate_server_options(bogus=1)


def test_options_defaults_not_shared():
    assert LoggingOptions().timestamp_format == evaluate_client_options().timestamp_format


def test_message_producer_logs(caplog):
    duration = Fields.of("grpc.time_ms", 1.0)
    with caplog.at_level(logging.DEBUG, logger="admincore.logging.levels"):
        default_message_producer(
            {"x-request-id": "r1"}, "finished", Level.WARN, Code.ABORTED, None, duration
        )
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.fields["grpc.code"] == "Aborted"
    assert record.fields["x-request-id"] == "r1"
    assert "grpc.code" not in duration.values()