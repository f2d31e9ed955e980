"""Tests for error codes and OS error translation."""

from __future__ import annotations

import errno
import socket

import pytest

from inkbridge.error_codes import ERROR_MAPPINGS, ErrorCategory, ErrorCode, get_error_mapping
from inkbridge.exceptions import (
    ConnectError,
    WriteError,
    connect_error_from_os,
    write_error_from_os,
)


def test_every_error_code_is_mapped() -> None:
    assert set(ERROR_MAPPINGS) == set(ErrorCode)


def test_category_matches_code_prefix() -> None:
    for code, mapping in ERROR_MAPPINGS.items():
        assert code.value.lower().startswith(mapping.category.value)


def test_unknown_code_falls_back() -> None:
    mapping = get_error_mapping("NOT_A_CODE")
    assert mapping.category == ErrorCategory.WRITE
    assert mapping.retryable is False


def test_error_str_and_properties() -> None:
    err = ConnectError(ErrorCode.CONNECT_REFUSED, "10.0.0.2:4545: refused")
    assert str(err) == "[CONNECT_REFUSED] 10.0.0.2:4545: refused"
    assert err.category == "connect"
    assert err.title == "Connection Refused"
    assert err.retryable is True
    assert WriteError(ErrorCode.WRITE_IO_FAULT, "x").retryable is False


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (socket.timeout("timed out"), ErrorCode.CONNECT_TIMEOUT),
        (TimeoutError(), ErrorCode.CONNECT_TIMEOUT),
        (ConnectionRefusedError(errno.ECONNREFUSED, "refused"), ErrorCode.CONNECT_REFUSED),
        (socket.gaierror(socket.EAI_NONAME, "unknown"), ErrorCode.CONNECT_NOT_FOUND),
        (OSError(errno.EHOSTUNREACH, "no route"), ErrorCode.CONNECT_NOT_FOUND),
        (FileNotFoundError(errno.ENOENT, "missing"), ErrorCode.CONNECT_NOT_FOUND),
        (PermissionError(errno.EACCES, "denied"), ErrorCode.CONNECT_NOT_AUTHORIZED),
    ],
)
def test_connect_error_from_os(exc: OSError, expected: ErrorCode) -> None:
    err = connect_error_from_os(exc, "target")
    assert isinstance(err, ConnectError)
    assert err.error_code == expected
    assert err.inner_error["exception"] == type(exc).__name__


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (BrokenPipeError(errno.EPIPE, "broken"), ErrorCode.WRITE_BROKEN_PIPE),
        (ConnectionResetError(errno.ECONNRESET, "reset"), ErrorCode.WRITE_BROKEN_PIPE),
        (OSError(errno.EPIPE, "broken"), ErrorCode.WRITE_BROKEN_PIPE),
        (OSError(errno.EIO, "io"), ErrorCode.WRITE_IO_FAULT),
    ],
)
def test_write_error_from_os(exc: OSError, expected: ErrorCode) -> None:
    err = write_error_from_os(exc, "target")
    assert isinstance(err, WriteError)
    assert err.error_code == expected
