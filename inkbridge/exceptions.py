"""Exceptions raised by the pen stream core."""

from __future__ import annotations

import errno
import socket
from dataclasses import dataclass, field
from typing import Any

from .error_codes import ErrorCode, get_error_mapping

_NOT_FOUND_ERRNOS = {
    errno.ENOENT,
    errno.ENODEV,
    errno.ENXIO,
    errno.EHOSTUNREACH,
    errno.ENETUNREACH,
}
_BROKEN_PIPE_ERRNOS = {errno.EPIPE, errno.ECONNRESET, errno.ECONNABORTED}


@dataclass
class InkbridgeError(Exception):
    """Base exception for stream failures.

    Attributes:
        error_code: Application error code (e.g., "CONNECT_REFUSED")
        message: Human-readable error message
        inner_error: Optional details from the OS layer (errno, strerror)
    """

    error_code: ErrorCode
    message: str
    inner_error: dict[str, Any] | None = field(default=None)

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"

    @property
    def category(self) -> str:
        return get_error_mapping(self.error_code).category.value

    @property
    def title(self) -> str:
        return get_error_mapping(self.error_code).title

    @property
    def retryable(self) -> bool:
        return get_error_mapping(self.error_code).retryable


class ConfigError(InkbridgeError):
    """Connection parameters rejected before any transport is touched."""


class ConnectError(InkbridgeError):
    """A sink could not be opened."""


class WriteError(InkbridgeError):
    """Writing a frame to an open sink failed."""


class SessionStateError(InkbridgeError):
    """Operation not allowed in the current session state."""


def _inner_error(exc: OSError) -> dict[str, Any]:
    return {
        "exception": type(exc).__name__,
        "errno": exc.errno,
        "strerror": exc.strerror,
    }


def connect_error_from_os(exc: OSError, target: str) -> ConnectError:
    """Translate an OS-level connect/open failure into a ConnectError."""
    if isinstance(exc, (socket.timeout, TimeoutError)):
        code = ErrorCode.CONNECT_TIMEOUT
    elif isinstance(exc, PermissionError):
        code = ErrorCode.CONNECT_NOT_AUTHORIZED
    elif isinstance(exc, socket.gaierror) or exc.errno in _NOT_FOUND_ERRNOS:
        code = ErrorCode.CONNECT_NOT_FOUND
    else:
        code = ErrorCode.CONNECT_REFUSED
    return ConnectError(code, f"{target}: {exc}", _inner_error(exc))


def write_error_from_os(exc: OSError, target: str) -> WriteError:
    """Translate an OS-level write failure into a WriteError."""
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, ConnectionAbortedError)) or (
        exc.errno in _BROKEN_PIPE_ERRNOS
    ):
        code = ErrorCode.WRITE_BROKEN_PIPE
    else:
        code = ErrorCode.WRITE_IO_FAULT
    return WriteError(code, f"{target}: {exc}", _inner_error(exc))
