"""Error codes for the pen stream.

Every failure surfaced by the transports, the discovery loop and the session
carries one of these codes. ``ERROR_MAPPINGS`` decides how the caller should
treat it (category, a short title for the UI, and whether retrying with the
same or different parameters makes sense).
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Error category classification."""

    CONFIG = "config"
    CONNECT = "connect"
    WRITE = "write"
    SESSION = "session"


class ErrorCode(str, Enum):
    """Error codes grouped by category prefix."""

    # Config (rejected before any transport is touched)
    CONFIG_INVALID_HOST = "CONFIG_INVALID_HOST"
    CONFIG_INVALID_PORT = "CONFIG_INVALID_PORT"

    # Connect (session goes back to Idle)
    CONNECT_TIMEOUT = "CONNECT_TIMEOUT"
    CONNECT_REFUSED = "CONNECT_REFUSED"
    CONNECT_NOT_AUTHORIZED = "CONNECT_NOT_AUTHORIZED"
    CONNECT_NOT_FOUND = "CONNECT_NOT_FOUND"

    # Write (fatal to the session)
    WRITE_BROKEN_PIPE = "WRITE_BROKEN_PIPE"
    WRITE_IO_FAULT = "WRITE_IO_FAULT"

    # Session lifecycle
    SESSION_ALREADY_ACTIVE = "SESSION_ALREADY_ACTIVE"
    SESSION_INVALID_STATE = "SESSION_INVALID_STATE"


@dataclass(frozen=True)
class ErrorMapping:
    """Mapping from error code to caller-facing details."""

    category: ErrorCategory
    title: str
    retryable: bool


ERROR_MAPPINGS: dict[ErrorCode, ErrorMapping] = {
    ErrorCode.CONFIG_INVALID_HOST: ErrorMapping(
        ErrorCategory.CONFIG, "Invalid Host", True
    ),
    ErrorCode.CONFIG_INVALID_PORT: ErrorMapping(
        ErrorCategory.CONFIG, "Invalid Port", True
    ),
    ErrorCode.CONNECT_TIMEOUT: ErrorMapping(
        ErrorCategory.CONNECT, "Connection Timed Out", True
    ),
    ErrorCode.CONNECT_REFUSED: ErrorMapping(
        ErrorCategory.CONNECT, "Connection Refused", True
    ),
    ErrorCode.CONNECT_NOT_AUTHORIZED: ErrorMapping(
        ErrorCategory.CONNECT, "Accessory Not Authorized", True
    ),
    ErrorCode.CONNECT_NOT_FOUND: ErrorMapping(
        ErrorCategory.CONNECT, "Peer Not Found", True
    ),
    ErrorCode.WRITE_BROKEN_PIPE: ErrorMapping(
        ErrorCategory.WRITE, "Stream Closed By Peer", False
    ),
    ErrorCode.WRITE_IO_FAULT: ErrorMapping(
        ErrorCategory.WRITE, "Stream I/O Fault", False
    ),
    ErrorCode.SESSION_ALREADY_ACTIVE: ErrorMapping(
        ErrorCategory.SESSION, "Session Already Active", False
    ),
    ErrorCode.SESSION_INVALID_STATE: ErrorMapping(
        ErrorCategory.SESSION, "Invalid Session State", False
    ),
}


def get_error_mapping(error_code: str | ErrorCode) -> ErrorMapping:
    """Get the mapping for an error code.

    Unknown codes are treated as non-retryable write faults.
    """
    try:
        code = ErrorCode(error_code)
    except ValueError:
        return ErrorMapping(ErrorCategory.WRITE, "Unknown Error", False)
    return ERROR_MAPPINGS[code]
