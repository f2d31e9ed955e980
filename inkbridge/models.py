"""Data models for the pen stream.

``InputSample`` and ``Frame`` are plain dataclasses since one is created per
hardware event. Transport configuration is validated with Pydantic so that
malformed user input is rejected before any socket or device is touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError

from .constants import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    INVALID_HOST_MESSAGE,
    INVALID_PORT_MESSAGE,
)
from .error_codes import ErrorCode
from .exceptions import ConfigError


# ============================================================================
# Input events
# ============================================================================


class ToolType(IntEnum):
    """Tool type codes reported by the host input system."""

    UNKNOWN = 0
    FINGER = 1
    STYLUS = 2
    MOUSE = 3
    ERASER = 4


class Action(IntEnum):
    """Common masked action codes. Other values are passed through as-is."""

    DOWN = 0
    UP = 1
    MOVE = 2
    CANCEL = 3
    HOVER_MOVE = 7
    HOVER_ENTER = 9
    HOVER_EXIT = 10


SUPPORTED_TOOL_TYPES = frozenset({ToolType.STYLUS, ToolType.ERASER, ToolType.FINGER})


@dataclass(frozen=True)
class InputSample:
    """One pointer/stylus event as delivered by the input source."""

    tool_type: int
    action: int
    x: float
    y: float
    pressure: float = 0.0

    @property
    def is_supported(self) -> bool:
        return self.tool_type in SUPPORTED_TOOL_TYPES


@dataclass(frozen=True)
class Frame:
    """Decoded contents of one 14-byte wire frame."""

    tool_type: int
    action: int
    x: int
    y: int
    pressure: int


# ============================================================================
# Transport configuration
# ============================================================================

Host = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=253)]
Port = Annotated[int, Field(ge=1, le=65535)]


class SocketConfig(BaseModel):
    """WiFi mode: TCP connection to the host application."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["socket"] = "socket"
    host: Host
    port: Port
    connect_timeout_ms: int = Field(default=DEFAULT_CONNECT_TIMEOUT_MS, gt=0)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class AccessoryConfig(BaseModel):
    """USB mode: the accessory handle is provided by the system."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["accessory"] = "accessory"


TransportConfig = Annotated[
    Union[SocketConfig, AccessoryConfig], Field(discriminator="kind")
]


def parse_socket_config(
    host: Any,
    port: Any,
    *,
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
) -> SocketConfig:
    """Build a SocketConfig from raw UI values.

    The host is checked before the port, so a form with both fields wrong
    reports the host first.

    Raises:
        ConfigError: CONFIG_INVALID_HOST or CONFIG_INVALID_PORT
    """
    if isinstance(port, str):
        port = port.strip()
    if isinstance(port, bool):
        # bool is an int subclass; never a port number
        port = None
    try:
        return SocketConfig(host=host, port=port, connect_timeout_ms=connect_timeout_ms)
    except ValidationError as exc:
        fields = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        if "host" in fields:
            raise ConfigError(
                ErrorCode.CONFIG_INVALID_HOST,
                INVALID_HOST_MESSAGE,
                {"host": repr(host)},
            ) from exc
        if "port" in fields:
            raise ConfigError(
                ErrorCode.CONFIG_INVALID_PORT,
                INVALID_PORT_MESSAGE,
                {"port": repr(port)},
            ) from exc
        raise
