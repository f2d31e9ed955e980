"""Pen/stylus input streaming over TCP or a USB accessory.

Samples are framed by ``inkbridge.codec`` (14 bytes, little-endian) and
written by a ``StreamSession`` to exactly one sink. ``StreamController`` is
the entry point for the UI layer.
"""

from .codec import FrameAssembler, FrameCodec, decode, encode
from .config import StreamSettings
from .controller import StreamController
from .discovery import AccessoryDiscovery, DiscoveryState
from .exceptions import (
    ConfigError,
    ConnectError,
    InkbridgeError,
    SessionStateError,
    WriteError,
)
from .models import (
    AccessoryConfig,
    Action,
    Frame,
    InputSample,
    SocketConfig,
    ToolType,
    parse_socket_config,
)
from .session import SessionState, SessionStats, StreamSession
from .source import InputEventSource

__all__ = [
    "AccessoryConfig",
    "AccessoryDiscovery",
    "Action",
    "ConfigError",
    "ConnectError",
    "DiscoveryState",
    "Frame",
    "FrameAssembler",
    "FrameCodec",
    "InkbridgeError",
    "InputEventSource",
    "InputSample",
    "SessionState",
    "SessionStateError",
    "SessionStats",
    "SocketConfig",
    "StreamController",
    "StreamSession",
    "StreamSettings",
    "ToolType",
    "WriteError",
    "decode",
    "encode",
    "parse_socket_config",
]
