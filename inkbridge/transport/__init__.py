"""Transports carrying pen frames to the host."""

from __future__ import annotations

from ..models import AccessoryConfig, SocketConfig
from .accessory import Accessory, AccessoryManager, AccessorySink, DevNodeAccessoryManager
from .base import Sink
from .socket_sink import SocketSink


def open_sink(
    config: SocketConfig | AccessoryConfig,
    *,
    manager: AccessoryManager | None = None,
    accessory: Accessory | None = None,
) -> Sink:
    """Open the sink matching ``config``.

    Accessory configs need the manager and the authorized accessory found by
    discovery.
    """
    if isinstance(config, SocketConfig):
        return SocketSink.open(config)
    if manager is None or accessory is None:
        raise ValueError("accessory transport requires a manager and an accessory")
    return AccessorySink.open(manager, accessory)


__all__ = [
    "Accessory",
    "AccessoryManager",
    "AccessorySink",
    "DevNodeAccessoryManager",
    "Sink",
    "SocketSink",
    "open_sink",
]
