"""TCP sink (WiFi mode)."""

from __future__ import annotations

import logging
import socket

from ..exceptions import connect_error_from_os, write_error_from_os
from ..models import SocketConfig
from .base import Sink

logger = logging.getLogger(__name__)


class SocketSink(Sink):
    """Frames written straight to a connected TCP socket."""

    def __init__(self, sock: socket.socket, name: str) -> None:
        super().__init__(name)
        self._sock = sock

    @classmethod
    def open(cls, config: SocketConfig) -> "SocketSink":
        """Connect to the host, bounded by ``config.connect_timeout_ms``.

        Raises:
            ConnectError: timeout, refused or host not found
        """
        timeout_sec = config.connect_timeout_ms / 1000
        logger.info("Connecting to %s (timeout %.1fs)", config.address, timeout_sec)
        try:
            sock = socket.create_connection((config.host, config.port), timeout=timeout_sec)
        except OSError as exc:
            raise connect_error_from_os(exc, config.address) from exc

        try:
            # frames are tiny; send each one immediately
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            sock.settimeout(None)
        except OSError as exc:
            sock.close()
            raise connect_error_from_os(exc, config.address) from exc
        return cls(sock, config.address)

    def _write(self, frame: bytes | bytearray | memoryview) -> None:
        try:
            self._sock.sendall(frame)
        except OSError as exc:
            raise write_error_from_os(exc, self.name) from exc

    def _release(self) -> None:
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # peer already gone
            logger.debug("Socket shutdown failed for %s", self.name, exc_info=True)
        try:
            self._sock.close()
        except OSError:
            logger.error("Failed to close socket %s", self.name, exc_info=True)
