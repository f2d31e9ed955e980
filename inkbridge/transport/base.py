"""Base Sink - common interface for the socket and accessory transports."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from ..constants import FRAME_SIZE
from ..error_codes import ErrorCode
from ..exceptions import WriteError

logger = logging.getLogger(__name__)


class Sink(ABC):
    """An open, writable byte channel owned by one stream session.

    Subclasses implement ``_write`` and ``_release``; ``write`` and ``close``
    add the frame size check and idempotent close shared by all transports.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._closed = False
        self._close_lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self.name} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, frame: bytes | bytearray | memoryview) -> None:
        """Write one frame and flush it to the peer.

        Raises:
            WriteError: the channel is closed or the OS reported a failure
        """
        if len(frame) != FRAME_SIZE:
            raise ValueError(f"frame must be {FRAME_SIZE} bytes, got {len(frame)}")
        if self._closed:
            raise WriteError(ErrorCode.WRITE_BROKEN_PIPE, f"{self.name}: sink is closed")
        self._write(frame)

    def close(self) -> None:
        """Release the underlying resources. Safe to call more than once."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._release()
        logger.info("Sink closed: %s", self.name)

    @abstractmethod
    def _write(self, frame: bytes | bytearray | memoryview) -> None:
        """Write all bytes of ``frame`` without internal buffering."""

    @abstractmethod
    def _release(self) -> None:
        """Close every underlying resource independently, logging failures."""
