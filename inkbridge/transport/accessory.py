"""USB accessory sink (USB mode).

The accessory shows up as a device node once the host has switched the
device into accessory mode. The manager abstracts how accessories are listed,
how user authorization is checked and how a file descriptor is obtained, so
the discovery loop and the sink do not depend on a particular platform API.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from ..constants import DEFAULT_ACCESSORY_DEVICE
from ..error_codes import ErrorCode
from ..exceptions import ConnectError, connect_error_from_os, write_error_from_os
from .base import Sink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Accessory:
    """An attached USB accessory."""

    identifier: str
    description: str = ""


class AccessoryManager(Protocol):
    def list_accessories(self) -> Sequence[Accessory]: ...

    def has_permission(self, accessory: Accessory) -> bool: ...

    def open_accessory(self, accessory: Accessory) -> int | None: ...


class DevNodeAccessoryManager:
    """Accessories exposed as device nodes (Linux f_accessory gadget).

    Write access to the node counts as authorization.
    """

    def __init__(self, device_paths: Iterable[Path] = (DEFAULT_ACCESSORY_DEVICE,)) -> None:
        self._device_paths = tuple(Path(p) for p in device_paths)

    def list_accessories(self) -> list[Accessory]:
        return [
            Accessory(str(path), path.name) for path in self._device_paths if path.exists()
        ]

    def has_permission(self, accessory: Accessory) -> bool:
        return os.access(accessory.identifier, os.W_OK)

    def open_accessory(self, accessory: Accessory) -> int | None:
        return os.open(accessory.identifier, os.O_WRONLY | getattr(os, "O_CLOEXEC", 0))


class AccessorySink(Sink):
    """Frames written to the accessory file descriptor.

    The descriptor and the unbuffered stream wrapping it are separate
    resources and are released independently.
    """

    def __init__(self, fd: int, name: str) -> None:
        super().__init__(name)
        self._fd = fd
        self._stream = os.fdopen(fd, "wb", buffering=0, closefd=False)

    @classmethod
    def open(cls, manager: AccessoryManager, accessory: Accessory) -> "AccessorySink":
        """Open an authorized accessory.

        Raises:
            ConnectError: NOT_AUTHORIZED or NOT_FOUND
        """
        name = f"accessory:{accessory.identifier}"
        try:
            permitted = manager.has_permission(accessory)
        except OSError as exc:
            raise connect_error_from_os(exc, name) from exc
        if not permitted:
            raise ConnectError(
                ErrorCode.CONNECT_NOT_AUTHORIZED, f"{name}: permission not granted"
            )
        try:
            fd = manager.open_accessory(accessory)
        except OSError as exc:
            raise connect_error_from_os(exc, name) from exc
        if fd is None:
            raise ConnectError(ErrorCode.CONNECT_NOT_FOUND, f"{name}: file descriptor not found")

        try:
            sink = cls(fd, name)
        except OSError as exc:
            os.close(fd)
            raise connect_error_from_os(exc, name) from exc
        logger.info("Accessory opened: %s", name)
        return sink

    def _write(self, frame: bytes | bytearray | memoryview) -> None:
        view = memoryview(frame)
        try:
            while view:
                written = self._stream.write(view)
                if written is None:
                    raise BlockingIOError("accessory descriptor would block")
                view = view[written:]
            self._stream.flush()
        except OSError as exc:
            raise write_error_from_os(exc, self.name) from exc

    def _release(self) -> None:
        try:
            self._stream.close()
        except OSError:
            logger.error("Failed to close accessory stream %s", self.name, exc_info=True)
        try:
            os.close(self._fd)
        except OSError:
            logger.error("Failed to close accessory descriptor %s", self.name, exc_info=True)
