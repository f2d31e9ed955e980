"""Pen frame codec.

Frame layout (14 bytes, little-endian, no padding):
- Byte 0:     tool type (u8)
- Byte 1:     action (u8, raw masked action code)
- Bytes 2-5:  x (i32)
- Bytes 6-9:  y (i32)
- Bytes 10-13: pressure (i32, pressure * 1000)

Frames are concatenated on the stream without delimiter or header.
"""

from __future__ import annotations

import math
import struct

from .constants import FRAME_SIZE, INT32_MAX, INT32_MIN, PRESSURE_SCALE
from .models import Frame, InputSample

FRAME_STRUCT = struct.Struct("<BBiii")


def _to_int32(value: float) -> int:
    """Truncate toward zero and saturate to the int32 range (NaN -> 0)."""
    if math.isnan(value):
        return 0
    if value >= INT32_MAX:
        return INT32_MAX
    if value <= INT32_MIN:
        return INT32_MIN
    return int(value)


def _fields(sample: InputSample, swap_axes: bool) -> tuple[int, int, int, int, int]:
    x = _to_int32(sample.x)
    y = _to_int32(sample.y)
    if swap_axes:
        x, y = y, x
    pressure = _to_int32(sample.pressure * PRESSURE_SCALE)
    return sample.tool_type & 0xFF, sample.action & 0xFF, x, y, pressure


def encode(sample: InputSample, *, swap_axes: bool = False) -> bytes | None:
    """Encode one sample, or return None if its tool type is not streamed."""
    if not sample.is_supported:
        return None
    return FRAME_STRUCT.pack(*_fields(sample, swap_axes))


def decode(data: bytes | bytearray | memoryview) -> Frame:
    """Decode exactly one frame."""
    if len(data) != FRAME_SIZE:
        raise ValueError(f"frame must be {FRAME_SIZE} bytes, got {len(data)}")
    return Frame(*FRAME_STRUCT.unpack(data))


class FrameCodec:
    """Per-session encoder reusing one 14-byte scratch buffer.

    The buffer is shared by every call, so callers must hold the session's
    write lock from ``pack`` until the returned view has been written.
    """

    def __init__(self, *, swap_axes: bool = False) -> None:
        self._swap_axes = bool(swap_axes)
        self._buffer = bytearray(FRAME_SIZE)
        self._view = memoryview(self._buffer)

    @property
    def swap_axes(self) -> bool:
        return self._swap_axes

    def pack(self, sample: InputSample) -> memoryview | None:
        if not sample.is_supported:
            return None
        FRAME_STRUCT.pack_into(self._buffer, 0, *_fields(sample, self._swap_axes))
        return self._view


class FrameAssembler:
    """Reassemble frames from arbitrarily chunked stream reads.

    A trailing partial frame is kept and completed by the next ``feed``.
    """

    def __init__(self) -> None:
        self._pending = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet forming a full frame."""
        return len(self._pending)

    def feed(self, chunk: bytes) -> list[Frame]:
        self._pending.extend(chunk)
        complete = len(self._pending) - len(self._pending) % FRAME_SIZE
        if not complete:
            return []
        data = bytes(self._pending[:complete])
        del self._pending[:complete]
        return [Frame(*fields) for fields in FRAME_STRUCT.iter_unpack(data)]

    def reset(self) -> None:
        self._pending.clear()
