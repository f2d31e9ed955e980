"""Tests for the pen frame codec."""

from __future__ import annotations

import math
import struct

import pytest

from inkbridge import codec
from inkbridge.constants import FRAME_SIZE, INT32_MAX, INT32_MIN
from inkbridge.models import Action, Frame, InputSample, ToolType


def _le32(value: int) -> bytes:
    return value.to_bytes(4, "little", signed=True)


def test_encode_stylus_matches_wire_layout() -> None:
    sample = InputSample(ToolType.STYLUS, Action.DOWN, x=10.7, y=-20.9, pressure=0.5)

    frame = codec.encode(sample)

    assert frame == bytes([2, 0]) + _le32(10) + _le32(-20) + _le32(500)
    assert len(frame) == FRAME_SIZE


def test_frame_struct_matches_frame_size() -> None:
    assert codec.FRAME_STRUCT.size == FRAME_SIZE


@pytest.mark.parametrize("tool_type", [ToolType.STYLUS, ToolType.ERASER, ToolType.FINGER])
def test_encode_accepts_supported_tools(tool_type: ToolType) -> None:
    frame = codec.encode(InputSample(tool_type, Action.MOVE, 1.0, 2.0, 0.25))
    assert frame is not None
    assert frame[0] == int(tool_type)
    assert frame[1] == Action.MOVE


@pytest.mark.parametrize("tool_type", [ToolType.UNKNOWN, ToolType.MOUSE, 5, 255])
def test_encode_rejects_other_tools(tool_type: int) -> None:
    assert codec.encode(InputSample(tool_type, Action.HOVER_MOVE, 1.0, 2.0, 0.5)) is None


@pytest.mark.parametrize(
    ("pressure", "expected"),
    [(0.5, 500), (0.0, 0), (1.0, 1000), (0.2549, 254)],
)
def test_pressure_is_scaled_to_thousandths(pressure: float, expected: int) -> None:
    frame = codec.decode(codec.encode(InputSample(ToolType.STYLUS, 2, 0, 0, pressure)))
    assert frame.pressure == expected


def test_coordinates_are_truncated_not_rounded() -> None:
    frame = codec.decode(codec.encode(InputSample(ToolType.FINGER, 2, 99.99, -0.99, 0.1)))
    assert (frame.x, frame.y) == (99, 0)


def test_swap_axes_exchanges_x_and_y() -> None:
    sample = InputSample(ToolType.STYLUS, Action.MOVE, x=10, y=20, pressure=0.3)

    plain = codec.decode(codec.encode(sample))
    swapped = codec.decode(codec.encode(sample, swap_axes=True))

    assert (plain.x, plain.y) == (10, 20)
    assert (swapped.x, swapped.y) == (20, 10)


def test_decode_recovers_integer_fields() -> None:
    sample = InputSample(ToolType.ERASER, Action.UP, x=1234.5, y=-5678.2, pressure=0.75)

    frame = codec.decode(codec.encode(sample))

    assert frame == Frame(tool_type=4, action=1, x=1234, y=-5678, pressure=750)


def test_action_is_passed_through_as_raw_byte() -> None:
    frame = codec.decode(codec.encode(InputSample(ToolType.STYLUS, 0x1_05, 0, 0, 0)))
    assert frame.action == 0x05


def test_out_of_range_values_saturate() -> None:
    sample = InputSample(ToolType.STYLUS, 2, x=1e12, y=-1e12, pressure=math.nan)
    frame = codec.decode(codec.encode(sample))
    assert (frame.x, frame.y, frame.pressure) == (INT32_MAX, INT32_MIN, 0)


def test_decode_rejects_wrong_length() -> None:
    with pytest.raises(ValueError):
        codec.decode(b"\x00" * 13)


def test_frame_codec_reuses_scratch_buffer() -> None:
    frame_codec = codec.FrameCodec(swap_axes=True)

    first = frame_codec.pack(InputSample(ToolType.STYLUS, 0, 1, 2, 0.5))
    first_bytes = bytes(first)
    second = frame_codec.pack(InputSample(ToolType.STYLUS, 1, 3, 4, 0.0))

    assert first is second
    assert first_bytes == codec.encode(InputSample(ToolType.STYLUS, 0, 1, 2, 0.5), swap_axes=True)
    assert struct.unpack("<BBiii", second) == (2, 1, 4, 3, 0)


def test_frame_codec_rejects_without_touching_buffer() -> None:
    frame_codec = codec.FrameCodec()
    view = frame_codec.pack(InputSample(ToolType.FINGER, 2, 7, 8, 0.1))
    before = bytes(view)

    assert frame_codec.pack(InputSample(ToolType.MOUSE, 2, 1, 1, 1.0)) is None
    assert bytes(view) == before


def test_assembler_carries_partial_frames_over() -> None:
    samples = [InputSample(ToolType.STYLUS, 2, i, i * 2, 0.5) for i in range(3)]
    stream = b"".join(codec.encode(s) for s in samples)
    assembler = codec.FrameAssembler()

    first = assembler.feed(stream[:20])
    assert [f.x for f in first] == [0]
    assert assembler.pending == 6

    rest = assembler.feed(stream[20:])
    assert [(f.x, f.y) for f in rest] == [(1, 2), (2, 4)]
    assert assembler.pending == 0


def test_assembler_returns_nothing_for_short_chunk() -> None:
    assembler = codec.FrameAssembler()
    assert assembler.feed(b"\x02\x00\x01") == []
    assembler.reset()
    assert assembler.pending == 0
