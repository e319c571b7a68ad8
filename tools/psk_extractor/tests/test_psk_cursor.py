"""Tests for the byte cursor."""
import struct
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from psk_cursor import ByteCursor
from psk_errors import OutOfDataError


def test_read_typed_values():
    """Should read little-endian values in sequence."""
    data = struct.pack("<HhiIfB", 0xBEEF, -2, -70000, 0xDEADBEEF, 1.5, 7)
    cursor = ByteCursor(data)

    assert cursor.read_uint16() == 0xBEEF
    assert cursor.read_int16() == -2
    assert cursor.read_int32() == -70000
    assert cursor.read_uint32() == 0xDEADBEEF
    assert cursor.read_float32() == 1.5
    assert cursor.read_uint8() == 7
    assert not cursor.has_remaining()
    assert cursor.position == len(data)


def test_read_fixed_string_keeps_padding():
    """Fixed strings come back verbatim, padding included."""
    cursor = ByteCursor(b"AB\x00\xcc\xcc")
    assert cursor.read_fixed_string(5) == "AB\x00\xcc\xcc"


def test_read_past_end_raises():
    """Short reads raise OutOfDataError without moving the cursor."""
    cursor = ByteCursor(b"\x01\x02\x03")
    cursor.read_uint16()

    with pytest.raises(OutOfDataError) as excinfo:
        cursor.read_int32()

    assert excinfo.value.needed == 4
    assert excinfo.value.remaining == 1
    assert excinfo.value.offset == 2
    assert cursor.position == 2


def test_skip_and_remaining():
    cursor = ByteCursor(bytes(10))
    cursor.skip(4)
    assert cursor.remaining == 6
    assert cursor.has_remaining()

    with pytest.raises(OutOfDataError):
        cursor.skip(7)
    with pytest.raises(ValueError, match="negative"):
        cursor.skip(-1)


def test_memoryview_source():
    """Should accept any buffer-protocol object."""
    cursor = ByteCursor(memoryview(struct.pack("<f", 2.0)))
    assert cursor.read_float32() == 2.0
