"""Sequential little-endian reader over a fixed byte buffer."""
import struct
from typing import Tuple

from psk_errors import OutOfDataError

_UINT8 = struct.Struct("<B")
_INT16 = struct.Struct("<h")
_UINT16 = struct.Struct("<H")
_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")
_FLOAT32 = struct.Struct("<f")


class ByteCursor:
    """Reads typed values from a buffer, advancing a position.

    The buffer may be anything supporting the buffer protocol (bytes,
    bytearray, memoryview, mmap). Reads never go past the end: a short
    read raises OutOfDataError and leaves the position unchanged.
    """

    def __init__(self, data, offset: int = 0):
        self._data = data
        self._size = len(data)
        self._pos = offset

    @property
    def position(self) -> int:
        return self._pos

    @property
    def size(self) -> int:
        return self._size

    @property
    def remaining(self) -> int:
        return self._size - self._pos

    def has_remaining(self) -> bool:
        return self._pos < self._size

    def _require(self, count: int):
        if count > self._size - self._pos:
            raise OutOfDataError(count, self.remaining, self._pos)

    def read_struct(self, layout: struct.Struct) -> Tuple:
        """Unpack a precompiled layout at the current position."""
        self._require(layout.size)
        values = layout.unpack_from(self._data, self._pos)
        self._pos += layout.size
        return values

    def read_bytes(self, count: int) -> bytes:
        self._require(count)
        chunk = bytes(self._data[self._pos:self._pos + count])
        self._pos += count
        return chunk

    def skip(self, count: int):
        if count < 0:
            raise ValueError(f"Cannot skip a negative byte count ({count})")
        self._require(count)
        self._pos += count

    def read_uint8(self) -> int:
        return self.read_struct(_UINT8)[0]

    def read_int16(self) -> int:
        return self.read_struct(_INT16)[0]

    def read_uint16(self) -> int:
        return self.read_struct(_UINT16)[0]

    def read_int32(self) -> int:
        return self.read_struct(_INT32)[0]

    def read_uint32(self) -> int:
        return self.read_struct(_UINT32)[0]

    def read_float32(self) -> float:
        return self.read_struct(_FLOAT32)[0]

    def read_fixed_string(self, length: int) -> str:
        """Read `length` bytes as one character each, padding included."""
        return self.read_bytes(length).decode("latin-1")
