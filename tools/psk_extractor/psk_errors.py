"""Exceptions raised while decoding PSK files."""
from typing import Optional


class PskError(Exception):
    """Base exception for PSK decoding errors."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} (at offset {self.offset})"


class MagicMismatchError(PskError):
    """The first chunk is not the ACTRHEAD header."""

    def __init__(self, found: str, offset: Optional[int] = 0):
        super().__init__(f"Not a PSK file: expected ACTRHEAD, found {found!r}", offset)
        self.found = found


class OutOfDataError(PskError):
    """A read would run past the end of the buffer."""

    def __init__(self, needed: int, remaining: int, offset: Optional[int] = None):
        super().__init__(
            f"Unexpected end of data: needed {needed} bytes, {remaining} remaining",
            offset,
        )
        self.needed = needed
        self.remaining = remaining


class UnsupportedChunkVariantError(PskError):
    """A recognised chunk whose record layout is not supported."""

    def __init__(self, tag: str, data_count: int, offset: Optional[int] = None):
        super().__init__(
            f"Unsupported chunk variant {tag} with {data_count} records", offset
        )
        self.tag = tag
        self.data_count = data_count


class UnknownChunkError(PskError):
    """A chunk tag outside the known set (strict mode only)."""

    def __init__(self, tag: str, offset: Optional[int] = None):
        super().__init__(f"Unknown chunk {tag!r}", offset)
        self.tag = tag


class MalformedChunkError(PskError):
    """A chunk header declaring a negative payload size."""

    def __init__(self, tag: str, data_size: int, data_count: int, offset: Optional[int] = None):
        super().__init__(
            f"Chunk {tag!r} declares a negative payload "
            f"({data_count} records of {data_size} bytes)",
            offset,
        )
        self.tag = tag
        self.data_size = data_size
        self.data_count = data_count
