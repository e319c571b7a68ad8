"""Chunk header parsing for PSK files."""
import struct
from typing import List

from psk_cursor import ByteCursor
from psk_errors import MagicMismatchError, MalformedChunkError, OutOfDataError
from psk_types import CHUNK_HEADER_SIZE, MAGIC_TAG, ChunkHeader

# tag(20) + type_flag + data_size + data_count
_HEADER_INTS = struct.Struct("<iii")
TAG_SIZE = 20


class PskParser:
    """Parses PSK chunk headers."""

    def read_header(self, cursor: ByteCursor) -> ChunkHeader:
        """Read one chunk header from the cursor.

        Args:
            cursor: Cursor positioned at the start of a header

        Returns:
            ChunkHeader with the raw (untrimmed) tag

        Raises:
            OutOfDataError: If fewer than 32 bytes remain
        """
        offset = cursor.position
        # A truncated header consumes nothing
        if cursor.remaining < CHUNK_HEADER_SIZE:
            raise OutOfDataError(CHUNK_HEADER_SIZE, cursor.remaining, offset)

        tag = cursor.read_fixed_string(TAG_SIZE)
        type_flag, data_size, data_count = cursor.read_struct(_HEADER_INTS)
        return ChunkHeader(
            tag=tag,
            type_flag=type_flag,
            data_size=data_size,
            data_count=data_count,
            offset=offset,
        )

    def parse_header_bytes(self, data: bytes) -> ChunkHeader:
        """Parse a chunk header from the first 32 bytes of `data`."""
        return self.read_header(ByteCursor(data))

    def check_magic(self, header: ChunkHeader):
        """Raise MagicMismatchError unless this is the ACTRHEAD chunk."""
        if header.name != MAGIC_TAG:
            raise MagicMismatchError(header.name, header.offset)

    def skip_payload(self, cursor: ByteCursor, header: ChunkHeader):
        """Step over the records that follow a header without decoding them."""
        if header.payload_size < 0:
            raise MalformedChunkError(
                header.name, header.data_size, header.data_count, header.offset
            )
        cursor.skip(header.payload_size)

    def scan_chunks(self, data) -> List[ChunkHeader]:
        """List every chunk header in a PSK buffer without decoding records.

        Payloads are stepped over using data_size * data_count.

        Args:
            data: Complete PSK file contents

        Returns:
            List of ChunkHeader, starting with the ACTRHEAD header
        """
        cursor = ByteCursor(data)
        header = self.read_header(cursor)
        self.check_magic(header)

        chunks = [header]
        self.skip_payload(cursor, header)
        while cursor.has_remaining():
            header = self.read_header(cursor)
            chunks.append(header)
            self.skip_payload(cursor, header)

        return chunks
