"""Loader for PSK (ActorX) mesh files.

A PSK file is a flat sequence of chunks. Each chunk is a 32-byte header
(20-byte tag, type flag, record size, record count) followed by
`data_count` fixed-size records. The first chunk must be ACTRHEAD.
"""
import logging
import mmap
import os
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Sequence, Union

from psk_cursor import ByteCursor
from psk_errors import UnknownChunkError, UnsupportedChunkVariantError
from psk_parser import PskParser
from psk_records import (
    read_bone,
    read_material,
    read_point,
    read_raw_weight,
    read_triangle,
    read_wedge,
)
from psk_types import (
    BONES_TAG,
    FACES32_TAG,
    FACES_TAG,
    MATERIALS_TAG,
    POINTS_TAG,
    RAW_WEIGHTS_TAG,
    WEDGES_TAG,
    Bone,
    ChunkHeader,
    Material,
    Point,
    RawWeight,
    Triangle,
    Wedge,
    WedgeIndexWidth,
)

logger = logging.getLogger(__name__)


class PskDocument:
    """Decoded contents of a PSK file.

    Collections are filled by a single PskReader pass and exposed as
    tuples once loading completes.
    """

    def __init__(self, source: Optional[str] = None):
        self.source = source
        self._points: List[Point] = []
        self._wedges: List[Wedge] = []
        self._triangles: List[Triangle] = []
        self._materials: List[Material] = []
        self._bones: List[Bone] = []
        self._raw_weights: List[RawWeight] = []
        self.bytes_read = 0

    def _freeze(self):
        self._points = tuple(self._points)
        self._wedges = tuple(self._wedges)
        self._triangles = tuple(self._triangles)
        self._materials = tuple(self._materials)
        self._bones = tuple(self._bones)
        self._raw_weights = tuple(self._raw_weights)

    @property
    def points(self) -> Sequence[Point]:
        return self._points

    @property
    def wedges(self) -> Sequence[Wedge]:
        return self._wedges

    @property
    def triangles(self) -> Sequence[Triangle]:
        return self._triangles

    @property
    def materials(self) -> Sequence[Material]:
        return self._materials

    @property
    def bones(self) -> Sequence[Bone]:
        return self._bones

    @property
    def raw_weights(self) -> Sequence[RawWeight]:
        return self._raw_weights

    def summary(self) -> Dict[str, int]:
        return {
            "points": len(self._points),
            "wedges": len(self._wedges),
            "triangles": len(self._triangles),
            "materials": len(self._materials),
            "bones": len(self._bones),
            "raw_weights": len(self._raw_weights),
        }

    def material_names(self) -> List[str]:
        return [m.name for m in self._materials]

    def root_bones(self) -> List[int]:
        """Indices of bones without a parent.

        Exporters mark the root either with a negative parent index or by
        pointing it at itself (usually bone 0 with parent 0).
        """
        return [
            i for i, bone in enumerate(self._bones)
            if bone.parent_index < 0 or bone.parent_index == i
        ]


class PskReader:
    """Reads PSK files into a PskDocument.

    Args:
        strict_unknown: Raise UnknownChunkError for unrecognised chunk tags
            instead of skipping their payload.
    """

    def __init__(self, strict_unknown: bool = False):
        self.strict_unknown = strict_unknown
        self.parser = PskParser()

    def read(self, path: Union[str, Path]) -> PskDocument:
        """Read a PSK file from disk.

        The file is memory-mapped read-only for the duration of the load.

        Raises:
            PskError: If the file is not a well-formed PSK stream
        """
        path = str(path)
        with open(path, "rb") as f:
            if os.fstat(f.fileno()).st_size == 0:
                # mmap refuses empty files; let the header read fail instead
                return self._load(b"", path)
            with mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ) as mm:
                return self._load(mm, path)

    def read_file(self, file: BinaryIO) -> PskDocument:
        """Read a PSK stream from an open binary file object."""
        return self._load(file.read(), getattr(file, "name", None))

    def read_bytes(self, data) -> PskDocument:
        """Read a PSK stream from an in-memory buffer."""
        return self._load(data, None)

    def _load(self, data, source: Optional[str]) -> PskDocument:
        document = PskDocument(source)
        cursor = ByteCursor(data)

        header = self.parser.read_header(cursor)
        self.parser.check_magic(header)
        self.parser.skip_payload(cursor, header)

        while cursor.has_remaining():
            header = self.parser.read_header(cursor)
            self._read_chunk(cursor, header, document)

        document.bytes_read = cursor.position
        document._freeze()
        logger.debug("Loaded %s: %s", source or "<buffer>", document.summary())
        return document

    def _read_chunk(self, cursor: ByteCursor, header: ChunkHeader, document: PskDocument):
        name = header.name
        count = header.data_count

        if name == POINTS_TAG:
            document._points.extend(read_point(cursor) for _ in range(count))
        elif name == WEDGES_TAG:
            width = WedgeIndexWidth.for_count(count)
            document._wedges.extend(read_wedge(cursor, width) for _ in range(count))
        elif name == FACES_TAG:
            document._triangles.extend(read_triangle(cursor) for _ in range(count))
        elif name == FACES32_TAG:
            if count > 0:
                raise UnsupportedChunkVariantError(name, count, header.offset)
        elif name == MATERIALS_TAG:
            document._materials.extend(read_material(cursor) for _ in range(count))
        elif name == BONES_TAG:
            document._bones.extend(read_bone(cursor) for _ in range(count))
        elif name == RAW_WEIGHTS_TAG:
            document._raw_weights.extend(read_raw_weight(cursor) for _ in range(count))
        elif self.strict_unknown:
            raise UnknownChunkError(name, header.offset)
        else:
            logger.warning(
                "Skipping unknown chunk %r (%d records of %d bytes) at offset %d",
                name, count, header.data_size, header.offset,
            )
            self.parser.skip_payload(cursor, header)


def load_psk(source: Union[str, Path, bytes, bytearray, memoryview, BinaryIO],
             strict_unknown: bool = False) -> PskDocument:
    """Load a PSK document from a path, a buffer or a binary file object."""
    reader = PskReader(strict_unknown=strict_unknown)
    if isinstance(source, (str, Path)):
        return reader.read(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        return reader.read_bytes(source)
    return reader.read_file(source)
