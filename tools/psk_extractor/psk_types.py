"""Type definitions for the PSK (ActorX) mesh format."""
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

CHUNK_HEADER_SIZE = 32

# Wedge chunks with more records than this store 32-bit point indices
NARROW_WEDGE_LIMIT = 65536

MAGIC_TAG = "ACTRHEAD"
POINTS_TAG = "PNTS0000"
WEDGES_TAG = "VTXW0000"
FACES_TAG = "FACE0000"
FACES32_TAG = "FACE3200"
MATERIALS_TAG = "MATT0000"
BONES_TAG = "REFSKELT"
RAW_WEIGHTS_TAG = "RAWWEIGHTS"


def trim_fixed_string(raw: str) -> str:
    """Strip the padding from a fixed-width string field.

    Names are NUL terminated; whatever follows the terminator is padding
    (often uninitialised memory from the exporter). Trailing whitespace is
    removed as well, nothing before it is touched.
    """
    return raw.split("\x00", 1)[0].rstrip()


class WedgeIndexWidth(IntEnum):
    """Width in bits of the point index stored in a wedge record."""

    NARROW = 16
    WIDE = 32

    @classmethod
    def for_count(cls, wedge_count: int) -> "WedgeIndexWidth":
        if wedge_count <= NARROW_WEDGE_LIMIT:
            return cls.NARROW
        return cls.WIDE


@dataclass(frozen=True)
class ChunkHeader:
    """32-byte header preceding every PSK chunk."""

    tag: str
    type_flag: int
    data_size: int
    data_count: int
    offset: int = 0

    @property
    def name(self) -> str:
        return trim_fixed_string(self.tag)

    @property
    def payload_size(self) -> int:
        return self.data_size * self.data_count


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    z: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Wedge:
    """Vertex instance: a point reference plus UV and material."""

    point_index: int
    u: float
    v: float
    material_index: int
    reserved: int = 0
    pad: int = 0

    @property
    def uv(self) -> Tuple[float, float]:
        return (self.u, self.v)


@dataclass(frozen=True)
class Triangle:
    wedge0: int
    wedge1: int
    wedge2: int
    material_index: int
    aux_material_index: int
    smoothing_groups: int

    @property
    def wedges(self) -> Tuple[int, int, int]:
        return (self.wedge0, self.wedge1, self.wedge2)


@dataclass(frozen=True)
class Material:
    raw_name: str
    texture_index: int
    poly_flags: int
    aux_material: int
    aux_flags: int
    lod_bias: int
    lod_style: int

    @property
    def name(self) -> str:
        return trim_fixed_string(self.raw_name)


@dataclass(frozen=True)
class Bone:
    """Reference skeleton bone, position and orientation relative to parent."""

    raw_name: str
    flags: int
    num_children: int
    parent_index: int
    orientation: Tuple[float, float, float, float]  # quaternion x, y, z, w
    position: Tuple[float, float, float]
    length: float
    size: Tuple[float, float, float]

    @property
    def name(self) -> str:
        return trim_fixed_string(self.raw_name)


@dataclass(frozen=True)
class RawWeight:
    weight: float
    point_index: int
    bone_index: int
