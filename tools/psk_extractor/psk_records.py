"""Record decoders for the PSK chunk payloads.

Every decoder reads exactly one fixed-size record from a ByteCursor:

- Point (12 bytes): x, y, z float32
- Wedge (16 bytes), narrow: point_index uint16, 2 bytes padding,
  u, v float32, material_index uint8, reserved uint8, pad int16
- Wedge (16 bytes), wide: point_index uint32, u, v float32,
  material_index uint8, reserved uint8, pad int16
- Triangle (12 bytes): 3x uint16 wedge index, material_index uint8,
  aux_material_index uint8, smoothing_groups uint32
- Material (88 bytes): name char[64], 6x int32
- Bone (120 bytes): name char[64], flags, num_children, parent_index
  int32, orientation 4x float32, position 3x float32, length float32,
  size 3x float32
- RawWeight (12 bytes): weight float32, point_index int32, bone_index int32
"""
import struct

from psk_cursor import ByteCursor
from psk_types import (
    BONES_TAG,
    FACES_TAG,
    MATERIALS_TAG,
    POINTS_TAG,
    RAW_WEIGHTS_TAG,
    WEDGES_TAG,
    Bone,
    Material,
    Point,
    RawWeight,
    Triangle,
    Wedge,
    WedgeIndexWidth,
)

NAME_SIZE = 64

POINT = struct.Struct("<fff")
WEDGE_NARROW = struct.Struct("<H2xffBBh")
WEDGE_WIDE = struct.Struct("<IffBBh")
TRIANGLE = struct.Struct("<HHHBBI")
MATERIAL_FIELDS = struct.Struct("<6i")
BONE_FIELDS = struct.Struct("<3i4f3ff3f")
RAW_WEIGHT = struct.Struct("<fii")

RECORD_SIZES = {
    POINTS_TAG: POINT.size,
    WEDGES_TAG: WEDGE_NARROW.size,
    FACES_TAG: TRIANGLE.size,
    MATERIALS_TAG: NAME_SIZE + MATERIAL_FIELDS.size,
    BONES_TAG: NAME_SIZE + BONE_FIELDS.size,
    RAW_WEIGHTS_TAG: RAW_WEIGHT.size,
}


def read_point(cursor: ByteCursor) -> Point:
    return Point(*cursor.read_struct(POINT))


def read_wedge(cursor: ByteCursor, width: WedgeIndexWidth) -> Wedge:
    """Read a wedge whose point index has the given width.

    Both layouts are 16 bytes: the narrow one pads the index to 4 bytes.
    """
    layout = WEDGE_NARROW if width == WedgeIndexWidth.NARROW else WEDGE_WIDE
    return Wedge(*cursor.read_struct(layout))


def read_triangle(cursor: ByteCursor) -> Triangle:
    return Triangle(*cursor.read_struct(TRIANGLE))


def read_material(cursor: ByteCursor) -> Material:
    name = cursor.read_fixed_string(NAME_SIZE)
    return Material(name, *cursor.read_struct(MATERIAL_FIELDS))


def read_bone(cursor: ByteCursor) -> Bone:
    name = cursor.read_fixed_string(NAME_SIZE)
    values = cursor.read_struct(BONE_FIELDS)
    return Bone(
        raw_name=name,
        flags=values[0],
        num_children=values[1],
        parent_index=values[2],
        orientation=tuple(values[3:7]),
        position=tuple(values[7:10]),
        length=values[10],
        size=tuple(values[11:14]),
    )


def read_raw_weight(cursor: ByteCursor) -> RawWeight:
    return RawWeight(*cursor.read_struct(RAW_WEIGHT))
