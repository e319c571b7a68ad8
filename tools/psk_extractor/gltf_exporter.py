"""glTF exporter for PSK mesh files."""
import logging
import struct
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pygltflib import (
    GLTF2,
    Accessor,
    Asset,
    Buffer,
    BufferView,
    Material,
    Mesh,
    Node,
    Primitive,
    Scene,
    Skin,
)

from psk_reader import PskDocument, PskReader

logger = logging.getLogger(__name__)

ARRAY_BUFFER = 34962
ELEMENT_ARRAY_BUFFER = 34963
FLOAT = 5126
UNSIGNED_SHORT = 5123
UNSIGNED_INT = 5125
TRIANGLES = 4

MAX_INFLUENCES = 4

IDENTITY_MATRIX = [
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
]


class GLTFExporter:
    """Exports a decoded PSK document to glTF/GLB format."""

    def __init__(self, document: PskDocument):
        self.document = document
        self._buffer_data = b""
        self._gltf: Optional[GLTF2] = None

    @classmethod
    def from_file(cls, path: Union[str, Path], strict_unknown: bool = False) -> "GLTFExporter":
        """Load a PSK file and wrap it in an exporter."""
        return cls(PskReader(strict_unknown=strict_unknown).read(path))

    def _add_view(self, data: bytes, target: Optional[int] = None) -> int:
        """Append data to the binary blob and return its buffer view index."""
        # Keep every view 4-byte aligned
        if len(self._buffer_data) % 4 != 0:
            self._buffer_data += b"\x00" * (4 - len(self._buffer_data) % 4)

        self._gltf.bufferViews.append(
            BufferView(
                buffer=0,
                byteOffset=len(self._buffer_data),
                byteLength=len(data),
                target=target,
            )
        )
        self._buffer_data += data
        return len(self._gltf.bufferViews) - 1

    def _add_accessor(self, view: int, component_type: int, count: int, type_: str,
                      min_values: Optional[List[float]] = None,
                      max_values: Optional[List[float]] = None) -> int:
        self._gltf.accessors.append(
            Accessor(
                bufferView=view,
                componentType=component_type,
                count=count,
                type=type_,
                min=min_values,
                max=max_values,
            )
        )
        return len(self._gltf.accessors) - 1

    def _get_positions(self) -> List[Tuple[float, float, float]]:
        """One position per wedge, looked up through its point index."""
        points = self.document.points
        positions = []
        for i, wedge in enumerate(self.document.wedges):
            if not 0 <= wedge.point_index < len(points):
                raise ValueError(
                    f"Wedge {i} references point {wedge.point_index}, "
                    f"mesh has {len(points)} points"
                )
            positions.append(points[wedge.point_index].as_tuple())
        return positions

    def _compute_bounds(self, vertices: List[Tuple[float, float, float]]) -> Tuple[List[float], List[float]]:
        """Compute min/max bounds for vertices."""
        if not vertices:
            return [0, 0, 0], [0, 0, 0]

        min_bounds = [min(v[i] for v in vertices) for i in range(3)]
        max_bounds = [max(v[i] for v in vertices) for i in range(3)]
        return min_bounds, max_bounds

    def _group_triangles(self) -> Dict[int, List[int]]:
        """Triangle indices grouped by material, with winding reversed."""
        wedge_count = len(self.document.wedges)
        groups: Dict[int, List[int]] = defaultdict(list)
        for i, triangle in enumerate(self.document.triangles):
            for w in triangle.wedges:
                if w >= wedge_count:
                    raise ValueError(
                        f"Triangle {i} references wedge {w}, mesh has {wedge_count} wedges"
                    )
            groups[triangle.material_index].extend(
                (triangle.wedge2, triangle.wedge1, triangle.wedge0)
            )
        return groups

    def _get_skin_weights(self) -> Tuple[List[Tuple[int, ...]], List[Tuple[float, ...]]]:
        """Per-point joint indices and weights, strongest four influences."""
        bone_count = len(self.document.bones)
        influences = defaultdict(list)
        for i, raw in enumerate(self.document.raw_weights):
            if not 0 <= raw.bone_index < bone_count:
                raise ValueError(
                    f"Raw weight {i} references bone {raw.bone_index}, "
                    f"mesh has {bone_count} bones"
                )
            influences[raw.point_index].append((raw.weight, raw.bone_index))

        joints = []
        weights = []
        for point_index in range(len(self.document.points)):
            strongest = sorted(influences.get(point_index, []), reverse=True)[:MAX_INFLUENCES]
            total = sum(w for w, _ in strongest)
            if total <= 0:
                # Unweighted points follow the first bone
                strongest, total = [(1.0, 0)], 1.0
            strongest += [(0.0, 0)] * (MAX_INFLUENCES - len(strongest))
            joints.append(tuple(b for _, b in strongest))
            weights.append(tuple(w / total for w, _ in strongest))
        return joints, weights

    def _add_skeleton(self, mesh_node: int, attributes_list: List[Dict[str, int]]) -> List[int]:
        """Add joint nodes and a skin; returns the root joint node indices."""
        bones = self.document.bones
        joint_start = len(self._gltf.nodes)

        children_map: Dict[int, List[int]] = defaultdict(list)
        root_indices = self.document.root_bones()
        for idx, bone in enumerate(bones):
            if idx in root_indices:
                continue
            if bone.parent_index >= len(bones):
                raise ValueError(f"Bone {idx} has invalid parent index {bone.parent_index}")
            children_map[bone.parent_index].append(idx)

        for idx, bone in enumerate(bones):
            child_nodes = [c + joint_start for c in children_map.get(idx, [])]
            self._gltf.nodes.append(
                Node(
                    name=bone.name or f"joint_{idx}",
                    translation=list(bone.position),
                    rotation=list(bone.orientation),
                    children=child_nodes if child_nodes else None,
                )
            )

        ibm_data = struct.pack(f"<{16 * len(bones)}f", *(IDENTITY_MATRIX * len(bones)))
        ibm_view = self._add_view(ibm_data)
        ibm_accessor = self._add_accessor(ibm_view, FLOAT, len(bones), "MAT4")

        joint_nodes = [i + joint_start for i in range(len(bones))]
        root_nodes = [i + joint_start for i in root_indices]
        self._gltf.skins = [
            Skin(
                joints=joint_nodes,
                skeleton=root_nodes[0] if root_nodes else joint_start,
                inverseBindMatrices=ibm_accessor,
            )
        ]
        self._gltf.nodes[mesh_node].skin = 0

        point_joints, point_weights = self._get_skin_weights()
        wedges = self.document.wedges
        joint_data = b"".join(
            struct.pack("<4H", *point_joints[w.point_index]) for w in wedges
        )
        weight_data = b"".join(
            struct.pack("<4f", *point_weights[w.point_index]) for w in wedges
        )
        joint_accessor = self._add_accessor(
            self._add_view(joint_data, ARRAY_BUFFER), UNSIGNED_SHORT, len(wedges), "VEC4"
        )
        weight_accessor = self._add_accessor(
            self._add_view(weight_data, ARRAY_BUFFER), FLOAT, len(wedges), "VEC4"
        )
        for attributes in attributes_list:
            attributes["JOINTS_0"] = joint_accessor
            attributes["WEIGHTS_0"] = weight_accessor

        return root_nodes

    def build(self, include_skeleton: bool = True) -> GLTF2:
        """Build the glTF document in memory.

        Args:
            include_skeleton: Whether to include bones and skin weights

        Returns:
            GLTF2 with the binary blob attached

        Raises:
            ValueError: If the document has no wedges or triangles, or
                references records that do not exist
        """
        document = self.document
        if not document.wedges or not document.triangles:
            raise ValueError("No mesh data found in PSK document")

        self._gltf = GLTF2()
        self._gltf.asset = Asset(version="2.0", generator="PSK Extractor")
        self._buffer_data = b""

        positions = self._get_positions()
        min_bounds, max_bounds = self._compute_bounds(positions)
        position_data = b"".join(struct.pack("<3f", *p) for p in positions)
        position_accessor = self._add_accessor(
            self._add_view(position_data, ARRAY_BUFFER),
            FLOAT, len(positions), "VEC3", min_bounds, max_bounds,
        )

        uv_data = b"".join(struct.pack("<2f", w.u, w.v) for w in document.wedges)
        uv_accessor = self._add_accessor(
            self._add_view(uv_data, ARRAY_BUFFER), FLOAT, len(document.wedges), "VEC2"
        )

        self._gltf.materials = [Material(name=m.name) for m in document.materials]

        primitives = []
        for material_index, indices in sorted(self._group_triangles().items()):
            index_data = struct.pack(f"<{len(indices)}I", *indices)
            index_accessor = self._add_accessor(
                self._add_view(index_data, ELEMENT_ARRAY_BUFFER),
                UNSIGNED_INT, len(indices), "SCALAR",
            )
            primitives.append(
                Primitive(
                    attributes={"POSITION": position_accessor, "TEXCOORD_0": uv_accessor},
                    indices=index_accessor,
                    material=material_index if material_index < len(document.materials) else None,
                    mode=TRIANGLES,
                )
            )

        self._gltf.meshes = [Mesh(name=self._mesh_name(), primitives=primitives)]
        self._gltf.nodes = [Node(mesh=0, name=self._mesh_name())]
        scene_nodes = [0]

        if include_skeleton and document.bones:
            attributes_list = [p.attributes for p in primitives]
            scene_nodes += self._add_skeleton(0, attributes_list)
        elif include_skeleton:
            logger.debug("No bones in %s, exporting static mesh", document.source or "<buffer>")

        self._gltf.scenes = [Scene(nodes=scene_nodes)]
        self._gltf.scene = 0

        self._gltf.buffers = [Buffer(byteLength=len(self._buffer_data))]
        self._gltf.set_binary_blob(self._buffer_data)
        return self._gltf

    def _mesh_name(self) -> str:
        if self.document.source:
            return Path(self.document.source).stem
        return "mesh_0"

    def export(self, output_path: str, include_skeleton: bool = True):
        """Export the PSK document to a glTF/GLB file.

        Args:
            output_path: Path for output .glb file
            include_skeleton: Whether to include bones and skin weights

        Raises:
            ValueError: If no mesh data found in the document
        """
        gltf = self.build(include_skeleton=include_skeleton)
        gltf.save(output_path)
