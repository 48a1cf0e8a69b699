"""
STL Format Exporter

STL is the lingua franca of 3D printing slicers: a flat list of
triangles, each with a facet normal and three vertices, no shared
vertex table.

Binary layout (little endian):
- 80-byte header
- uint32 triangle count
- per triangle: 12 float32 (normal + 3 vertices) and a uint16 attribute

Writing goes through numpy-stl. The generated normals are written as-is;
numpy-stl is told not to recompute them, since its own normals are not
unit length.
"""

import logging
from pathlib import Path
from typing import Union
import numpy as np
import stl
from stl import mesh as stl_mesh

from ..mesh import TriangleMesh

logger = logging.getLogger(__name__)


class STLExporter:
    """
    Export a TriangleMesh to STL.

    Supports:
    - Binary STL (default, compact)
    - ASCII STL (human readable)
    - Uniform scaling of vertex positions (e.g. mm per pixel)
    """

    def __init__(self, binary: bool = True, scale: float = 1.0):
        """
        Initialize the exporter.

        Args:
            binary: If True, write binary STL, otherwise ASCII
            scale: Scale factor for vertex positions
        """
        self.binary = binary
        self.scale = scale

    def to_stl_mesh(self, mesh: TriangleMesh, name: str = "lithophane") -> stl_mesh.Mesh:
        """
        Convert to a numpy-stl Mesh, preserving triangle order and normals.

        Args:
            mesh: TriangleMesh from HeightmapMesher
            name: Solid name (used in the ASCII header)

        Returns:
            numpy-stl Mesh
        """
        if mesh.triangle_count == 0:
            raise ValueError("Cannot export empty mesh")

        data = np.zeros(mesh.triangle_count, dtype=stl_mesh.Mesh.dtype)
        data["normals"] = mesh.normals
        data["vectors"] = mesh.vectors * np.float32(self.scale)

        return stl_mesh.Mesh(data, calculate_normals=False, name=name)

    def export(
        self,
        mesh: TriangleMesh,
        output_path: Union[str, Path],
        name: str = "lithophane"
    ):
        """
        Export mesh to an STL file.

        Args:
            mesh: TriangleMesh from HeightmapMesher
            output_path: Output file path (.stl)
            name: Solid name
        """
        output_path = Path(output_path)
        solid = self.to_stl_mesh(mesh, name)

        mode = stl.Mode.BINARY if self.binary else stl.Mode.ASCII
        solid.save(str(output_path), mode=mode, update_normals=False)

        logger.info(
            "Wrote %d triangles to %s (%s)",
            mesh.triangle_count, output_path, "binary" if self.binary else "ascii"
        )
