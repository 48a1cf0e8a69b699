"""
Lithophane Generator
====================

Converts grayscale images into closed, printable heightmap solids.

Each pixel becomes a height on the top surface; four side walls and a flat
floor close the mesh into a watertight solid that is written as STL.

Key Features:
- Luma-to-height mapping with a configurable base thickness
- Exact triangle-count planning and single-pass mesh generation
- Numba JIT compiled mesh kernel
- Outward-facing unit normals on every non-degenerate triangle
- Binary and ASCII STL export

Example Usage:
    from lithophane_generator import LithophaneGenerator

    generator = LithophaneGenerator(base_height=1.0, model_height=5.0)
    generator.load_image("portrait.png")
    generator.generate_mesh()
    generator.export_stl("portrait.stl")
"""

__version__ = "1.0.0"
__author__ = "Lithophane Generator Team"

from .generator import LithophaneGenerator, BatchProcessor
from .heightmap import Heightmap, build_heightmap
from .planner import calculate_triangle_count, section_ranges
from .mesh import HeightmapMesher, TriangleMesh, MeshInvariantError
from .triangles import create_triangle

__all__ = [
    "LithophaneGenerator",
    "BatchProcessor",
    "Heightmap",
    "build_heightmap",
    "calculate_triangle_count",
    "section_ranges",
    "HeightmapMesher",
    "TriangleMesh",
    "MeshInvariantError",
    "create_triangle",
]
