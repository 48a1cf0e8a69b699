"""
Heightmap Solid Mesh Generation with Numba JIT Compilation

Turns a Heightmap into a closed, watertight triangle mesh:

1. Top surface: two triangles per grid cell, split along the
   (i+1, j) - (i, j+1) diagonal everywhere
2. Front/back walls (y = 0 / y = H-1), one quad per column
3. Right/left walls (x = W-1 / x = 0), one quad per row
4. Floor cap: two triangles spanning the floor rectangle

Every triangle is wound so its right-hand normal points out of the solid.
The output arrays are allocated once at the size computed by the planner
and filled in a single pass; the kernel reports how many slots it wrote.
"""

import logging
from typing import NamedTuple
import numpy as np
from numba import njit

from .heightmap import Heightmap
from .planner import calculate_triangle_count, section_ranges
from .triangles import create_triangle

logger = logging.getLogger(__name__)


class MeshInvariantError(RuntimeError):
    """The generator emitted a different number of triangles than planned."""


class TriangleMesh(NamedTuple):
    """Container for solid mesh geometry."""
    normals: np.ndarray      # (N, 3) float32 unit normals (zero if degenerate)
    vectors: np.ndarray      # (N, 3, 3) float32 triangle corners
    width: int               # heightmap width in pixels
    height: int              # heightmap height in pixels
    model_min_height: float  # z of the floor plane

    @property
    def triangle_count(self) -> int:
        return len(self.vectors)

    def section(self, name: str) -> "TriangleMesh":
        """Sub-mesh of a single section ("top", "front", "back", "right", "left", "floor")."""
        span = section_ranges(self.width, self.height)[name]
        return self._replace(normals=self.normals[span], vectors=self.vectors[span])


@njit(cache=True)
def _vertex(x, y, z) -> np.ndarray:
    v = np.empty(3, dtype=np.float32)
    v[0] = x
    v[1] = y
    v[2] = z
    return v


@njit(cache=True)
def _emit(normals, vectors, index, a, b, c) -> int:
    """Write one triangle at index and return the next free index."""
    normal, corners = create_triangle(a, b, c, False)
    normals[index] = normal
    vectors[index] = corners
    return index + 1


@njit(cache=True)
def _fill_mesh(
    heights: np.ndarray,
    floor: np.float32,
    normals: np.ndarray,
    vectors: np.ndarray
) -> int:
    """
    Emit every section of the solid into the preallocated arrays.

    Args:
        heights: (W, H) float32 sample grid
        floor: z of the floor plane
        normals: (N, 3) float32 output
        vectors: (N, 3, 3) float32 output

    Returns:
        Number of triangles written
    """
    width, height = heights.shape
    last_x = width - 1
    last_y = height - 1
    n = 0

    # Top surface
    for i in range(width - 1):
        for j in range(height - 1):
            v00 = _vertex(i, j, heights[i, j])
            v10 = _vertex(i + 1, j, heights[i + 1, j])
            v01 = _vertex(i, j + 1, heights[i, j + 1])
            v11 = _vertex(i + 1, j + 1, heights[i + 1, j + 1])

            n = _emit(normals, vectors, n, v00, v10, v01)
            n = _emit(normals, vectors, n, v10, v11, v01)

    # Front (y = 0), faces -y
    for i in range(width - 1):
        f0 = _vertex(i, 0, floor)
        f1 = _vertex(i + 1, 0, floor)
        t0 = _vertex(i, 0, heights[i, 0])
        t1 = _vertex(i + 1, 0, heights[i + 1, 0])

        n = _emit(normals, vectors, n, f0, f1, t0)
        n = _emit(normals, vectors, n, t1, t0, f1)

    # Back (y = H-1), faces +y
    for i in range(width - 1):
        f0 = _vertex(i, last_y, floor)
        f1 = _vertex(i + 1, last_y, floor)
        t0 = _vertex(i, last_y, heights[i, last_y])
        t1 = _vertex(i + 1, last_y, heights[i + 1, last_y])

        n = _emit(normals, vectors, n, t0, f1, f0)
        n = _emit(normals, vectors, n, f1, t0, t1)

    # Right (x = W-1), faces +x
    for j in range(height - 1):
        f0 = _vertex(last_x, j, floor)
        f1 = _vertex(last_x, j + 1, floor)
        t0 = _vertex(last_x, j, heights[last_x, j])
        t1 = _vertex(last_x, j + 1, heights[last_x, j + 1])

        n = _emit(normals, vectors, n, f0, f1, t0)
        n = _emit(normals, vectors, n, t1, t0, f1)

    # Left (x = 0), faces -x
    for j in range(height - 1):
        f0 = _vertex(0, j, floor)
        f1 = _vertex(0, j + 1, floor)
        t0 = _vertex(0, j, heights[0, j])
        t1 = _vertex(0, j + 1, heights[0, j + 1])

        n = _emit(normals, vectors, n, t0, f1, f0)
        n = _emit(normals, vectors, n, f1, t0, t1)

    # Floor, faces -z
    c00 = _vertex(0, 0, floor)
    c10 = _vertex(last_x, 0, floor)
    c01 = _vertex(0, last_y, floor)
    c11 = _vertex(last_x, last_y, floor)

    n = _emit(normals, vectors, n, c01, c10, c00)
    n = _emit(normals, vectors, n, c01, c11, c10)

    return n


class HeightmapMesher:
    """
    Generates the closed solid for a heightmap.

    Wraps the Numba kernel: allocates the output once from the planned
    triangle count and verifies that every slot was written.
    """

    def mesh(self, heightmap: Heightmap) -> TriangleMesh:
        """
        Generate the solid mesh.

        Args:
            heightmap: Heightmap from build_heightmap()

        Returns:
            TriangleMesh with read-only arrays
        """
        width, height = heightmap.width, heightmap.height
        count = calculate_triangle_count(width, height)

        normals = np.empty((count, 3), dtype=np.float32)
        vectors = np.empty((count, 3, 3), dtype=np.float32)

        written = _fill_mesh(
            heightmap.heights,
            np.float32(heightmap.model_min_height),
            normals,
            vectors
        )

        if written != count:
            raise MeshInvariantError(
                f"Planned {count} triangles for a {width}x{height} heightmap "
                f"but generated {written}"
            )

        normals.setflags(write=False)
        vectors.setflags(write=False)

        logger.debug("Generated %d triangles for %dx%d heightmap", count, width, height)

        return TriangleMesh(
            normals=normals,
            vectors=vectors,
            width=width,
            height=height,
            model_min_height=heightmap.model_min_height,
        )
