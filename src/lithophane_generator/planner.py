"""
Triangle Count Planner

Computes the exact number of triangles a heightmap solid contains so the
output arrays are allocated once, at the final size.
"""

from collections import OrderedDict
from typing import Dict


# Emission order of the mesh sections
SECTIONS = ("top", "front", "back", "right", "left", "floor")


def _check_dimensions(width: int, height: int):
    if width < 2 or height < 2:
        raise ValueError(
            f"Image must be at least 2x2 pixels, got {width}x{height}"
        )


def calculate_triangle_count(width: int, height: int) -> int:
    """
    Number of triangles for a width x height heightmap.

    Args:
        width: Image width in pixels (>= 2)
        height: Image height in pixels (>= 2)

    Returns:
        Total triangle count
    """
    _check_dimensions(width, height)

    # Each cell of the surface needs 2 triangles
    count = (width - 1) * (height - 1) * 2

    # Front and back walls: (width - 1) columns, 2 triangles each
    count += (width - 1) * 2 * 2

    # Left and right walls: (height - 1) rows, 2 triangles each
    count += (height - 1) * 2 * 2

    # Floor
    count += 2

    return count


def section_ranges(width: int, height: int) -> Dict[str, slice]:
    """
    Index range occupied by each section in the generated mesh.

    Returns:
        Ordered mapping of section name -> slice
    """
    _check_dimensions(width, height)

    sizes = {
        "top": (width - 1) * (height - 1) * 2,
        "front": (width - 1) * 2,
        "back": (width - 1) * 2,
        "right": (height - 1) * 2,
        "left": (height - 1) * 2,
        "floor": 2,
    }

    ranges = OrderedDict()
    start = 0
    for name in SECTIONS:
        ranges[name] = slice(start, start + sizes[name])
        start += sizes[name]

    return ranges
