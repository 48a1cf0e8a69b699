"""
Triangle Factory

Builds a single triangle record (normal + three ordered vertices) from
three corner points. The normal follows the right-hand rule over the
winding a -> b -> c.
"""

from typing import Tuple
import numpy as np
from numba import njit

from .vector_math import subtract, cross, scale, length, normalize


@njit(cache=True, error_model="numpy")
def create_triangle(
    a: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    flip_normal: bool
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Create a triangle from three float32 vertices.

    Args:
        a, b, c: Corner positions, shape (3,)
        flip_normal: If True, negate the computed normal

    Returns:
        Tuple of (normal (3,), vertices (3, 3) float32)

    Collinear or coincident corners have no defined orientation and get
    the zero normal, which STL readers treat as "compute it yourself".
    """
    face = cross(subtract(b, a), subtract(c, a))

    if length(face) == 0.0:
        normal = np.zeros_like(face)
    else:
        normal = normalize(face)

    if flip_normal:
        normal = scale(normal, -1.0)

    vertices = np.empty((3, 3), dtype=np.float32)
    for k in range(3):
        vertices[0, k] = a[k]
        vertices[1, k] = b[k]
        vertices[2, k] = c[k]

    return normal, vertices
