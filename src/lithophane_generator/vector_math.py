"""
Minimal 3-Component Vector Math

Small, stateless operations on length-3 float arrays. They are compiled
with Numba so the mesh kernel can call them per triangle, and they stay
callable from plain Python for testing.

Division uses the NumPy error model: dividing by a zero length yields
inf/NaN components instead of raising ZeroDivisionError.
"""

import math
import numpy as np
from numba import njit


@njit(cache=True)
def subtract(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Component-wise a - b."""
    result = np.empty_like(a)
    for i in range(3):
        result[i] = a[i] - b[i]
    return result


@njit(cache=True)
def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Right-handed cross product a x b."""
    result = np.empty_like(a)
    for i in range(3):
        result[i] = a[(i + 1) % 3] * b[(i + 2) % 3] - a[(i + 2) % 3] * b[(i + 1) % 3]
    return result


@njit(cache=True)
def scale(a: np.ndarray, s: float) -> np.ndarray:
    """Multiply every component by s."""
    result = np.empty_like(a)
    for i in range(3):
        result[i] = a[i] * s
    return result


@njit(cache=True, error_model="numpy")
def divide(a: np.ndarray, s: float) -> np.ndarray:
    """Scale by the reciprocal of s (inf/NaN when s == 0)."""
    return scale(a, 1.0 / s)


@njit(cache=True)
def length(a: np.ndarray) -> float:
    """Euclidean norm."""
    return math.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


@njit(cache=True, error_model="numpy")
def normalize(a: np.ndarray) -> np.ndarray:
    """Unit vector in the direction of a."""
    return divide(a, length(a))
