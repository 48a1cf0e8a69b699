"""
Mesh Diagnostics

Checks that a generated solid is closed and consistently oriented.

The floor cap is two large triangles while the walls meet it with one
edge per pixel, so the floor edges carry T-junctions. open_edges() splits
every edge lying in the floor plane at the floor vertices inside it before
matching, which makes a geometrically closed mesh report no open edges.
All other edges are matched as they are, so the check stays linear in the
number of triangles apart from the floor outline.
"""

from typing import List, Tuple
import numpy as np

from .mesh import TriangleMesh

Point = Tuple[float, float, float]


def degenerate_triangle_count(mesh: TriangleMesh) -> int:
    """Number of triangles carrying the zero normal."""
    return int(np.count_nonzero(~np.any(mesh.normals != 0, axis=1)))


def signed_volume(mesh: TriangleMesh) -> float:
    """
    Enclosed volume via the divergence theorem.

    Positive when the triangles are wound with outward normals.
    """
    v = mesh.vectors.astype(np.float64)
    return float(np.einsum("ij,ij->i", v[:, 0], np.cross(v[:, 1], v[:, 2])).sum() / 6.0)


def _split_edge(
    p: np.ndarray,
    q: np.ndarray,
    points: np.ndarray,
    tolerance: float
) -> List[np.ndarray]:
    """Break segment p->q at every point strictly inside it."""
    d = q - p
    dd = float(np.dot(d, d))
    rel = points - p
    t = rel @ d / dd
    off_line = np.linalg.norm(np.cross(rel, d), axis=1) / np.sqrt(dd)
    inside = (t > tolerance) & (t < 1.0 - tolerance) & (off_line < tolerance)
    order = np.argsort(t[inside])
    return [p] + list(points[inside][order]) + [q]


def open_edges(mesh: TriangleMesh, tolerance: float = 1e-6) -> List[Tuple[Point, Point]]:
    """
    Directed edges that have no opposite partner.

    Every edge of a closed, consistently wound mesh is traversed once in
    each direction. Zero-length edges of degenerate triangles are ignored.

    Returns:
        List of unmatched (start, end) points; empty for a closed mesh
    """
    vectors = mesh.vectors.astype(np.float64)
    starts = vectors.reshape(-1, 3)
    ends = np.roll(vectors, -1, axis=1).reshape(-1, 3)

    keep = np.any(starts != ends, axis=1)
    starts, ends = starts[keep], ends[keep]

    floor = float(mesh.model_min_height)
    on_floor = (
        (np.abs(starts[:, 2] - floor) < tolerance)
        & (np.abs(ends[:, 2] - floor) < tolerance)
    )

    # Only the floor outline can hold T-junctions
    floor_points = np.unique(
        np.concatenate([starts[on_floor], ends[on_floor]]), axis=0
    )
    split_starts, split_ends = [], []
    for p, q in zip(starts[on_floor], ends[on_floor]):
        chain = _split_edge(p, q, floor_points, tolerance)
        split_starts.extend(chain[:-1])
        split_ends.extend(chain[1:])

    if split_starts:
        starts = np.concatenate([starts[~on_floor], np.array(split_starts)])
        ends = np.concatenate([ends[~on_floor], np.array(split_ends)])

    if len(starts) == 0:
        return []

    # +1 for a->b, -1 for b->a under a lexicographic ordering of endpoints
    diff = ends - starts
    first = np.argmax(diff != 0, axis=1)
    forward = diff[np.arange(len(diff)), first] > 0
    keys = np.where(
        forward[:, None],
        np.hstack([starts, ends]),
        np.hstack([ends, starts]),
    )
    unique_keys, inverse = np.unique(keys, axis=0, return_inverse=True)
    balance = np.bincount(
        inverse.reshape(-1),
        weights=np.where(forward, 1, -1),
        minlength=len(unique_keys),
    ).astype(np.int64)

    unmatched = []
    for index in np.flatnonzero(balance):
        a = tuple(unique_keys[index, :3].tolist())
        b = tuple(unique_keys[index, 3:].tolist())
        count = int(balance[index])
        if count > 0:
            unmatched.extend([(a, b)] * count)
        else:
            unmatched.extend([(b, a)] * -count)

    return unmatched


def is_watertight(mesh: TriangleMesh) -> bool:
    """True if every edge is matched by an opposite edge."""
    return not open_edges(mesh)


def mesh_stats(mesh: TriangleMesh) -> dict:
    """
    Summary statistics for a generated mesh.

    Returns:
        Dictionary with counts, bounds and volume
    """
    corners = mesh.vectors.reshape(-1, 3)
    return {
        "triangle_count": mesh.triangle_count,
        "degenerate_triangles": degenerate_triangle_count(mesh),
        "grid_size": (mesh.width, mesh.height),
        "floor_height": mesh.model_min_height,
        "bounds_min": tuple(float(c) for c in corners.min(axis=0)),
        "bounds_max": tuple(float(c) for c in corners.max(axis=0)),
        "volume": signed_volume(mesh),
    }
