"""
Unit tests for the geometry core: vector math, triangles, heightmaps,
triangle planning and solid mesh generation.
"""

import sys
from pathlib import Path
from unittest import mock
import numpy as np
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lithophane_generator import vector_math
from lithophane_generator.triangles import create_triangle
from lithophane_generator.heightmap import build_heightmap, preprocess_luma
from lithophane_generator.planner import calculate_triangle_count, section_ranges, SECTIONS
from lithophane_generator.mesh import HeightmapMesher, MeshInvariantError
from lithophane_generator.validation import (
    open_edges,
    is_watertight,
    signed_volume,
    degenerate_triangle_count,
    mesh_stats,
)


def random_luma(width: int, height: int, seed: int = 42) -> np.ndarray:
    """Random (H, W) luma grid."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width), dtype=np.uint8)


def make_mesh(luma: np.ndarray, model_height: float = 5.0, base_height: float = 1.0):
    heightmap = build_heightmap(luma, model_height=model_height, base_height=base_height)
    return heightmap, HeightmapMesher().mesh(heightmap)


class TestVectorMath(unittest.TestCase):
    """Tests for vector operations."""

    def test_subtract(self):
        a = np.array([3.0, 2.0, 1.0])
        b = np.array([1.0, 1.0, 1.0])
        assert np.allclose(vector_math.subtract(a, b), [2.0, 1.0, 0.0])

    def test_cross_axes(self):
        """x cross y = z."""
        x = np.array([1.0, 0.0, 0.0])
        y = np.array([0.0, 1.0, 0.0])
        assert np.allclose(vector_math.cross(x, y), [0.0, 0.0, 1.0])

    def test_cross_antisymmetry(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            a = rng.normal(size=3)
            b = rng.normal(size=3)
            assert np.allclose(vector_math.cross(a, b), -vector_math.cross(b, a))

    def test_cross_matches_numpy(self):
        a = np.array([1.5, -2.0, 0.25])
        b = np.array([-0.5, 4.0, 3.0])
        assert np.allclose(vector_math.cross(a, b), np.cross(a, b))

    def test_length(self):
        assert np.isclose(vector_math.length(np.array([3.0, 4.0, 0.0])), 5.0)

    def test_normalize_unit_length(self):
        rng = np.random.default_rng(11)
        for _ in range(20):
            v = rng.normal(size=3) * 100
            assert np.isclose(vector_math.length(vector_math.normalize(v)), 1.0)

    def test_scale_and_divide(self):
        v = np.array([2.0, -4.0, 6.0])
        assert np.allclose(vector_math.scale(v, 0.5), [1.0, -2.0, 3.0])
        assert np.allclose(vector_math.divide(v, 2.0), [1.0, -2.0, 3.0])

    def test_divide_by_zero_is_not_an_error(self):
        """Zero length follows float semantics instead of raising."""
        result = vector_math.normalize(np.zeros(3))
        assert np.all(np.isnan(result))

        result = vector_math.divide(np.array([1.0, -1.0, 0.0]), 0.0)
        assert result[0] == np.inf
        assert result[1] == -np.inf
        assert np.isnan(result[2])


class TestTriangleFactory(unittest.TestCase):
    """Tests for triangle construction."""

    def setUp(self):
        self.a = np.array([0, 0, 0], dtype=np.float32)
        self.b = np.array([1, 0, 0], dtype=np.float32)
        self.c = np.array([0, 1, 0], dtype=np.float32)

    def test_counter_clockwise_points_up(self):
        normal, vertices = create_triangle(self.a, self.b, self.c, False)
        assert np.allclose(normal, [0, 0, 1])
        assert np.allclose(vertices, [[0, 0, 0], [1, 0, 0], [0, 1, 0]])
        assert vertices.dtype == np.float32

    def test_flip_normal(self):
        normal, _ = create_triangle(self.a, self.b, self.c, True)
        assert np.allclose(normal, [0, 0, -1])

    def test_winding_reverses_normal(self):
        normal, _ = create_triangle(self.a, self.c, self.b, False)
        assert np.allclose(normal, [0, 0, -1])

    def test_normal_is_unit_length(self):
        a = np.array([0, 0, 0], dtype=np.float32)
        b = np.array([3, 0, 2], dtype=np.float32)
        c = np.array([0, 5, 7], dtype=np.float32)
        normal, _ = create_triangle(a, b, c, False)
        assert abs(np.linalg.norm(normal) - 1.0) < 1e-5

    def test_collinear_gives_zero_normal(self):
        a = np.array([0, 0, 0], dtype=np.float32)
        b = np.array([1, 1, 1], dtype=np.float32)
        c = np.array([2, 2, 2], dtype=np.float32)
        normal, _ = create_triangle(a, b, c, False)
        assert np.all(normal == 0)

    def test_coincident_gives_zero_normal(self):
        normal, _ = create_triangle(self.a, self.a, self.a, False)
        assert np.all(normal == 0)


class TestTriangleCountPlanner(unittest.TestCase):
    """Tests for triangle count planning."""

    def test_smallest_image(self):
        assert calculate_triangle_count(2, 2) == 12

    def test_formula(self):
        # 4x3: top 3*2*2=12, front/back 3*4=12, left/right 2*4=8, floor 2
        assert calculate_triangle_count(4, 3) == 34

    def test_rejects_thin_images(self):
        with self.assertRaises(ValueError):
            calculate_triangle_count(1, 10)
        with self.assertRaises(ValueError):
            calculate_triangle_count(10, 1)

    def test_section_ranges_cover_mesh(self):
        ranges = section_ranges(5, 4)
        assert tuple(ranges.keys()) == SECTIONS

        start = 0
        for span in ranges.values():
            assert span.start == start
            start = span.stop
        assert start == calculate_triangle_count(5, 4)

    def test_section_sizes(self):
        ranges = section_ranges(5, 4)
        sizes = {name: span.stop - span.start for name, span in ranges.items()}
        assert sizes == {
            "top": 24, "front": 8, "back": 8, "right": 6, "left": 6, "floor": 2
        }


class TestHeightmapBuilder(unittest.TestCase):
    """Tests for luma to height mapping."""

    def test_flat_gray_floor(self):
        """Uniform luma 128, model 10, base 2."""
        luma = np.full((2, 2), 128, dtype=np.uint8)
        heightmap = build_heightmap(luma, model_height=10.0, base_height=2.0)

        assert np.allclose(heightmap.heights, 128 / 255 * 10, atol=1e-5)
        self.assertAlmostEqual(heightmap.min_height, 5.0196, delta=1e-4)
        self.assertAlmostEqual(heightmap.model_min_height, 3.0196, delta=1e-4)
        self.assertAlmostEqual(
            heightmap.model_min_height, heightmap.min_height - 2.0, delta=1e-5
        )

    def test_indexing_is_x_then_y(self):
        luma = np.zeros((3, 4), dtype=np.uint8)  # height 3, width 4
        luma[0, 3] = 255                         # pixel x=3, y=0

        heightmap = build_heightmap(luma, model_height=2.0)
        assert heightmap.width == 4
        assert heightmap.height == 3
        assert heightmap.heights[3, 0] == np.float32(2.0)
        assert heightmap.heights.sum() == np.float32(2.0)

    def test_heights_are_float32_and_read_only(self):
        heightmap = build_heightmap(random_luma(4, 4), model_height=3.0)
        assert heightmap.heights.dtype == np.float32
        assert not heightmap.heights.flags.writeable
        with self.assertRaises(ValueError):
            heightmap.heights[0, 0] = 1.0

    def test_range(self):
        heightmap = build_heightmap(random_luma(8, 6), model_height=4.0)
        assert heightmap.heights.min() >= 0.0
        assert heightmap.heights.max() <= 4.0
        assert heightmap.min_height == float(heightmap.heights.min())

    def test_invert(self):
        luma = np.array([[0, 255], [255, 0]], dtype=np.uint8)
        heightmap = build_heightmap(luma, model_height=1.0, invert=True)
        assert heightmap.heights[0, 0] == 1.0
        assert heightmap.heights[1, 0] == 0.0

    def test_smoothing_reduces_peaks(self):
        luma = np.zeros((9, 9), dtype=np.uint8)
        luma[4, 4] = 255
        smoothed = preprocess_luma(luma, smooth_sigma=1.0)
        assert smoothed.dtype == np.uint8
        assert 0 < smoothed[4, 4] < 255
        assert smoothed[4, 5] > 0

    def test_rejects_small_images(self):
        with self.assertRaises(ValueError):
            build_heightmap(np.zeros((1, 5), dtype=np.uint8), model_height=1.0)
        with self.assertRaises(ValueError):
            build_heightmap(np.zeros((0, 0), dtype=np.uint8), model_height=1.0)

    def test_out_of_range_luma_is_clipped(self):
        luma = np.array([[256, -1], [300, 128]])
        heightmap = build_heightmap(luma, model_height=1.0)
        assert heightmap.heights[0, 0] == 1.0
        assert heightmap.heights[1, 0] == 0.0
        assert heightmap.heights[0, 1] == 1.0
        assert preprocess_luma(luma).tolist() == [[255, 0], [255, 128]]

    def test_negative_base_height_warns(self):
        luma = np.full((2, 2), 128, dtype=np.uint8)
        with self.assertLogs("lithophane_generator.heightmap", "WARNING") as logs:
            heightmap = build_heightmap(luma, model_height=1.0, base_height=-1.0)
        assert "Negative base height" in logs.output[0]
        assert heightmap.model_min_height > heightmap.min_height


class TestHeightmapMesher(unittest.TestCase):
    """Tests for solid mesh generation."""

    def test_triangle_count_matches_planner(self):
        for width, height in [(2, 2), (2, 7), (3, 5), (7, 4), (16, 9)]:
            _, mesh = make_mesh(random_luma(width, height))
            assert mesh.triangle_count == calculate_triangle_count(width, height)
            assert mesh.normals.shape == (mesh.triangle_count, 3)
            assert mesh.vectors.shape == (mesh.triangle_count, 3, 3)

    def test_every_slot_written(self):
        _, mesh = make_mesh(random_luma(6, 5))
        assert np.all(np.isfinite(mesh.vectors))
        assert np.all(np.isfinite(mesh.normals))
        # With a positive base no triangle is degenerate
        assert degenerate_triangle_count(mesh) == 0

    def test_output_is_read_only(self):
        _, mesh = make_mesh(random_luma(3, 3))
        assert not mesh.vectors.flags.writeable
        assert not mesh.normals.flags.writeable

    def test_count_mismatch_raises(self):
        heightmap = build_heightmap(random_luma(3, 3), model_height=1.0, base_height=1.0)
        with mock.patch(
            "lithophane_generator.mesh.calculate_triangle_count",
            return_value=calculate_triangle_count(3, 3) + 1
        ):
            with self.assertRaises(MeshInvariantError):
                HeightmapMesher().mesh(heightmap)

    def test_all_white_2x2(self):
        """Top and floor coincide, so every wall collapses."""
        luma = np.full((2, 2), 255, dtype=np.uint8)
        heightmap, mesh = make_mesh(luma, model_height=1.0, base_height=0.0)

        assert heightmap.min_height == 1.0
        assert heightmap.model_min_height == 1.0
        assert mesh.triangle_count == 12

        for name in ("front", "back", "right", "left"):
            section = mesh.section(name)
            assert section.triangle_count == 2
            assert np.all(section.normals == 0), name

        assert np.allclose(mesh.section("top").normals, [0, 0, 1])
        assert np.allclose(mesh.section("floor").normals, [0, 0, -1])
        assert degenerate_triangle_count(mesh) == 8

    def test_center_peak_3x3(self):
        luma = np.zeros((3, 3), dtype=np.uint8)
        luma[1, 1] = 255
        heightmap, mesh = make_mesh(luma, model_height=5.0, base_height=1.0)

        assert heightmap.min_height == 0.0
        assert heightmap.model_min_height == -1.0

        top = mesh.section("top").vectors.reshape(-1, 3)
        center = (top[:, 0] == 1) & (top[:, 1] == 1)
        assert np.any(center)
        assert np.all(top[center, 2] == 5.0)
        assert np.all(top[~center, 2] == 0.0)

        floor = mesh.section("floor").vectors
        assert np.all(floor[:, :, 2] == -1.0)

        for name in ("front", "back", "right", "left"):
            wall = mesh.section(name).vectors
            assert set(np.unique(wall[:, :, 2])) <= {-1.0, 0.0}

    def test_floor_spans_image(self):
        _, mesh = make_mesh(random_luma(5, 4))
        floor = mesh.section("floor").vectors.reshape(-1, 3)
        xs = set(floor[:, 0].tolist())
        ys = set(floor[:, 1].tolist())
        assert xs == {0.0, 4.0}
        assert ys == {0.0, 3.0}

    def test_normals_unit_and_outward(self):
        _, mesh = make_mesh(random_luma(7, 5), model_height=8.0, base_height=1.5)

        lengths = np.linalg.norm(mesh.normals, axis=1)
        assert np.all(np.abs(lengths - 1.0) < 1e-5)

        assert np.all(mesh.section("top").normals @ np.array([0, 0, 1]) >= 0)
        assert np.allclose(mesh.section("floor").normals, [0, 0, -1])
        assert np.allclose(mesh.section("front").normals, [0, -1, 0])
        assert np.allclose(mesh.section("back").normals, [0, 1, 0])
        assert np.allclose(mesh.section("right").normals, [1, 0, 0])
        assert np.allclose(mesh.section("left").normals, [-1, 0, 0])

    def test_walls_lie_on_boundary(self):
        _, mesh = make_mesh(random_luma(6, 4))
        assert np.all(mesh.section("front").vectors[:, :, 1] == 0)
        assert np.all(mesh.section("back").vectors[:, :, 1] == 3)
        assert np.all(mesh.section("right").vectors[:, :, 0] == 5)
        assert np.all(mesh.section("left").vectors[:, :, 0] == 0)

    def test_watertight(self):
        for width, height in [(2, 2), (3, 3), (5, 4), (4, 7)]:
            _, mesh = make_mesh(random_luma(width, height, seed=width * height))
            assert open_edges(mesh) == [], (width, height)
            assert is_watertight(mesh)

    def test_watertight_large_image(self):
        _, mesh = make_mesh(random_luma(160, 120))
        assert is_watertight(mesh)

        holed = mesh._replace(vectors=mesh.vectors[1:], normals=mesh.normals[1:])
        assert len(open_edges(holed)) == 3

    def test_area_weighted_normals_cancel(self):
        """A closed surface has zero total vector area."""
        _, mesh = make_mesh(random_luma(6, 6))
        v = mesh.vectors.astype(np.float64)
        area_vectors = np.cross(v[:, 1] - v[:, 0], v[:, 2] - v[:, 0]) / 2
        assert np.allclose(area_vectors.sum(axis=0), 0, atol=1e-6)

    def test_deterministic(self):
        luma = random_luma(5, 5)
        _, first = make_mesh(luma)
        _, second = make_mesh(luma)
        assert np.array_equal(first.vectors, second.vectors)
        assert np.array_equal(first.normals, second.normals)


class TestValidation(unittest.TestCase):
    """Tests for mesh diagnostics."""

    def test_volume_center_peak(self):
        """Pyramid of volume 5 on top of a 2x2x1 slab."""
        luma = np.zeros((3, 3), dtype=np.uint8)
        luma[1, 1] = 255
        _, mesh = make_mesh(luma, model_height=5.0, base_height=1.0)
        self.assertAlmostEqual(signed_volume(mesh), 9.0, places=4)

    def test_volume_flat(self):
        luma = np.full((4, 5), 200, dtype=np.uint8)
        _, mesh = make_mesh(luma, model_height=3.0, base_height=2.0)
        # (W-1) * (H-1) * base
        self.assertAlmostEqual(signed_volume(mesh), 4 * 3 * 2.0, places=4)

    def test_reversed_winding_negative_volume(self):
        _, mesh = make_mesh(random_luma(4, 4))
        flipped = mesh._replace(vectors=mesh.vectors[:, ::-1, :])
        assert signed_volume(flipped) < 0

    def test_missing_triangle_detected(self):
        _, mesh = make_mesh(random_luma(4, 4))
        holed = mesh._replace(vectors=mesh.vectors[1:], normals=mesh.normals[1:])
        edges = open_edges(holed)
        assert len(edges) == 3
        assert not is_watertight(holed)

    def test_mesh_stats(self):
        _, mesh = make_mesh(random_luma(5, 3), model_height=4.0, base_height=1.0)
        stats = mesh_stats(mesh)
        assert stats["triangle_count"] == calculate_triangle_count(5, 3)
        assert stats["grid_size"] == (5, 3)
        assert stats["degenerate_triangles"] == 0
        assert stats["bounds_min"][:2] == (0.0, 0.0)
        assert stats["bounds_max"][:2] == (4.0, 2.0)
        assert stats["bounds_min"][2] == mesh.model_min_height
        assert stats["volume"] > 0


if __name__ == "__main__":
    unittest.main(verbosity=2)
