#!/usr/bin/env python3
"""
Lithophane Generator Demo Script

This script demonstrates the full pipeline by:
1. Creating synthetic grayscale test images (no external images needed)
2. Building heightmaps and closed solid meshes
3. Checking that every mesh is watertight
4. Exporting binary STL files and printing statistics

Run with: python examples/demo.py
"""

import sys
from pathlib import Path
import numpy as np
import time

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lithophane_generator import LithophaneGenerator
from lithophane_generator.validation import is_watertight


def create_test_image_dome(size: int = 64) -> np.ndarray:
    """
    Create a radial dome: bright center fading to black at the rim.

    Returns:
        (size, size) uint8 luma array
    """
    y, x = np.mgrid[0:size, 0:size]
    center = (size - 1) / 2
    dist = np.sqrt((x - center) ** 2 + (y - center) ** 2) / center
    return (np.clip(1 - dist, 0, 1) * 255).astype(np.uint8)


def create_test_image_rings(size: int = 64, rings: int = 5) -> np.ndarray:
    """
    Create concentric sinusoidal rings.

    Returns:
        (size, size) uint8 luma array
    """
    y, x = np.mgrid[0:size, 0:size]
    center = (size - 1) / 2
    dist = np.sqrt((x - center) ** 2 + (y - center) ** 2) / center
    return ((np.cos(dist * rings * np.pi) + 1) * 127.5).astype(np.uint8)


def create_test_image_steps(width: int = 48, height: int = 24, steps: int = 6) -> np.ndarray:
    """
    Create a staircase of gray levels from left to right.

    Returns:
        (height, width) uint8 luma array
    """
    levels = (np.arange(width) * steps // width) * (255 // (steps - 1))
    return np.tile(levels.astype(np.uint8), (height, 1))


def run_demo():
    """Run the demonstration."""
    print("=" * 60)
    print("Lithophane Generator - Demo")
    print("=" * 60)
    print()

    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    test_images = [
        ("dome", create_test_image_dome(64)),
        ("rings", create_test_image_rings(96)),
        ("steps", create_test_image_steps()),
    ]

    total_start = time.time()

    for name, luma in test_images:
        print(f"\n--- Processing: {name} ---")
        print(f"Input size: {luma.shape[1]}x{luma.shape[0]} pixels")

        generator = LithophaneGenerator(base_height=0.8, model_height=3.0, invert=True)
        generator.load_array(luma)

        mesh_start = time.time()
        generator.generate_mesh()
        mesh_time = time.time() - mesh_start

        stats = generator.get_mesh_stats()
        print(f"  Mesh generation: {mesh_time*1000:.1f}ms")
        print(f"  Triangles: {stats['triangle_count']}")
        print(f"  Degenerate triangles: {stats['degenerate_triangles']}")
        print(f"  Volume: {stats['volume']:.2f}")

        print(f"  Watertight: {is_watertight(generator.mesh)}")

        output_path = output_dir / f"{name}.stl"
        generator.export_stl(output_path, scale=0.2)
        print(f"  Saved: {output_path}")

    total_time = time.time() - total_start

    print("\n" + "=" * 60)
    print(f"Demo complete! Total time: {total_time:.2f}s")
    print(f"Output files in: {output_dir}")
    print("=" * 60)

    return 0


def benchmark_meshing():
    """Benchmark mesh generation for growing images."""
    print("\n--- Mesh Generation Benchmark ---\n")

    for size in [64, 256, 1024]:
        luma = create_test_image_rings(size)
        generator = LithophaneGenerator().load_array(luma).build_heightmap()

        start = time.time()
        generator.generate_mesh()
        elapsed = time.time() - start

        print(f"Image size: {size}x{size}")
        print(f"  {generator.triangle_count} triangles in {elapsed*1000:.1f}ms")
        print()


if __name__ == "__main__":
    run_demo()

    # Uncomment to run benchmark
    # benchmark_meshing()
