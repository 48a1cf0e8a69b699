"""
Main LithophaneGenerator Class

This is the primary interface for the lithophane pipeline.
It orchestrates:
1. Image loading (grayscale only)
2. Heightmap construction
3. Solid mesh generation
4. Export to STL

Example Usage:
    generator = LithophaneGenerator(base_height=1.0, model_height=5.0)
    generator.load_image("portrait.png")
    generator.build_heightmap()
    generator.generate_mesh()
    generator.export_stl("portrait.stl")
"""

import logging
from pathlib import Path
from typing import Union, Optional
import numpy as np

from .ingestion import ImageLoader
from .heightmap import Heightmap, build_heightmap
from .mesh import HeightmapMesher, TriangleMesh
from .planner import calculate_triangle_count
from .validation import mesh_stats
from .exporters import STLExporter

logger = logging.getLogger(__name__)


class LithophaneGenerator:
    """
    High-level interface for heightmap solid generation.

    Attributes:
        base_height: Thickness of the solid below the lowest surface point
        model_height: Height of a white pixel above a black one
        invert: Map dark pixels to high surface points
        smooth_sigma: Gaussian smoothing of the luma before mapping
    """

    def __init__(
        self,
        base_height: float = 1.0,
        model_height: float = 5.0,
        invert: bool = False,
        smooth_sigma: float = 0.0
    ):
        """
        Initialize the LithophaneGenerator.

        Args:
            base_height: Floor offset below the lowest surface point
            model_height: Scale of the luma-to-height mapping
            invert: If True, invert luma before mapping
            smooth_sigma: Gaussian sigma in pixels (0 = no smoothing)
        """
        self.base_height = base_height
        self.model_height = model_height
        self.invert = invert
        self.smooth_sigma = smooth_sigma

        self._image_loader: Optional[ImageLoader] = None
        self._heightmap: Optional[Heightmap] = None
        self._mesh: Optional[TriangleMesh] = None

    def load_image(
        self,
        image_path: Union[str, Path],
        image_scale: Optional[float] = None
    ) -> "LithophaneGenerator":
        """
        Load a grayscale image.

        Args:
            image_path: Path to the image (8 or 16-bit grayscale)
            image_scale: Optional resize factor applied after loading

        Returns:
            self for method chaining
        """
        logger.info("Reading image %s", image_path)
        self._image_loader = ImageLoader()
        self._image_loader.load(image_path)

        if image_scale is not None and image_scale != 1.0:
            self._image_loader.resize(scale=image_scale)

        self._heightmap = None
        self._mesh = None
        return self

    def load_array(self, luma_array: np.ndarray) -> "LithophaneGenerator":
        """
        Load luma samples from a numpy array.

        Args:
            luma_array: Array of shape (H, W) with values 0-255

        Returns:
            self for method chaining
        """
        self._image_loader = ImageLoader()
        self._image_loader.load_from_array(luma_array)

        self._heightmap = None
        self._mesh = None
        return self

    def build_heightmap(self) -> "LithophaneGenerator":
        """
        Map luma samples to heights.

        Returns:
            self for method chaining
        """
        if self._image_loader is None:
            raise RuntimeError("No image loaded. Call load_image() first.")

        logger.info("Generating heightmap")
        self._heightmap = build_heightmap(
            self._image_loader.luma,
            model_height=self.model_height,
            base_height=self.base_height,
            invert=self.invert,
            smooth_sigma=self.smooth_sigma
        )
        self._mesh = None
        return self

    def generate_mesh(self) -> "LithophaneGenerator":
        """
        Generate the closed solid from the heightmap.

        Returns:
            self for method chaining
        """
        if self._heightmap is None:
            self.build_heightmap()

        logger.info("Generating mesh")
        self._mesh = HeightmapMesher().mesh(self._heightmap)
        return self

    def export_stl(
        self,
        output_path: Union[str, Path],
        binary: bool = True,
        scale: float = 1.0
    ):
        """
        Export to STL.

        Args:
            output_path: Output file path
            binary: Binary (True) or ASCII (False) STL
            scale: Scale factor for vertex positions
        """
        if self._mesh is None:
            self.generate_mesh()

        exporter = STLExporter(binary=binary, scale=scale)
        exporter.export(self._mesh, output_path, name=Path(output_path).stem)

    @property
    def heightmap(self) -> Optional[Heightmap]:
        """Get the current heightmap."""
        return self._heightmap

    @property
    def mesh(self) -> Optional[TriangleMesh]:
        """Get the current mesh."""
        return self._mesh

    @property
    def triangle_count(self) -> int:
        """Get the number of mesh triangles."""
        if self._mesh is None:
            return 0
        return self._mesh.triangle_count

    def get_mesh_stats(self) -> dict:
        """
        Get mesh statistics.

        Returns:
            Dictionary with mesh statistics
        """
        if self._mesh is None:
            return {"error": "No mesh"}

        stats = mesh_stats(self._mesh)
        stats["min_height"] = self._heightmap.min_height
        stats["max_height"] = self._heightmap.max_height
        return stats

    def preview(self) -> dict:
        """
        Get a preview of the current state.

        Returns:
            Dictionary with current state information
        """
        info = {
            "image_loaded": self._image_loader is not None,
            "heightmap_built": self._heightmap is not None,
            "meshed": self._mesh is not None,
        }

        if self._image_loader:
            width, height = self._image_loader.size
            info["image_size"] = (width, height)
            info["bit_depth"] = self._image_loader.bit_depth
            if width >= 2 and height >= 2:
                info["planned_triangles"] = calculate_triangle_count(width, height)

        if self._heightmap:
            info["min_height"] = self._heightmap.min_height
            info["floor_height"] = self._heightmap.model_min_height

        if self._mesh:
            info["triangle_count"] = self._mesh.triangle_count

        return info


class BatchProcessor:
    """
    Batch conversion of a directory of grayscale images.

    Images are processed one after another with identical settings.
    """

    def __init__(self, **generator_kwargs):
        """
        Initialize the batch processor.

        Args:
            **generator_kwargs: Arguments passed to LithophaneGenerator
        """
        self.generator_kwargs = generator_kwargs
        self.stats = {}

    def process_directory(
        self,
        input_dir: Union[str, Path],
        output_dir: Union[str, Path],
        pattern: str = "*.png",
        binary: bool = True,
        scale: float = 1.0,
        image_scale: Optional[float] = None
    ) -> list:
        """
        Process all images in a directory.

        Mesh statistics of every converted file are kept in ``self.stats``,
        keyed by output path.

        Args:
            input_dir: Input directory
            output_dir: Output directory
            pattern: Glob pattern for input files
            binary: Write binary STL
            scale: Vertex scale factor
            image_scale: Optional resize factor applied to each image

        Returns:
            List of output file paths
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        outputs = []
        self.stats = {}

        for image_path in sorted(input_dir.glob(pattern)):
            generator = LithophaneGenerator(**self.generator_kwargs)
            generator.load_image(image_path, image_scale=image_scale)

            output_path = output_dir / f"{image_path.stem}.stl"
            generator.export_stl(output_path, binary=binary, scale=scale)

            outputs.append(str(output_path))
            self.stats[str(output_path)] = generator.get_mesh_stats()

        return outputs
