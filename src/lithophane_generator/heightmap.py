"""
Heightmap Builder

Maps 8-bit luma samples to surface heights and derives the floor plane of
the solid:

    local_height     = luma / 255 * model_height
    model_min_height = min(local_height) - base_height

Heights are stored as float32 and indexed [x, y] (column, row), i.e. the
transpose of the (H, W) image array.
"""

import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np
from scipy import ndimage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Heightmap:
    """
    Immutable sample grid plus the floor plane it implies.

    Attributes:
        heights: float32 array of shape (width, height), read-only
        min_height: Lowest surface height
        model_min_height: z of the floor plane (min_height - base_height)
    """

    heights: np.ndarray
    min_height: float
    model_min_height: float

    @property
    def width(self) -> int:
        return self.heights.shape[0]

    @property
    def height(self) -> int:
        return self.heights.shape[1]

    @property
    def max_height(self) -> float:
        return float(self.heights.max())


def preprocess_luma(
    luma: np.ndarray,
    invert: bool = False,
    smooth_sigma: float = 0.0
) -> np.ndarray:
    """
    Optional luma preprocessing before height mapping.

    Args:
        luma: (H, W) uint8 luma samples
        invert: If True, dark pixels become high (classic lithophane)
        smooth_sigma: Gaussian sigma in pixels, 0 disables smoothing

    Returns:
        (H, W) uint8 luma samples
    """
    result = np.clip(luma, 0, 255).astype(np.uint8)

    if invert:
        result = 255 - result

    if smooth_sigma > 0:
        smoothed = ndimage.gaussian_filter(result.astype(np.float32), sigma=smooth_sigma)
        result = np.clip(np.rint(smoothed), 0, 255).astype(np.uint8)

    return result


def build_heightmap(
    luma: np.ndarray,
    model_height: float,
    base_height: float = 0.0,
    invert: bool = False,
    smooth_sigma: float = 0.0
) -> Heightmap:
    """
    Build the sample grid from an image.

    Args:
        luma: (H, W) array of 8-bit luma samples
        model_height: Height of a white (255) pixel
        base_height: Thickness of the solid below the lowest surface point
        invert: Invert luma before mapping
        smooth_sigma: Gaussian smoothing applied to luma before mapping

    Returns:
        Heightmap
    """
    if luma.ndim != 2:
        raise ValueError(f"Luma grid must be 2-D, got shape {luma.shape}")

    rows, cols = luma.shape
    if cols < 2 or rows < 2:
        raise ValueError(f"Image must be at least 2x2 pixels, got {cols}x{rows}")

    if base_height < 0:
        logger.warning(
            "Negative base height %s puts the floor above the lowest surface point",
            base_height
        )

    samples = preprocess_luma(luma, invert=invert, smooth_sigma=smooth_sigma)

    # (H, W) image -> (W, H) so heights[x, y] addresses pixel (x, y)
    normalized = samples.T.astype(np.float32) / np.float32(255.0)
    heights = np.ascontiguousarray(normalized * np.float32(model_height))
    heights.setflags(write=False)

    min_height = heights.min()
    model_min_height = np.float32(min_height - np.float32(base_height))

    logger.debug(
        "Heightmap %dx%d: min %.4f, max %.4f, floor %.4f",
        cols, rows, min_height, heights.max(), model_min_height
    )

    return Heightmap(
        heights=heights,
        min_height=float(min_height),
        model_min_height=float(model_min_height),
    )
