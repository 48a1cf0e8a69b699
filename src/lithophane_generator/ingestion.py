"""
Image Ingestion Module

This module handles:
- Loading grayscale (luma) images with Pillow
- Rejecting color images, which have no single height channel
- Reducing 16-bit luma to the 8-bit samples the heightmap uses
- Resizing before meshing (triangle count grows with pixel count)
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union
import numpy as np
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Pillow modes holding a single luma channel
LUMA_8_MODES = ("L",)
LUMA_16_MODES = ("I;16", "I;16L", "I;16B", "I;16N", "I")


def luma16_to_luma8(samples: np.ndarray) -> np.ndarray:
    """
    Reduce 16-bit luma to 8 bits.

    Args:
        samples: Integer array with values in 0-65535

    Returns:
        uint8 array with values in 0-255
    """
    scaled = np.rint(samples.astype(np.float64) / 257.0)
    return np.clip(scaled, 0, 255).astype(np.uint8)


class ImageLoader:
    """
    Grayscale image loader for heightmap generation.

    Key features:
    - Accepts only L (8-bit) and I;16 / I (16-bit) images
    - Stores samples as an (H, W) uint8 array
    - Bilinear resizing
    """

    def __init__(self):
        self._luma: Optional[np.ndarray] = None
        self._bit_depth: Optional[int] = None
        self._original_size: Optional[Tuple[int, int]] = None

    def load(self, image_path: Union[str, Path]) -> "ImageLoader":
        """
        Load a grayscale image.

        Args:
            image_path: Path to the image file

        Returns:
            self for method chaining
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")

        try:
            img = Image.open(image_path)
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"{image_path} is not a valid image file") from e

        if img.mode in LUMA_8_MODES:
            self._luma = np.array(img, dtype=np.uint8)
            self._bit_depth = 8
        elif img.mode in LUMA_16_MODES:
            # Precision beyond 8 bits is dropped
            self._luma = luma16_to_luma8(np.array(img))
            self._bit_depth = 16
        else:
            raise ValueError(
                f"{image_path} should be a luma image, got mode {img.mode}"
            )

        self._original_size = img.size  # (width, height)
        logger.debug(
            "Loaded %s: %dx%d, %d-bit", image_path, img.size[0], img.size[1], self._bit_depth
        )

        return self

    def load_from_array(self, luma_array: np.ndarray) -> "ImageLoader":
        """
        Load from a numpy array instead of a file.

        Args:
            luma_array: Luma array of shape (H, W), values 0-255

        Returns:
            self for method chaining
        """
        if luma_array.ndim != 2:
            raise ValueError("Luma array must have shape (H, W)")

        self._luma = np.clip(luma_array, 0, 255).astype(np.uint8)
        self._bit_depth = 8
        self._original_size = (luma_array.shape[1], luma_array.shape[0])

        return self

    def resize(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        scale: Optional[float] = None
    ) -> "ImageLoader":
        """
        Resize the image using bilinear interpolation.

        Args:
            width: Target width (if height not specified, maintains aspect)
            height: Target height (if width not specified, maintains aspect)
            scale: Scale factor (e.g., 0.5 = half size)

        Returns:
            self for method chaining
        """
        if self._luma is None:
            raise RuntimeError("No image loaded")

        orig_h, orig_w = self._luma.shape

        if scale is not None:
            new_w = int(orig_w * scale)
            new_h = int(orig_h * scale)
        elif width is not None and height is not None:
            new_w, new_h = width, height
        elif width is not None:
            new_w = width
            new_h = int(orig_h * width / orig_w)
        elif height is not None:
            new_h = height
            new_w = int(orig_w * height / orig_h)
        else:
            return self

        if new_w < 2 or new_h < 2:
            raise ValueError(f"Resized image would be {new_w}x{new_h}, need at least 2x2")

        img = Image.fromarray(self._luma)
        img = img.resize((new_w, new_h), Image.Resampling.BILINEAR)
        self._luma = np.array(img, dtype=np.uint8)

        self._original_size = (new_w, new_h)
        return self

    @property
    def luma(self) -> np.ndarray:
        """Get the (H, W) uint8 luma array."""
        if self._luma is None:
            raise RuntimeError("No image loaded")
        return self._luma

    @property
    def bit_depth(self) -> int:
        """Bit depth of the source image (8 or 16)."""
        if self._bit_depth is None:
            raise RuntimeError("No image loaded")
        return self._bit_depth

    @property
    def size(self) -> Tuple[int, int]:
        """Get image size as (width, height)."""
        if self._original_size is None:
            raise RuntimeError("No image loaded")
        return self._original_size

    @property
    def width(self) -> int:
        """Get image width."""
        return self.size[0]

    @property
    def height(self) -> int:
        """Get image height."""
        return self.size[1]
