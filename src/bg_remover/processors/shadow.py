"""Shadow detection by brightness thresholding."""

import logging

import cv2
import numpy as np

from .base import BaseProcessor
from ..raster import Raster

logger = logging.getLogger(__name__)

BRIGHTNESS_TOLERANCE_SCALE = 2.5
MORPH_KERNEL_SIZE = (5, 5)
BLUR_KERNEL_SIZE = (5, 5)
SHADOW_MASK_CUTOFF = 128


class ShadowProcessor(BaseProcessor):
    """Processor that fades dark regions instead of erasing them."""

    def process(self, raster: Raster, output: np.ndarray, tolerance: float = 20, **kwargs) -> int:
        """Reduce alpha over detected shadow regions.

        Args:
            raster: Input raster
            output: Alpha channel, updated in place
            tolerance: User tolerance
            **kwargs: Additional parameters

        Returns:
            Number of pixels whose alpha was reduced
        """
        self.validate_raster(raster, output)
        self.clear_debug_images()
        kwargs["_processor"] = self

        return remove_shadows(raster.pixels, output, tolerance, **kwargs)


def shadow_mask(pixels: np.ndarray, tolerance: float, **kwargs) -> np.ndarray:
    """Soft mask of dark regions.

    1. HSV value channel.
    2. Inverse binary threshold at ``tolerance * 2.5``.
    3. Open then close with a 5x5 ellipse.
    4. 5x5 Gaussian blur.

    Args:
        pixels: ``(H, W, C)`` uint8 RGB(A) array
        tolerance: User tolerance

    Returns:
        ``(H, W)`` uint8 mask, 255 where fully shadowed
    """
    processor = kwargs.get("_processor", None)

    rgb = np.ascontiguousarray(pixels[:, :, :3])
    hsv = cv2.cvtColor(rgb, cv2.COLOR_RGB2HSV)
    value = hsv[:, :, 2]

    _, mask = cv2.threshold(
        value, tolerance * BRIGHTNESS_TOLERANCE_SCALE, 255, cv2.THRESH_BINARY_INV
    )
    if processor:
        processor.save_debug_image("shadow_threshold", mask)

    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, MORPH_KERNEL_SIZE)
    mask = cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel)
    mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel)

    mask = cv2.GaussianBlur(mask, BLUR_KERNEL_SIZE, 0)
    if processor:
        processor.save_debug_image("shadow_mask", mask)

    return mask


def remove_shadows(pixels: np.ndarray, alpha: np.ndarray, tolerance: float, **kwargs) -> int:
    """Fade alpha where the shadow mask is above 128.

    ``new = floor(current * (1 - mask / 255))``, so shadows compound with any
    alpha already reduced by earlier passes and are never forced to zero by
    this pass alone unless the mask is saturated.

    Args:
        pixels: ``(H, W, C)`` uint8 array
        alpha: Alpha channel, updated in place
        tolerance: User tolerance

    Returns:
        Number of pixels affected
    """
    mask = shadow_mask(pixels, tolerance, **kwargs)
    shadowed = mask > SHADOW_MASK_CUTOFF

    factor = 1.0 - mask[shadowed].astype(np.float64) / 255.0
    alpha[shadowed] = np.floor(alpha[shadowed].astype(np.float64) * factor).astype(np.uint8)

    affected = int(np.count_nonzero(shadowed))
    logger.debug(f"Shadow pass faded {affected} pixels")
    return affected
