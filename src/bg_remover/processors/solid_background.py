"""Solid background removal based on the average border color."""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from .base import BaseProcessor
from ..exceptions import InternalFailureError
from ..raster import Color, Raster, color_distance_map

logger = logging.getLogger(__name__)

EDGE_SAMPLE_STEP = 5
SCAN_TOLERANCE_SCALE = 3


class SolidBackgroundProcessor(BaseProcessor):
    """Processor that clears every pixel close to the estimated background color."""

    def process(self, raster: Raster, output: np.ndarray, tolerance: float = 20, **kwargs) -> int:
        """Zero the alpha of background-colored pixels.

        Args:
            raster: Input raster
            output: Alpha channel, updated in place
            tolerance: User tolerance
            **kwargs: Additional parameters

        Returns:
            Number of pixels cleared
        """
        self.validate_raster(raster, output)
        self.clear_debug_images()
        kwargs["_processor"] = self

        return remove_solid_background(raster.pixels, output, tolerance, **kwargs)


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def detect_background_color(pixels: np.ndarray, step: int = EDGE_SAMPLE_STEP) -> Color:
    """Average the border pixels, sampling every ``step``-th pixel per edge.

    Top and bottom rows are sampled along x, left and right columns along y;
    corner pixels are therefore counted more than once.

    Args:
        pixels: ``(H, W, C)`` uint8 array
        step: Sampling stride along each edge

    Returns:
        Estimated background color
    """
    height, width = pixels.shape[:2]
    rgb = pixels[:, :, :3].astype(np.int64)

    samples = np.concatenate([
        rgb[0, 0:width:step],
        rgb[height - 1, 0:width:step],
        rgb[0:height:step, 0],
        rgb[0:height:step, width - 1],
    ])

    mean = samples.sum(axis=0) / len(samples)
    return Color(*(_round_half_up(channel) for channel in mean))


def native_flood_fill(
    pixels: np.ndarray, tolerance: float
) -> Tuple[Optional[np.ndarray], Optional[InternalFailureError]]:
    """Best-effort OpenCV flood fill from (0, 0) in native color space.

    Returns:
        ``(mask, None)`` on success, ``(None, error)`` if OpenCV rejects the input
    """
    height, width = pixels.shape[:2]
    image = np.ascontiguousarray(pixels[:, :, :3])
    mask = np.zeros((height + 2, width + 2), dtype=np.uint8)
    diff = (tolerance, tolerance, tolerance, 0)
    flags = 4 | (255 << 8) | cv2.FLOODFILL_MASK_ONLY

    try:
        cv2.floodFill(image, mask, (0, 0), (255, 255, 255, 255), diff, diff, flags)
    except cv2.error as e:
        return None, InternalFailureError(
            "Native flood fill failed", processor="solid_background", reason=str(e)
        )

    return mask[1:-1, 1:-1], None


def remove_solid_background(
    pixels: np.ndarray, alpha: np.ndarray, tolerance: float, **kwargs
) -> int:
    """Clear every pixel closer than ``tolerance * 3`` to the border color.

    The native flood fill is only kept as a debug image; the full scan is
    what decides removal.

    Args:
        pixels: ``(H, W, C)`` uint8 array
        alpha: Alpha channel, updated in place
        tolerance: User tolerance

    Returns:
        Number of pixels cleared
    """
    processor = kwargs.get("_processor", None)

    background = detect_background_color(pixels)
    logger.debug(f"Estimated background color {background.to_hex()}")

    fill_mask, failure = native_flood_fill(pixels, tolerance)
    if failure is not None:
        logger.warning(f"Flood fill skipped, using color scan only: {failure}")
    elif processor:
        processor.save_debug_image("solid_flood_fill", fill_mask)

    matches = color_distance_map(pixels, [background]) < tolerance * SCAN_TOLERANCE_SCALE
    alpha[matches] = 0

    if processor:
        processor.save_debug_image("solid_matches", matches)

    cleared = int(np.count_nonzero(matches))
    logger.debug(f"Solid background pass cleared {cleared} pixels")
    return cleared
