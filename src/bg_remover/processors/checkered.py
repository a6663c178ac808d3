"""Checkered transparency-pattern detection and removal."""

import logging
from typing import List, Tuple, Union

import numpy as np

from .base import BaseProcessor
from .clustering import CHECKER_CLUSTER_THRESHOLD, cluster_colors
from .region_growing import (
    TOLERANCE_SCALE,
    acceptance_mask,
    grow_region,
    new_visited_mask,
    seed_points,
)
from ..raster import Color, Raster, color_distance

logger = logging.getLogger(__name__)


class CheckeredPatternProcessor(BaseProcessor):
    """Processor that erases a checker board connected to the image border."""

    def process(
        self, raster: Raster, output: np.ndarray, tolerance: float = 20,
        fill_value: Union[int, bool] = 0, **kwargs
    ) -> int:
        """Remove checker pattern pixels from ``output``.

        Args:
            raster: Input raster
            output: Alpha channel or preview mask, updated in place
            tolerance: User tolerance
            fill_value: Value written for removed pixels
            **kwargs: Additional parameters

        Returns:
            Number of pixels removed
        """
        self.validate_raster(raster, output)

        self.clear_debug_images()

        kwargs["_processor"] = self

        return remove_checkered_pattern(
            raster.pixels, output, tolerance, fill_value=fill_value, **kwargs
        )


# (x, y) offsets; negative values count back from the right / bottom edge.
CHECKER_SAMPLE_OFFSETS = [
    (0, 0),
    (10, 10),
    (20, 20),
    (-1, 0),
    (-11, 10),
    (0, -1),
    (10, -11),
]


def checker_sample_points(width: int, height: int) -> List[Tuple[int, int]]:
    """Seven sample coordinates near the corners, clamped to the raster."""
    points = []
    for dx, dy in CHECKER_SAMPLE_OFFSETS:
        x = dx if dx >= 0 else width + dx
        y = dy if dy >= 0 else height + dy
        points.append((min(max(x, 0), width - 1), min(max(y, 0), height - 1)))
    return points


def sample_checker_colors(pixels: np.ndarray) -> List[Color]:
    """Sample the checker sample points and cluster them.

    Args:
        pixels: ``(H, W, C)`` uint8 array

    Returns:
        Candidate checker colors
    """
    height, width = pixels.shape[:2]
    samples = []
    for x, y in checker_sample_points(width, height):
        r, g, b = pixels[y, x, :3]
        samples.append(Color(int(r), int(g), int(b)))

    return cluster_colors(samples, CHECKER_CLUSTER_THRESHOLD)


def remove_checkered_pattern(
    pixels: np.ndarray,
    output: np.ndarray,
    tolerance: float,
    fill_value: Union[int, bool] = 0,
    **kwargs,
) -> int:
    """Flood fill the checker colors inward from the eight border seeds.

    All seeds share one visited grid. A seed is used only if it is unvisited
    and closer than ``tolerance * 3`` to one of the clustered checker colors.

    Args:
        pixels: ``(H, W, C)`` uint8 array
        output: Alpha channel or preview mask, updated in place
        tolerance: User tolerance
        fill_value: Value written for removed pixels

    Returns:
        Number of pixels removed
    """
    processor = kwargs.get("_processor", None)

    colors = sample_checker_colors(pixels)
    if not colors:
        return 0

    logger.debug(f"Checker colors: {[color.to_hex() for color in colors]}")

    height, width = pixels.shape[:2]
    visited = new_visited_mask(height, width)
    seed_limit = tolerance * TOLERANCE_SCALE
    within = acceptance_mask(pixels, colors, tolerance)

    removed = 0
    for x, y in seed_points(width, height):
        if visited[y, x]:
            continue
        seed_color = pixels[y, x, :3]
        if not any(color_distance(seed_color, color) < seed_limit for color in colors):
            continue
        removed += grow_region(
            pixels, visited, (x, y), colors, tolerance, output, fill_value, within=within
        )

    if processor:
        processor.save_debug_image("checkered_visited", visited)

    logger.debug(f"Checkered pass removed {removed} pixels")
    return removed
