"""Removal of background colors picked by the user."""

import logging
from typing import Sequence, Union

import numpy as np

from .base import BaseProcessor
from .region_growing import acceptance_mask, grow_region, new_visited_mask, seed_points
from ..raster import Color, Raster, color_distance

logger = logging.getLogger(__name__)

SEED_TOLERANCE_SCALE = 5
GROW_TOLERANCE_SCALE = 1.5


class UserColorProcessor(BaseProcessor):
    """Processor that grows the user's selected colors in from the border."""

    def process(
        self, raster: Raster, output: np.ndarray, colors: Sequence[Color] = (),
        tolerance: float = 20, fill_value: Union[int, bool] = 0, **kwargs
    ) -> int:
        self.validate_raster(raster, output)
        self.clear_debug_images()
        kwargs["_processor"] = self

        return remove_selected_colors(
            raster.pixels, output, colors, tolerance, fill_value=fill_value, **kwargs
        )


def remove_selected_colors(
    pixels: np.ndarray,
    output: np.ndarray,
    colors: Sequence[Color],
    tolerance: float,
    fill_value: Union[int, bool] = 0,
    **kwargs,
) -> int:
    """Flood fill the selected colors from the eight border seeds.

    Seeds qualify when closer than ``tolerance * 5`` to a selected color; the
    fill itself runs with ``tolerance * 1.5`` (scaled by 3 again inside the
    region grower). The fill grows against the whole selected palette, so a
    region seeded on one color continues into touching areas of another.
    Uses its own visited grid, independent of other passes.

    Args:
        pixels: ``(H, W, C)`` uint8 array
        output: Alpha channel or preview mask, updated in place
        colors: Selected colors
        tolerance: User tolerance
        fill_value: Value written for removed pixels

    Returns:
        Number of pixels removed
    """
    processor = kwargs.get("_processor", None)

    if not colors:
        return 0

    height, width = pixels.shape[:2]
    visited = new_visited_mask(height, width)
    seed_limit = tolerance * SEED_TOLERANCE_SCALE
    grow_tolerance = tolerance * GROW_TOLERANCE_SCALE
    within = acceptance_mask(pixels, colors, grow_tolerance)

    removed = 0
    for x, y in seed_points(width, height):
        if visited[y, x]:
            continue
        seed_color = pixels[y, x, :3]
        if not any(color_distance(seed_color, color) < seed_limit for color in colors):
            continue
        removed += grow_region(
            pixels, visited, (x, y), colors, grow_tolerance, output, fill_value, within=within
        )

    if processor:
        processor.save_debug_image("user_colors_visited", visited)

    logger.debug(f"User color pass removed {removed} pixels using {len(colors)} colors")
    return removed
