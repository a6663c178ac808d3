"""Magic-wand region growing over a 2-D pixel grid."""

import logging
from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from ..raster import Color, color_distance_map

logger = logging.getLogger(__name__)

# Value written into uint8 preview masks for pixels classified as background.
REMOVE = 255

# Mask value cv2.floodFill writes for accepted pixels; 1 marks barriers.
FILLED = 2

# Internal multiplier applied to the (possibly pre-scaled) tolerance.
TOLERANCE_SCALE = 3

Point = Tuple[int, int]


def new_visited_mask(height: int, width: int) -> np.ndarray:
    """Fresh ``height x width`` visited grid for one policy pass."""
    return np.zeros((height, width), dtype=bool)


def seed_points(width: int, height: int) -> List[Point]:
    """The eight fixed seeds: four corners, then four edge midpoints.

    Args:
        width: Raster width
        height: Raster height

    Returns:
        List of (x, y) coordinates
    """
    corners = [
        (0, 0),
        (width - 1, 0),
        (0, height - 1),
        (width - 1, height - 1),
    ]
    edge_points = [
        (width // 2, 0),
        (width // 2, height - 1),
        (0, height // 2),
        (width - 1, height // 2),
    ]
    return corners + edge_points


def acceptance_mask(
    pixels: np.ndarray,
    targets: Union[Color, Sequence[Sequence[int]]],
    tolerance: float,
) -> np.ndarray:
    """Pixels within ``tolerance * 3`` of the nearest target color.

    Every seed of one pass grows against the same targets and tolerance, so
    callers compute this once per pass and hand it to :func:`grow_region`.

    Returns:
        ``(H, W)`` bool array
    """
    if isinstance(targets, Color):
        targets = [targets]
    return color_distance_map(pixels, targets) <= tolerance * TOLERANCE_SCALE


def grow_region(
    pixels: np.ndarray,
    visited: np.ndarray,
    seed: Point,
    targets: Union[Color, Sequence[Sequence[int]]],
    tolerance: float,
    output: np.ndarray,
    fill_value: Union[int, bool] = 0,
    within: Optional[np.ndarray] = None,
) -> int:
    """Flood fill from ``seed`` over 4-connected pixels close to the targets.

    A pixel is accepted when its L1 distance to the nearest target is at most
    ``tolerance * 3``. Accepted pixels are marked in ``visited`` and get
    ``fill_value`` written into ``output``. Rejected pixels are left unvisited
    so another seed or pass may still accept them.

    The fill itself is ``cv2.floodFill`` in mask-only mode: visited and
    rejected pixels are barriers in the mask, so the filled area is the
    4-connected component of unvisited accepted pixels containing the seed.

    Args:
        pixels: ``(H, W, C)`` uint8 array, C >= 3
        visited: ``(H, W)`` bool grid, updated in place
        seed: Starting (x, y)
        targets: One color or a palette of colors
        tolerance: Caller-scaled tolerance, multiplied by 3 here
        output: ``(H, W)`` alpha channel or preview mask, updated in place
        fill_value: Value written for accepted pixels (0 for alpha, REMOVE for masks)
        within: Precomputed :func:`acceptance_mask` for these targets and tolerance

    Returns:
        Number of pixels accepted
    """
    height, width = visited.shape
    x, y = int(seed[0]), int(seed[1])
    if x < 0 or x >= width or y < 0 or y >= height:
        return 0

    if within is None:
        within = acceptance_mask(pixels, targets, tolerance)
    if visited[y, x] or not within[y, x]:
        return 0

    mask = np.zeros((height + 2, width + 2), dtype=np.uint8)
    mask[1:-1, 1:-1] = visited | ~within

    flags = 4 | (FILLED << 8) | cv2.FLOODFILL_MASK_ONLY
    cv2.floodFill(within.astype(np.uint8), mask, (x, y), 1, 0, 0, flags)

    accepted = mask[1:-1, 1:-1] == FILLED
    visited |= accepted
    output[accepted] = fill_value

    count = int(np.count_nonzero(accepted))
    logger.debug(f"Region grown from {seed}: {count} pixels (limit={tolerance * TOLERANCE_SCALE})")
    return count
