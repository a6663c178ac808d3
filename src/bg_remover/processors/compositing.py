"""Alpha channel assembly for the final RGBA raster."""

import numpy as np

from ..exceptions import InvalidInputError
from ..raster import Raster

OPAQUE = 255


def new_alpha_channel(height: int, width: int) -> np.ndarray:
    """Fully opaque ``height x width`` alpha channel."""
    return np.full((height, width), OPAQUE, dtype=np.uint8)


def compose_alpha(raster: Raster, alpha: np.ndarray) -> Raster:
    """Build a new RGBA raster from the source RGB values and ``alpha``.

    Any alpha channel already present in ``raster`` is replaced. Neither input
    is modified.

    Args:
        raster: Source raster (RGB or RGBA)
        alpha: ``(H, W)`` uint8 alpha channel

    Returns:
        New RGBA raster with the same dimensions
    """
    if alpha.shape != (raster.height, raster.width):
        raise InvalidInputError(
            "Alpha channel does not match raster dimensions",
            {"alpha_shape": alpha.shape, "raster_shape": raster.pixels.shape},
        )

    rgba = np.empty((raster.height, raster.width, 4), dtype=np.uint8)
    rgba[:, :, :3] = raster.rgb
    rgba[:, :, 3] = alpha
    return Raster(rgba)


def crop(raster: Raster, x: int, y: int, width: int, height: int) -> Raster:
    """Copy the ``width x height`` rectangle at ``(x, y)`` into a new raster.

    Raises:
        InvalidInputError: If the rectangle is empty or leaves the raster
    """
    box = {"x": x, "y": y, "width": width, "height": height}
    if width <= 0 or height <= 0:
        raise InvalidInputError("Crop rectangle must not be empty", box)
    if x < 0 or y < 0 or x + width > raster.width or y + height > raster.height:
        box.update(raster_width=raster.width, raster_height=raster.height)
        raise InvalidInputError("Crop rectangle lies outside the raster", box)

    return Raster(raster.pixels[y:y + height, x:x + width].copy())
