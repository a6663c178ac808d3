"""Translucent red overlay showing which pixels would be removed."""

import cv2
import numpy as np

from ..exceptions import InvalidInputError
from ..raster import Color, Raster

PREVIEW_COLOR = Color(255, 0, 0)
PREVIEW_WEIGHT = 0.5


def render_mask_preview(raster: Raster, mask: np.ndarray) -> Raster:
    """Blend masked pixels half-way toward red; leave the rest untouched.

    Args:
        raster: Source raster (RGB or RGBA)
        mask: ``(H, W)`` bool or uint8 mask, nonzero marks background

    Returns:
        New RGBA raster. Alpha is copied from the source, or 255 if it has none.
    """
    if mask.shape != (raster.height, raster.width):
        raise InvalidInputError(
            "Preview mask does not match raster dimensions",
            {"mask_shape": mask.shape, "raster_shape": raster.pixels.shape},
        )

    rgb = np.ascontiguousarray(raster.rgb)
    red = np.empty_like(rgb)
    red[:] = PREVIEW_COLOR
    blended = cv2.addWeighted(rgb, 1.0 - PREVIEW_WEIGHT, red, PREVIEW_WEIGHT, 0)

    selected = mask.astype(bool)
    output = np.empty((raster.height, raster.width, 4), dtype=np.uint8)
    output[:, :, :3] = rgb
    output[selected, :3] = blended[selected]

    source_alpha = raster.alpha
    output[:, :, 3] = 255 if source_alpha is None else source_alpha
    return Raster(output)
