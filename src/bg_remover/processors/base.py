"""Base processor class and common utilities for detection policies."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import cv2
import numpy as np

from ..exceptions import InvalidInputError, ImageSaveError
from ..raster import Raster


class BaseProcessor(ABC):
    """Base class for all detection policies."""

    def __init__(self, config: Optional[Any] = None):
        """Initialize processor with optional output configuration."""
        self.config = config
        self.debug_images = {}

    @property
    def name(self) -> str:
        return type(self).__name__

    def get_config_value(self, key: str, default: Any) -> Any:
        """Safely get a config value with a default."""
        if self.config is None:
            return default
        return getattr(self.config, key, default)

    @abstractmethod
    def process(self, raster: Raster, output: np.ndarray, **kwargs) -> Any:
        """Apply the policy to ``output``. Must be implemented by subclasses."""
        pass

    def validate_raster(self, raster: Raster, output: np.ndarray) -> None:
        """Check that the raster is usable and ``output`` matches its grid."""
        if not isinstance(raster, Raster):
            raise InvalidInputError("Processor input must be a Raster")
        if raster.is_empty:
            raise InvalidInputError(
                "Raster must not have zero dimensions",
                {"width": raster.width, "height": raster.height},
            )
        if output.shape[:2] != (raster.height, raster.width):
            raise InvalidInputError(
                "Output mask does not match raster dimensions",
                {"mask_shape": output.shape, "raster_shape": raster.pixels.shape},
            )

    def save_debug_image(self, name: str, image: np.ndarray) -> None:
        """Store a debug image for later saving."""
        if self.get_config_value('save_debug_images', False):
            self.debug_images[name] = image

    def get_debug_images(self) -> Dict[str, np.ndarray]:
        """Get all stored debug images."""
        return self.debug_images

    def clear_debug_images(self) -> None:
        """Clear stored debug images."""
        self.debug_images = {}

    def save_debug_images_to_dir(self, debug_dir: Path, prefix: str = "") -> None:
        """Save all debug images to the specified directory."""
        if not self.debug_images:
            return

        debug_dir.mkdir(parents=True, exist_ok=True)

        img_format = self.get_config_value('debug_image_format', 'png')

        for name, image in self.debug_images.items():
            filename = f"{prefix}_{name}.{img_format}" if prefix else f"{name}.{img_format}"
            filepath = debug_dir / filename

            if image.dtype == bool:
                image = image.astype(np.uint8) * 255
            if not cv2.imwrite(str(filepath), image):
                raise ImageSaveError("Could not write debug image", processor=self.name,
                                     image_path=str(filepath))
