"""Heuristic background removal for raster images."""

__version__ = "1.0.0"
__author__ = "Background Remover Team"

from .config import ProcessingOptions, PolicyBundle
from .exceptions import (
    BackgroundRemovalError,
    InvalidInputError,
    NotReadyError,
)
from .pipeline import BackgroundRemover, preview_mask, process
from .raster import Color, Raster

__all__ = [
    "BackgroundRemover",
    "BackgroundRemovalError",
    "Color",
    "InvalidInputError",
    "NotReadyError",
    "PolicyBundle",
    "ProcessingOptions",
    "Raster",
    "preview_mask",
    "process",
]
