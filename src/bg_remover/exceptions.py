"""
Custom exceptions for the background removal engine.

Provides a hierarchy of exceptions for the errors that can occur while
classifying pixels, loading configuration, and decoding or encoding images.
"""

from typing import Optional, Any


class BackgroundRemovalError(Exception):
    """Base exception for all background removal errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(BackgroundRemovalError):
    """Raised when there are configuration-related errors."""
    pass


class NotReadyError(BackgroundRemovalError):
    """Raised when the pixel-processing backend is not initialized yet.

    Recoverable: the caller should wait and retry.
    """
    pass


class InvalidInputError(BackgroundRemovalError):
    """Raised for degenerate rasters or malformed processing options."""
    pass


class ProcessingError(BackgroundRemovalError):
    """Raised when an image processing operation fails."""

    def __init__(self, message: str, processor: Optional[str] = None,
                 image_path: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs
        if processor:
            details["processor"] = processor
        if image_path:
            details["image_path"] = image_path
        super().__init__(message, details)


class InternalFailureError(ProcessingError):
    """Failure of a best-effort step.

    Returned rather than raised by the step that produced it; the caller logs
    it and carries on with the authoritative path.
    """
    pass


class ImageLoadError(ProcessingError):
    """Raised when an image cannot be decoded or is invalid."""
    pass


class ImageSaveError(ProcessingError):
    """Raised when an image cannot be encoded or saved."""
    pass
