"""Image I/O utilities for decoding inputs and encoding PNG outputs.

OpenCV works in BGR(A) order; rasters are RGB(A), so every boundary here
swaps channel order.
"""

from pathlib import Path
from typing import List, Union

import cv2
import numpy as np

from ..exceptions import ImageLoadError, ImageSaveError
from ..raster import Raster

IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tiff"]


def _to_raster(image: np.ndarray) -> Raster:
    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)

    if image.ndim == 2:
        return Raster(cv2.cvtColor(image, cv2.COLOR_GRAY2RGB))
    if image.shape[2] == 4:
        return Raster(cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA))
    return Raster(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))


def _to_opencv(raster: Raster) -> np.ndarray:
    if raster.channels == 4:
        return cv2.cvtColor(raster.pixels, cv2.COLOR_RGBA2BGRA)
    return cv2.cvtColor(raster.pixels, cv2.COLOR_RGB2BGR)


def decode_image(data: bytes) -> Raster:
    """Decode an encoded image (PNG, JPEG, ...) into a raster.

    Args:
        data: Encoded file contents

    Returns:
        RGB or RGBA raster

    Raises:
        ImageLoadError: If the bytes are not a decodable image
    """
    if not data:
        raise ImageLoadError("Cannot decode empty image data")

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ImageLoadError("Could not decode image data", size=len(data))
    return _to_raster(image)


def encode_png(raster: Raster) -> bytes:
    """Encode a raster as PNG bytes.

    Raises:
        ImageSaveError: If the raster is empty or encoding fails
    """
    if raster.is_empty:
        raise ImageSaveError("Cannot encode an empty raster")

    ok, encoded = cv2.imencode(".png", _to_opencv(raster))
    if not ok:
        raise ImageSaveError("PNG encoding failed")
    return encoded.tobytes()


def load_image(image_path: Union[str, Path]) -> Raster:
    """Load image from file.

    Args:
        image_path: Path to the image file

    Returns:
        RGB or RGBA raster

    Raises:
        ImageLoadError: If image cannot be loaded
    """
    path = Path(image_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageLoadError(f"Could not read image: {e}", image_path=str(path))

    try:
        return decode_image(data)
    except ImageLoadError as e:
        raise ImageLoadError(e.message, image_path=str(path), **e.details)


def save_image(raster: Raster, output_path: Union[str, Path]) -> Path:
    """Save raster to a PNG file.

    Args:
        raster: Raster to save
        output_path: Path where to save the image

    Returns:
        The written path

    Raises:
        ImageSaveError: If the raster cannot be encoded or written
    """
    path = Path(output_path)
    data = encode_png(raster)

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise ImageSaveError(f"Could not write image: {e}", image_path=str(path))
    return path


def get_image_files(directory: Path) -> List[Path]:
    """Get all image files from directory.

    Args:
        directory: Directory to search for images

    Returns:
        List of paths to image files, sorted
    """
    image_files = set()  # case-insensitive filesystems return duplicates

    for ext in IMAGE_EXTENSIONS:
        image_files.update(directory.glob(f"*{ext}"))
        image_files.update(directory.glob(f"*{ext.upper()}"))

    return sorted(image_files)
