"""Raster and color value types shared by every processor.

A raster is a row-major ``(height, width, channels)`` uint8 array in RGB(A)
channel order with a top-left origin. Colors are compared by L1 distance.
"""

import re
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional, Sequence, Union

import numpy as np

from .exceptions import InvalidInputError

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class Color(NamedTuple):
    """An RGB color value."""

    r: int
    g: int
    b: int

    def distance(self, other: Sequence[int]) -> int:
        """L1 distance to another color."""
        return color_distance(self, other)

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    @classmethod
    def parse(cls, value: Union["Color", str, Sequence[int]]) -> "Color":
        """Build a color from a Color, an ``r,g,b`` / ``#rrggbb`` string or a 3-sequence.

        Raises:
            InvalidInputError: If the value cannot be read as an RGB color
        """
        if isinstance(value, Color):
            return value

        if isinstance(value, str):
            text = value.strip()
            match = _HEX_PATTERN.match(text)
            if match:
                digits = match.group(1)
                if len(digits) == 3:
                    digits = "".join(ch * 2 for ch in digits)
                return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
            parts = [part.strip() for part in text.split(",")]
        else:
            try:
                parts = list(value)
            except TypeError:
                raise InvalidInputError(f"Cannot interpret {value!r} as a color")

        if len(parts) != 3:
            raise InvalidInputError(f"Color needs exactly 3 channels, got {value!r}")

        try:
            channels = [int(part) for part in parts]
        except (TypeError, ValueError):
            raise InvalidInputError(f"Color channels must be integers, got {value!r}")

        if any(channel < 0 or channel > 255 for channel in channels):
            raise InvalidInputError(f"Color channels must be in [0, 255], got {value!r}")

        return cls(*channels)


def color_distance(a: Sequence[int], b: Sequence[int]) -> int:
    """Sum of absolute per-channel differences between two colors."""
    return abs(int(a[0]) - int(b[0])) + abs(int(a[1]) - int(b[1])) + abs(int(a[2]) - int(b[2]))


def color_distance_map(pixels: np.ndarray, targets: Iterable[Sequence[int]]) -> np.ndarray:
    """Per-pixel minimum L1 distance to any of the target colors.

    Args:
        pixels: ``(H, W, C)`` uint8 array, C >= 3
        targets: Target colors

    Returns:
        ``(H, W)`` int32 array of distances
    """
    rgb = pixels[:, :, :3].astype(np.int32)
    best = None
    for target in targets:
        target_arr = np.array(target[:3], dtype=np.int32)
        dist = np.abs(rgb - target_arr).sum(axis=2)
        best = dist if best is None else np.minimum(best, dist)

    if best is None:
        # No targets: nothing is within any tolerance
        return np.full(pixels.shape[:2], np.iinfo(np.int32).max, dtype=np.int32)
    return best.astype(np.int32)


@dataclass
class Raster:
    """Decoded image with 3 (RGB) or 4 (RGBA) channels."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if not isinstance(self.pixels, np.ndarray):
            raise InvalidInputError("Raster pixels must be a numpy array")
        if self.pixels.ndim != 3:
            raise InvalidInputError(
                "Raster pixels must have shape (height, width, channels)",
                {"shape": self.pixels.shape},
            )
        if self.pixels.shape[2] not in (3, 4):
            raise InvalidInputError(
                "Raster must have 3 or 4 channels", {"channels": self.pixels.shape[2]}
            )
        if self.pixels.dtype != np.uint8:
            raise InvalidInputError("Raster pixels must be uint8", {"dtype": str(self.pixels.dtype)})

    @classmethod
    def from_buffer(cls, width: int, height: int, channels: int, buffer: Union[bytes, bytearray, Sequence[int]]) -> "Raster":
        """Build a raster from a flat row-major pixel buffer.

        Raises:
            InvalidInputError: If the buffer length does not match the dimensions
        """
        if channels not in (3, 4):
            raise InvalidInputError("Raster must have 3 or 4 channels", {"channels": channels})
        if width < 0 or height < 0:
            raise InvalidInputError("Raster dimensions must not be negative",
                                    {"width": width, "height": height})

        if isinstance(buffer, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(bytes(buffer), dtype=np.uint8)
        else:
            flat = np.asarray(buffer, dtype=np.uint8)

        expected = width * height * channels
        if flat.size != expected:
            raise InvalidInputError(
                "Pixel buffer length does not match raster dimensions",
                {"expected": expected, "actual": flat.size},
            )
        return cls(flat.reshape(height, width, channels).copy())

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> Optional[np.ndarray]:
        if self.channels == 4:
            return self.pixels[:, :, 3]
        return None

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} raster")

    def get_pixel(self, x: int, y: int) -> Color:
        self._check_bounds(x, y)
        r, g, b = self.pixels[y, x, :3]
        return Color(int(r), int(g), int(b))

    def set_pixel(self, x: int, y: int, color: Sequence[int], alpha: Optional[int] = None) -> None:
        self._check_bounds(x, y)
        self.pixels[y, x, :3] = color[:3]
        if alpha is not None:
            if self.channels != 4:
                raise InvalidInputError("Cannot set alpha on an RGB raster")
            self.pixels[y, x, 3] = alpha

    def copy(self) -> "Raster":
        return Raster(self.pixels.copy())

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()
