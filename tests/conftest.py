"""
Pytest configuration and shared fixtures for background remover tests.

Provides synthetic rasters and configuration shared by all test modules.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import numpy as np
import pytest

from bg_remover.config import Config, get_default_config
from bg_remover.raster import Raster
from bg_remover.utils.logging_utils import setup_logging

WHITE = (255, 255, 255)
LIGHT_GRAY = (204, 204, 204)
SUBJECT = (200, 30, 30)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def gray_raster() -> Raster:
    """4x4 uniform mid-gray RGB raster."""
    return Raster(np.full((4, 4, 3), 128, dtype=np.uint8))


@pytest.fixture
def red_blue_raster() -> Raster:
    """2x2 raster with red on one diagonal and blue on the other."""
    pixels = np.zeros((2, 2, 3), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0)
    pixels[1, 1] = (255, 0, 0)
    pixels[0, 1] = (0, 0, 255)
    pixels[1, 0] = (0, 0, 255)
    return Raster(pixels)


@pytest.fixture
def checkerboard_raster() -> Raster:
    """64x64 white / light-gray checker board (8px tiles) with a red square in the middle."""
    return create_checkerboard(64, 64, tile=8, subject=(24, 40))


@pytest.fixture
def solid_raster() -> Raster:
    """20x20 white raster with an 8x8 blue square in the middle."""
    pixels = np.full((20, 20, 3), 255, dtype=np.uint8)
    pixels[6:14, 6:14] = (0, 0, 255)
    return Raster(pixels)


@pytest.fixture
def shadow_raster() -> Raster:
    """40x40 light raster with a dark 20x20 patch."""
    pixels = np.full((40, 40, 3), 230, dtype=np.uint8)
    pixels[10:30, 10:30] = 20
    return Raster(pixels)


@pytest.fixture
def sample_config() -> Config:
    """Create a sample configuration for testing."""
    config = get_default_config()

    config.logging.level = "DEBUG"
    config.logging.use_rich = False
    config.output.save_debug_images = False

    return config


@pytest.fixture(autouse=True)
def setup_test_logging(sample_config: Config):
    """Setup logging for tests."""
    setup_logging(
        level="WARNING",
        use_rich=False,
        format_style="minimal"
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (deselect with '-m \"not unit\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)

        if "slow" in item.name.lower():
            item.add_marker(pytest.mark.slow)


# Helper functions for tests
def create_checkerboard(width: int, height: int, tile: int = 8, subject=None) -> Raster:
    """Checker board of WHITE / LIGHT_GRAY tiles, optionally with a SUBJECT square.

    ``subject`` is a ``(start, stop)`` range applied to both axes.
    """
    ys, xs = np.mgrid[0:height, 0:width]
    light = ((xs // tile) + (ys // tile)) % 2 == 0

    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[light] = WHITE
    pixels[~light] = LIGHT_GRAY

    if subject is not None:
        start, stop = subject
        pixels[start:stop, start:stop] = SUBJECT

    return Raster(pixels)
