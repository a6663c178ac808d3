"""Tests for the checkered, user-color, solid-background and shadow policies."""

import cv2
import numpy as np
import pytest

from bg_remover.config import OutputConfig
from bg_remover.exceptions import InvalidInputError
from bg_remover.processors import (
    CheckeredPatternProcessor,
    ShadowProcessor,
    SolidBackgroundProcessor,
    UserColorProcessor,
    checker_sample_points,
    detect_background_color,
    native_flood_fill,
    new_alpha_channel,
    remove_checkered_pattern,
    remove_selected_colors,
    remove_shadows,
    remove_solid_background,
    sample_checker_colors,
    shadow_mask,
)
from bg_remover.processors import solid_background
from bg_remover.raster import Color, Raster, color_distance

from tests.conftest import LIGHT_GRAY, SUBJECT, WHITE, create_checkerboard


class TestCheckeredPattern:
    """Checker sampling, clustering and flood fill."""

    def test_sample_points_are_clamped(self):
        points = checker_sample_points(4, 4)
        assert len(points) == 7
        assert all(0 <= x < 4 and 0 <= y < 4 for x, y in points)

    def test_sample_points_on_large_raster(self):
        assert checker_sample_points(100, 50) == [
            (0, 0), (10, 10), (20, 20), (99, 0), (89, 10), (0, 49), (10, 39),
        ]

    def test_samples_both_checker_tones(self, checkerboard_raster):
        assert sample_checker_colors(checkerboard_raster.pixels) == [Color(*WHITE), Color(*LIGHT_GRAY)]

    def test_removes_board_and_keeps_subject(self, checkerboard_raster):
        alpha = new_alpha_channel(64, 64)

        removed = remove_checkered_pattern(checkerboard_raster.pixels, alpha, 20)

        assert removed == 64 * 64 - 16 * 16
        assert (alpha[24:40, 24:40] == 255).all()
        assert np.count_nonzero(alpha == 0) == removed

    def test_removed_pixels_match_a_cluster(self, checkerboard_raster):
        """Every cleared pixel is within tolerance * 3 of a clustered color."""
        tolerance = 20
        pixels = checkerboard_raster.pixels
        clusters = sample_checker_colors(pixels)
        alpha = new_alpha_channel(64, 64)

        remove_checkered_pattern(pixels, alpha, tolerance)

        for y, x in zip(*np.nonzero(alpha == 0)):
            assert min(color_distance(pixels[y, x], c) for c in clusters) <= tolerance * 3

    def test_enclosed_checker_region_is_kept(self):
        """Checker tiles cut off from the border by the subject survive."""
        raster = create_checkerboard(64, 64, tile=8, subject=(22, 42))
        raster.pixels[26:38, 26:38] = WHITE
        alpha = new_alpha_channel(64, 64)

        remove_checkered_pattern(raster.pixels, alpha, 20)

        assert (alpha[22:42, 22:42] == 255).all()

    def test_processor_validates_dimensions(self, checkerboard_raster):
        with pytest.raises(InvalidInputError):
            CheckeredPatternProcessor().process(checkerboard_raster, new_alpha_channel(10, 10))

    def test_processor_keeps_debug_mask_when_enabled(self, checkerboard_raster):
        processor = CheckeredPatternProcessor(OutputConfig(save_debug_images=True))
        processor.process(checkerboard_raster, new_alpha_channel(64, 64), tolerance=20)

        assert "checkered_visited" in processor.get_debug_images()

    def test_processor_writes_debug_images(self, checkerboard_raster, temp_dir):
        processor = CheckeredPatternProcessor(OutputConfig(save_debug_images=True))
        processor.process(checkerboard_raster, new_alpha_channel(64, 64), tolerance=20)

        processor.save_debug_images_to_dir(temp_dir, prefix="board")

        assert (temp_dir / "board_checkered_visited.png").exists()


class TestUserColors:
    """User-picked color removal."""

    def test_only_selected_color_removed(self, red_blue_raster):
        alpha = new_alpha_channel(2, 2)

        remove_selected_colors(red_blue_raster.pixels, alpha, [Color(255, 0, 0)], 5)

        assert alpha.tolist() == [[0, 255], [255, 0]]

    def test_seed_and_fill_multipliers(self):
        """Seed limit is tolerance * 5; fill limit is tolerance * 1.5 * 3."""
        pixels = np.zeros((1, 3, 3), dtype=np.uint8)
        pixels[0, 0] = (255, 0, 0)
        pixels[0, 1] = (233, 0, 0)  # 22 away: inside 22.5
        pixels[0, 2] = (232, 0, 0)  # 23 away: seeds (< 25) but is not filled
        alpha = new_alpha_channel(1, 3)

        remove_selected_colors(pixels, alpha, [Color(255, 0, 0)], 5)

        assert alpha.tolist() == [[0, 0, 255]]

    def test_fill_grows_across_selected_palette(self):
        """A region seeded on one selected color continues into another."""
        pixels = np.zeros((5, 5, 3), dtype=np.uint8)
        pixels[:, :] = (255, 0, 0)
        pixels[1:4, 1:4] = (0, 0, 255)

        red_only = new_alpha_channel(5, 5)
        remove_selected_colors(pixels, red_only, [Color(255, 0, 0)], 5)
        both = new_alpha_channel(5, 5)
        remove_selected_colors(pixels, both, [Color(255, 0, 0), Color(0, 0, 255)], 5)

        assert (red_only[1:4, 1:4] == 255).all()
        assert (both == 0).all()

    def test_independent_of_checkered_pass(self):
        """Pixels already filled by the checkered pass still carry the user-color fill."""
        pixels = np.full((20, 20, 3), 255, dtype=np.uint8)
        pixels[6:14, 8:12] = (0, 160, 0)
        alpha = new_alpha_channel(20, 20)

        remove_checkered_pattern(pixels, alpha, 20)
        assert (alpha[6:14, 8:12] == 255).all()

        remove_selected_colors(pixels, alpha, [Color(255, 255, 255), Color(0, 160, 0)], 20)

        assert (alpha == 0).all()

    def test_no_colors_is_noop(self, gray_raster):
        alpha = new_alpha_channel(4, 4)
        assert remove_selected_colors(gray_raster.pixels, alpha, [], 20) == 0
        assert (alpha == 255).all()

    def test_processor(self, red_blue_raster):
        alpha = new_alpha_channel(2, 2)
        removed = UserColorProcessor().process(
            red_blue_raster, alpha, colors=[Color(0, 0, 255)], tolerance=5
        )
        assert removed == 2
        assert alpha.tolist() == [[255, 0], [0, 255]]


class TestSolidBackground:
    """Border-average background removal."""

    def test_detect_uniform_border(self, solid_raster):
        assert detect_background_color(solid_raster.pixels) == Color(255, 255, 255)

    def test_detect_rounds_half_up(self):
        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        pixels[1, 0] = (1, 0, 0)
        pixels[0, 1] = (1, 0, 0)
        # samples (y, x): top (0,0); bottom (1,0); left (0,0); right (0,1)
        # red mean = (0 + 1 + 0 + 1) / 4 = 0.5
        assert detect_background_color(pixels)[0] == 1

    def test_removes_everything_near_background(self, solid_raster):
        alpha = new_alpha_channel(20, 20)

        cleared = remove_solid_background(solid_raster.pixels, alpha, 20)

        assert cleared == 400 - 64
        assert (alpha[6:14, 6:14] == 255).all()

    def test_scan_is_not_limited_to_connected_region(self):
        """Background-colored pixels inside the subject are cleared too."""
        pixels = np.full((20, 20, 3), 255, dtype=np.uint8)
        pixels[4:16, 4:16] = (0, 0, 255)
        pixels[9:11, 9:11] = 255
        alpha = new_alpha_channel(20, 20)

        remove_solid_background(pixels, alpha, 20)

        assert (alpha[9:11, 9:11] == 0).all()

    def test_native_flood_fill_mask(self, solid_raster):
        mask, failure = native_flood_fill(solid_raster.pixels, 20)

        assert failure is None
        assert mask.shape == (20, 20)
        assert mask[0, 0] == 255
        assert mask[10, 10] == 0

    def test_flood_fill_failure_is_not_fatal(self, solid_raster, monkeypatch):
        def broken_flood_fill(*args, **kwargs):
            raise cv2.error("unsupported format")

        monkeypatch.setattr(solid_background.cv2, "floodFill", broken_flood_fill)

        mask, failure = native_flood_fill(solid_raster.pixels, 20)
        assert mask is None
        assert failure is not None

        alpha = new_alpha_channel(20, 20)
        assert remove_solid_background(solid_raster.pixels, alpha, 20) == 400 - 64

    def test_processor(self, solid_raster):
        alpha = new_alpha_channel(20, 20)
        SolidBackgroundProcessor().process(solid_raster, alpha, tolerance=20)
        assert alpha[0, 0] == 0


class TestShadow:
    """Brightness-threshold shadow fading."""

    def test_mask_covers_dark_patch_only(self, shadow_raster):
        mask = shadow_mask(shadow_raster.pixels, 20)

        assert mask.shape == (40, 40)
        assert mask[20, 20] == 255
        assert mask[0, 0] == 0

    def test_dark_core_becomes_transparent(self, shadow_raster):
        alpha = new_alpha_channel(40, 40)

        affected = remove_shadows(shadow_raster.pixels, alpha, 20)

        assert affected > 0
        assert alpha[20, 20] == 0
        assert alpha[0, 0] == 255

    def test_fade_is_multiplicative(self, shadow_raster):
        """Alpha already reduced by earlier passes is scaled, not reset."""
        mask = shadow_mask(shadow_raster.pixels, 20)
        alpha = np.full((40, 40), 100, dtype=np.uint8)

        remove_shadows(shadow_raster.pixels, alpha, 20)

        shadowed = mask > 128
        expected = np.floor(100 * (1 - mask[shadowed] / 255.0)).astype(np.uint8)
        assert (alpha[shadowed] == expected).all()
        assert (alpha[~shadowed] == 100).all()

    def test_bright_image_untouched(self):
        pixels = np.full((20, 20, 3), 240, dtype=np.uint8)
        alpha = new_alpha_channel(20, 20)

        assert remove_shadows(pixels, alpha, 20) == 0
        assert (alpha == 255).all()

    def test_processor_on_rgba(self, shadow_raster):
        rgba = np.dstack([shadow_raster.pixels, np.full((40, 40), 255, dtype=np.uint8)])
        alpha = new_alpha_channel(40, 40)

        ShadowProcessor().process(Raster(rgba), alpha, tolerance=20)

        assert alpha[20, 20] == 0


def test_subject_color_differs_from_checker():
    """Sanity check on the shared fixtures."""
    assert min(color_distance(SUBJECT, WHITE), color_distance(SUBJECT, LIGHT_GRAY)) > 60
