"""Background removal pipeline and command-line interface."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import cv2
import numpy as np
from pydantic import ValidationError

from .config import (
    Config,
    PolicyBundle,
    ProcessingOptions,
    format_validation_error,
    get_default_config,
    load_config,
)
from .exceptions import (
    BackgroundRemovalError,
    ConfigurationError,
    InvalidInputError,
    NotReadyError,
)
from .processors import (
    REMOVE,
    CheckeredPatternProcessor,
    ShadowProcessor,
    SolidBackgroundProcessor,
    UserColorProcessor,
    compose_alpha,
    crop,
    get_image_files,
    load_image,
    new_alpha_channel,
    render_mask_preview,
    save_image,
)
from .raster import Raster
from .utils.logging_utils import ProcessingProgress, log_processing_stats, setup_logging

logger = logging.getLogger(__name__)

# OpenCV primitives the policies rely on.
REQUIRED_PRIMITIVES = (
    "cvtColor",
    "threshold",
    "morphologyEx",
    "getStructuringElement",
    "GaussianBlur",
    "floodFill",
    "addWeighted",
)

OptionsLike = Union[ProcessingOptions, Dict[str, Any], None]
CropBox = Tuple[int, int, int, int]


class BackgroundRemover:
    """Runs the detection policies on a raster and assembles the result.

    Every call allocates its own alpha channel, masks and visited grids, so one
    instance can be reused for any number of rasters.
    """

    def __init__(self, config: Optional[Config] = None, backend: Any = cv2):
        self.config = config if config is not None else get_default_config()
        self.backend = backend

        output_config = self.config.output
        self.checkered = CheckeredPatternProcessor(output_config)
        self.user_colors = UserColorProcessor(output_config)
        self.solid = SolidBackgroundProcessor(output_config)
        self.shadow = ShadowProcessor(output_config)
        self._processors = [self.checkered, self.user_colors, self.solid, self.shadow]

    def ensure_ready(self) -> None:
        """Check that the imaging backend is loaded.

        Raises:
            NotReadyError: If the backend is missing or incomplete
        """
        if self.backend is None:
            raise NotReadyError("Image processing backend is not loaded yet. Please wait and try again.")

        missing = [name for name in REQUIRED_PRIMITIVES if not hasattr(self.backend, name)]
        if missing:
            raise NotReadyError(
                "Image processing backend is not fully initialized",
                {"missing": ", ".join(missing)},
            )

    def resolve_options(self, options: OptionsLike = None) -> ProcessingOptions:
        """Turn ``None``, a dict or a ProcessingOptions into validated options."""
        if options is None:
            return self.config.processing
        if isinstance(options, ProcessingOptions):
            return options
        if isinstance(options, dict):
            try:
                return ProcessingOptions(**options)
            except ValidationError as e:
                raise InvalidInputError("Invalid processing options:\n" + format_validation_error(e))
        raise InvalidInputError(f"Unsupported options type: {type(options).__name__}")

    def _check_raster(self, raster: Raster) -> None:
        if not isinstance(raster, Raster):
            raise InvalidInputError(f"Expected a Raster, got {type(raster).__name__}")
        if raster.is_empty:
            raise InvalidInputError(
                "Raster must not have zero dimensions",
                {"width": raster.width, "height": raster.height},
            )

    def _prepare(self, raster: Raster, options: OptionsLike) -> ProcessingOptions:
        self.ensure_ready()
        resolved = self.resolve_options(options)
        self._check_raster(raster)
        for processor in self._processors:
            processor.clear_debug_images()
        return resolved

    def _run_mask_policies(self, raster: Raster, output: np.ndarray, options: ProcessingOptions,
                           fill_value: Union[int, bool]) -> None:
        """Checkered then user-color passes; shared by removal and preview."""
        if options.remove_checkered:
            self.checkered.process(raster, output, tolerance=options.tolerance, fill_value=fill_value)

        if options.bundle == PolicyBundle.INTERACTIVE and options.selected_colors:
            self.user_colors.process(
                raster, output, colors=options.selected_colors,
                tolerance=options.tolerance, fill_value=fill_value,
            )

    def build_removal_mask(self, raster: Raster, options: OptionsLike = None) -> np.ndarray:
        """Boolean mask of pixels the checkered and user-color passes remove."""
        options = self._prepare(raster, options)
        mask = np.zeros((raster.height, raster.width), dtype=np.uint8)
        self._run_mask_policies(raster, mask, options, REMOVE)
        return mask == REMOVE

    def process(self, raster: Raster, options: OptionsLike = None, debug_prefix: str = "") -> Raster:
        """Remove the background from ``raster``.

        Passes run in a fixed order (checkered, then user colors for the
        interactive bundle, or solid then shadow for the legacy bundle), each
        reading and writing the same alpha channel.

        Args:
            raster: Input raster, not modified
            options: Processing options; defaults to the configured ones
            debug_prefix: Filename prefix for debug images

        Returns:
            New RGBA raster with the computed alpha

        Raises:
            NotReadyError: If the backend is not loaded
            InvalidInputError: For zero-dimension rasters or bad options
        """
        options = self._prepare(raster, options)
        alpha = new_alpha_channel(raster.height, raster.width)

        self._run_mask_policies(raster, alpha, options, 0)

        if options.bundle == PolicyBundle.LEGACY:
            if options.remove_solid:
                self.solid.process(raster, alpha, tolerance=options.tolerance)
            if options.remove_shadow:
                self.shadow.process(raster, alpha, tolerance=options.tolerance)

        self._save_debug_images(debug_prefix)

        result = compose_alpha(raster, alpha)
        logger.debug(
            f"Processed {raster.width}x{raster.height} raster: "
            f"{int(np.count_nonzero(alpha == 0))} transparent pixels"
        )
        return result

    def preview_mask(self, raster: Raster, options: OptionsLike = None, debug_prefix: str = "") -> Raster:
        """Overlay red on the pixels the checkered and user-color passes would remove.

        Raises:
            NotReadyError: If the backend is not loaded
            InvalidInputError: For zero-dimension rasters or bad options
        """
        options = self._prepare(raster, options)
        mask = np.zeros((raster.height, raster.width), dtype=np.uint8)
        self._run_mask_policies(raster, mask, options, REMOVE)

        self._save_debug_images(debug_prefix)
        return render_mask_preview(raster, mask)

    def _save_debug_images(self, prefix: str) -> None:
        output_config = self.config.output
        if not output_config.save_debug_images:
            return

        debug_dir = Path(output_config.debug_dir)
        for processor in self._processors:
            name = f"{prefix}_{processor.name}" if prefix else processor.name
            processor.save_debug_images_to_dir(debug_dir, prefix=name)

    def output_path_for(self, input_path: Path, output: Optional[Path] = None, preview: bool = False) -> Path:
        """Where the result for ``input_path`` goes.

        ``output`` may be a file path, a directory, or None (next to the input).
        """
        suffix = self.config.output.preview_suffix if preview else self.config.output.suffix
        filename = f"{input_path.stem}{suffix}"

        if output is None:
            return input_path.with_name(filename)
        if output.is_dir() or output.suffix == "":
            return output / filename
        return output

    def process_file(self, input_path: Union[str, Path], output_path: Union[str, Path, None] = None,
                     preview: bool = False, options: OptionsLike = None,
                     crop_box: Optional[CropBox] = None) -> Path:
        """Load, process and save a single image.

        ``crop_box`` is an ``(x, y, width, height)`` rectangle cut from the
        result before it is written.

        Returns:
            Path of the written PNG
        """
        input_path = Path(input_path)
        target = self.output_path_for(input_path, Path(output_path) if output_path else None, preview)

        raster = load_image(input_path)
        if preview:
            result = self.preview_mask(raster, options, debug_prefix=input_path.stem)
        else:
            result = self.process(raster, options, debug_prefix=input_path.stem)

        if crop_box is not None:
            result = crop(result, *crop_box)
        save_image(result, target)
        logger.info(f"Saved {target}")
        return target

    def process_directory(self, input_dir: Union[str, Path], output_dir: Union[str, Path, None] = None,
                          preview: bool = False, options: OptionsLike = None,
                          crop_box: Optional[CropBox] = None) -> List[Path]:
        """Process every image in ``input_dir``.

        Files that fail are logged and skipped.

        Returns:
            Paths of the written PNGs
        """
        input_dir = Path(input_dir)
        if not input_dir.is_dir():
            raise InvalidInputError(f"Input directory does not exist: {input_dir}")

        output = Path(output_dir) if output_dir else None
        if output is not None:
            output.mkdir(parents=True, exist_ok=True)

        suffixes = (self.config.output.suffix, self.config.output.preview_suffix)
        image_files = [path for path in get_image_files(input_dir) if not path.name.endswith(suffixes)]
        if not image_files:
            logger.warning(f"No images found in {input_dir}")
            return []

        # Validate once up front rather than failing on every file.
        self.ensure_ready()
        options = self.resolve_options(options)

        outputs = []
        with log_processing_stats(f"background removal in {input_dir}", logger) as stats:
            with ProcessingProgress("Removing backgrounds", len(image_files), logger) as progress:
                for image_path in image_files:
                    try:
                        outputs.append(self.process_file(image_path, output, preview, options, crop_box))
                    except (BackgroundRemovalError, cv2.error) as e:
                        logger.error(f"Failed to process {image_path.name}: {e}")
                        stats["images_failed"] += 1
                        progress.update(success=False)
                        continue
                    stats["images_processed"] += 1
                    progress.update()

        return outputs


def process(raster: Raster, options: OptionsLike = None) -> Raster:
    """Remove the background from ``raster`` with default settings."""
    return BackgroundRemover().process(raster, options)


def preview_mask(raster: Raster, options: OptionsLike = None) -> Raster:
    """Red overlay of the pixels :func:`process` would erase via flood fill."""
    return BackgroundRemover().preview_mask(raster, options)


def parse_crop_box(value: str) -> CropBox:
    """Parse an ``x,y,width,height`` command-line rectangle."""
    parts = value.split(",")
    try:
        x, y, width, height = (int(part) for part in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected x,y,width,height; got {value!r}")
    return x, y, width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Remove checkered and solid backgrounds from images"
    )
    parser.add_argument("input", help="Image file or directory of images")
    parser.add_argument("-o", "--output", help="Output file or directory")
    parser.add_argument("-c", "--config", help="Configuration file (JSON, YAML or TOML)")
    parser.add_argument("-t", "--tolerance", type=int, help="Color tolerance (5-50)")
    parser.add_argument("--no-checkered", action="store_true", help="Do not remove checkered patterns")
    parser.add_argument("--color", action="append", default=[], metavar="COLOR",
                        help="Background color to remove, as #rrggbb or r,g,b (repeatable)")
    parser.add_argument("--legacy", action="store_true",
                        help="Use the checkered + solid + shadow policy bundle")
    parser.add_argument("--solid", action="store_true", help="Remove solid background (legacy bundle)")
    parser.add_argument("--shadow", action="store_true", help="Fade shadows (legacy bundle)")
    parser.add_argument("--crop", type=parse_crop_box, metavar="X,Y,W,H",
                        help="Crop the result to this rectangle before saving")
    parser.add_argument("--preview", action="store_true", help="Write a red mask preview instead")
    parser.add_argument("--debug", action="store_true", help="Save intermediate masks")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def _options_from_args(args: argparse.Namespace, base: ProcessingOptions) -> ProcessingOptions:
    data = base.model_dump()
    if args.tolerance is not None:
        data["tolerance"] = args.tolerance
    if args.no_checkered:
        data["remove_checkered"] = False
    if args.legacy or args.solid or args.shadow:
        data["bundle"] = PolicyBundle.LEGACY
    if args.solid:
        data["remove_solid"] = True
    if args.shadow:
        data["remove_shadow"] = True

    try:
        options = ProcessingOptions(**data)
    except ValidationError as e:
        raise InvalidInputError("Invalid processing options:\n" + format_validation_error(e))

    for color in args.color:
        if not options.add_color(color):
            logger.info(f"Ignoring {color}: too close to an already selected color")
    return options


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else get_default_config()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    level = config.logging.level
    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "WARNING"
    setup_logging(
        level=level,
        log_file=config.logging.log_file,
        use_rich=config.logging.use_rich,
        format_style=config.logging.format_style,
    )

    if args.debug:
        config.output.save_debug_images = True

    remover = BackgroundRemover(config)
    input_path = Path(args.input)

    try:
        options = _options_from_args(args, config.processing)
        if input_path.is_dir():
            outputs = remover.process_directory(input_path, args.output, args.preview, options, args.crop)
            logger.info(f"Wrote {len(outputs)} images")
        else:
            remover.process_file(input_path, args.output, args.preview, options, args.crop)
    except NotReadyError as e:
        logger.error(str(e))
        return 2
    except BackgroundRemovalError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
