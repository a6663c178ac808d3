"""Background Remover Processors Module.

This module provides the pixel classification components: color clustering,
region growing, the detection policies built on them, and the alpha and
preview compositors that turn their masks into output rasters.
"""

# Base processor
from .base import BaseProcessor

# Image I/O
from .image_io import (
    decode_image,
    encode_png,
    load_image,
    save_image,
    get_image_files,
)

# Clustering
from .clustering import (
    CHECKER_CLUSTER_THRESHOLD,
    cluster_colors,
)

# Region growing
from .region_growing import (
    REMOVE,
    acceptance_mask,
    grow_region,
    new_visited_mask,
    seed_points,
)

# Checkered pattern
from .checkered import (
    CHECKER_SAMPLE_OFFSETS,
    CheckeredPatternProcessor,
    checker_sample_points,
    sample_checker_colors,
    remove_checkered_pattern,
)

# User-selected colors
from .user_colors import (
    UserColorProcessor,
    remove_selected_colors,
)

# Solid background
from .solid_background import (
    SolidBackgroundProcessor,
    detect_background_color,
    native_flood_fill,
    remove_solid_background,
)

# Shadows
from .shadow import (
    ShadowProcessor,
    shadow_mask,
    remove_shadows,
)

# Output assembly
from .compositing import (
    new_alpha_channel,
    compose_alpha,
    crop,
)
from .preview import (
    PREVIEW_COLOR,
    render_mask_preview,
)

__all__ = [
    # Base
    "BaseProcessor",

    # Image I/O
    "decode_image",
    "encode_png",
    "load_image",
    "save_image",
    "get_image_files",

    # Clustering
    "CHECKER_CLUSTER_THRESHOLD",
    "cluster_colors",

    # Region growing
    "REMOVE",
    "acceptance_mask",
    "grow_region",
    "new_visited_mask",
    "seed_points",

    # Checkered pattern
    "CHECKER_SAMPLE_OFFSETS",
    "CheckeredPatternProcessor",
    "checker_sample_points",
    "sample_checker_colors",
    "remove_checkered_pattern",

    # User-selected colors
    "UserColorProcessor",
    "remove_selected_colors",

    # Solid background
    "SolidBackgroundProcessor",
    "detect_background_color",
    "native_flood_fill",
    "remove_solid_background",

    # Shadows
    "ShadowProcessor",
    "shadow_mask",
    "remove_shadows",

    # Output assembly
    "new_alpha_channel",
    "compose_alpha",
    "crop",
    "PREVIEW_COLOR",
    "render_mask_preview",
]
