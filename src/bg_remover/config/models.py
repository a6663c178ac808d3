"""
Pydantic models for background removal configuration.

Defines the processing options consumed by the pixel classifier plus the
output and logging settings used by the file-level pipeline and CLI.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..raster import Color

# New picks closer than this (L1) to an existing selected color are dropped.
COLOR_DEDUP_DISTANCE = 15


class LogLevel(str, Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PolicyBundle(str, Enum):
    """Selectable sets of detection policies.

    ``interactive`` runs the checkered pass plus user-picked colors;
    ``legacy`` runs the checkered pass plus solid-background and shadow passes.
    """
    INTERACTIVE = "interactive"
    LEGACY = "legacy"


class ProcessingOptions(BaseModel):
    """Options for a single processing call."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    remove_checkered: bool = Field(
        default=True,
        description="Detect and remove a checkered transparency pattern"
    )
    remove_solid: bool = Field(
        default=False,
        description="Remove a solid background estimated from the border (legacy bundle)"
    )
    remove_shadow: bool = Field(
        default=False,
        description="Make dark shadow regions partially transparent (legacy bundle)"
    )
    tolerance: int = Field(
        default=20,
        ge=5,
        le=50,
        description="Color tolerance; scaled per policy"
    )
    selected_colors: List[Color] = Field(
        default_factory=list,
        description="Colors picked by the user, in insertion order (interactive bundle)"
    )
    bundle: PolicyBundle = Field(
        default=PolicyBundle.INTERACTIVE,
        description="Which policy bundle to run"
    )

    @field_validator("selected_colors", mode="before")
    @classmethod
    def parse_selected_colors(cls, v):
        """Accept hex strings, ``r,g,b`` strings and 3-sequences."""
        if v is None:
            return []
        return [Color.parse(item) for item in v]

    @model_validator(mode="after")
    def validate_bundle(self):
        """Reject option combinations that mix the two policy bundles."""
        if self.bundle == PolicyBundle.INTERACTIVE:
            if self.remove_solid or self.remove_shadow:
                raise ValueError("remove_solid and remove_shadow require the 'legacy' bundle")
        elif self.selected_colors:
            raise ValueError("selected_colors require the 'interactive' bundle")
        return self

    def add_color(self, color) -> bool:
        """Append a picked color unless it duplicates an existing one.

        Returns:
            True if the color was added
        """
        color = Color.parse(color)
        for existing in self.selected_colors:
            if existing.distance(color) < COLOR_DEDUP_DISTANCE:
                return False
        self.selected_colors = [*self.selected_colors, color]
        return True

    def remove_color(self, index: int) -> Color:
        colors = list(self.selected_colors)
        removed = colors.pop(index)
        self.selected_colors = colors
        return removed

    def clear_colors(self) -> None:
        self.selected_colors = []


class OutputConfig(BaseModel):
    """Output naming and debug image settings."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    suffix: str = Field(
        default="-transparent.png",
        description="Replaces the input extension for processed images"
    )
    preview_suffix: str = Field(
        default="-preview.png",
        description="Replaces the input extension for mask previews"
    )
    save_debug_images: bool = Field(
        default=False,
        description="Save intermediate masks produced by each policy"
    )
    debug_dir: str = Field(
        default="debug",
        description="Directory for debug images"
    )
    debug_image_format: str = Field(
        default="png",
        pattern="^(png|jpg|jpeg)$",
        description="Format used for debug images"
    )

    @field_validator("suffix", "preview_suffix")
    @classmethod
    def validate_png_suffix(cls, v):
        """Outputs carry an alpha channel, so they must be PNG."""
        if not v.lower().endswith(".png"):
            raise ValueError("Output suffix must end with .png")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging behavior."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Base logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )
    use_rich: bool = Field(
        default=True,
        description="Whether to use rich console output"
    )
    format_style: str = Field(
        default="detailed",
        pattern="^(simple|detailed|minimal)$",
        description="Logging format style"
    )


class Config(BaseModel):
    """Main configuration model."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )

    processing: ProcessingOptions = Field(
        default_factory=ProcessingOptions,
        description="Pixel classification options"
    )
    output: OutputConfig = Field(
        default_factory=OutputConfig,
        description="Output configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )

    version: str = Field(
        default="1.0.0",
        description="Configuration version"
    )
    description: Optional[str] = Field(
        default=None,
        description="Configuration description"
    )
