"""
Configuration system with Pydantic models and validation.

Provides the processing options for a single call plus file-level output
and logging settings, loadable from JSON, YAML or TOML.
"""

from .models import (
    COLOR_DEDUP_DISTANCE,
    Config,
    LoggingConfig,
    LogLevel,
    OutputConfig,
    PolicyBundle,
    ProcessingOptions,
)
from .loader import (
    format_validation_error,
    load_config,
    load_config_from_dict,
    save_config,
    get_default_config,
    validate_config_file,
)

__all__ = [
    # Configuration models
    "COLOR_DEDUP_DISTANCE",
    "Config",
    "LoggingConfig",
    "LogLevel",
    "OutputConfig",
    "PolicyBundle",
    "ProcessingOptions",
    # Configuration loading
    "format_validation_error",
    "load_config",
    "load_config_from_dict",
    "save_config",
    "get_default_config",
    "validate_config_file",
]
