"""Configuration module for Picture Categorizer."""

from .manager import SEARCH_PATHS, USER_CONFIG_PATH, ConfigManager, write_config
from .models import (
    LoggingSettings,
    ModelSettings,
    PictureCategorizerConfig,
    SortingSettings,
)

__all__ = [
    "PictureCategorizerConfig",
    "ModelSettings",
    "SortingSettings",
    "LoggingSettings",
    "ConfigManager",
    "SEARCH_PATHS",
    "USER_CONFIG_PATH",
    "write_config",
]
