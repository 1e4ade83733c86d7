"""Utility modules for Picture Categorizer."""

from .file_scanner import (
    DEFAULT_IMAGE_EXTENSIONS,
    FileScanner,
    FileScanResult,
    normalize_extension,
)
from .logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "DEFAULT_IMAGE_EXTENSIONS",
    "FileScanner",
    "FileScanResult",
    "normalize_extension",
]
