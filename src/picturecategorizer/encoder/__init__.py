"""Encoder module for building classifier inputs from image files."""

from .encoder import EncodedImage, EncodingError, ImageEncoder

__all__ = [
    "ImageEncoder",
    "EncodedImage",
    "EncodingError",
]
