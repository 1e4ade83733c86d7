"""
Picture Categorizer - sort image folders into sfw/nsfw with a pre-trained model.

Classifies every image under an input directory in one batch and moves each
file into an output subdirectory named after its predicted class.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import ConfigManager
from .utils.logging import get_logger

from .classifier import ClassifierHandle, ImageClassifier, Prediction, TransformersImageClassifier
from .core import SortError, SortProcessor, SortReport, SortWorker
from .encoder import EncodedImage, ImageEncoder
from .mover import FileMover, MoveResult

__all__ = [
    "ConfigManager",
    "get_logger",
    # Classifier
    "ImageClassifier",
    "TransformersImageClassifier",
    "ClassifierHandle",
    "Prediction",
    # Encoder
    "ImageEncoder",
    "EncodedImage",
    # Mover
    "FileMover",
    "MoveResult",
    # Workflow
    "SortProcessor",
    "SortReport",
    "SortError",
    "SortWorker",
]
