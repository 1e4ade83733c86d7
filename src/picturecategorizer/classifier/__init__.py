"""Classifier module for model-backed image classification."""

from .classifier import (
    ClassifierError,
    ImageClassifier,
    Prediction,
    TransformersImageClassifier,
)
from .handle import ClassifierHandle

__all__ = [
    "ImageClassifier",
    "TransformersImageClassifier",
    "Prediction",
    "ClassifierError",
    "ClassifierHandle",
]
