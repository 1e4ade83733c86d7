"""Classifier component wrapping a pre-trained image classification model."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from PIL import Image

from ..config.models import ModelSettings
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ClassifierError(Exception):
    """Raised when the model cannot be loaded or a batch prediction fails."""

    pass


@dataclass(frozen=True)
class Prediction:
    """Top prediction for one image."""

    label: str
    score: float
    raw_label: str


class ImageClassifier(ABC):
    """Batch image classifier with an order-preserving ``predict``."""

    @abstractmethod
    def predict(self, images: Sequence[Image.Image]) -> list[Prediction]:
        """
        Classify a batch of images.

        Args:
            images: Decoded images

        Returns:
            One Prediction per input image, in input order

        Raises:
            ClassifierError: If the batch cannot be classified
        """
        pass


class TransformersImageClassifier(ImageClassifier):
    """
    Image classifier backed by a Hugging Face ``transformers`` pipeline.

    Uses Falconsai/nsfw_image_detection by default, whose labels are
    ``normal`` and ``nsfw``. Raw labels are lowercased and mapped through
    ``label_aliases`` so they match the output class directories.
    The loaded pipeline is cached at the class level per (model, device).
    """

    _pipeline_cache: ClassVar[dict] = {}

    def __init__(
        self,
        model_name: str = "Falconsai/nsfw_image_detection",
        device: str | None = None,
        batch_size: int = 8,
        label_aliases: dict[str, str] | None = None,
    ):
        self.model_name = model_name
        self.device = device
        self.batch_size = batch_size
        self.label_aliases = {
            key.lower(): value.lower() for key, value in (label_aliases or {}).items()
        }

    @classmethod
    def from_settings(cls, settings: ModelSettings) -> "TransformersImageClassifier":
        return cls(
            model_name=settings.model_name,
            device=settings.device,
            batch_size=settings.batch_size,
            label_aliases=settings.label_aliases,
        )

    def _get_pipeline(self):
        """Get the image-classification pipeline, loading it on first use."""
        key = (self.model_name, self.device)
        if key not in self._pipeline_cache:
            logger.info(f"Loading image classification model: {self.model_name}")
            try:
                from transformers import pipeline

                kwargs = {"model": self.model_name}
                if self.device is not None:
                    kwargs["device"] = self.device
                self._pipeline_cache[key] = pipeline("image-classification", **kwargs)
            except Exception as e:
                logger.error(f"Failed to load model {self.model_name}: {e}")
                raise ClassifierError(f"Failed to load model {self.model_name}: {e}") from e
            logger.info(f"Model loaded: {self.model_name}")

        return self._pipeline_cache[key]

    def load(self) -> "TransformersImageClassifier":
        """Eagerly load the model. Returns self for chaining."""
        self._get_pipeline()
        return self

    def normalize_label(self, raw_label: str) -> str:
        """Map a raw model label to a class directory name."""
        label = raw_label.strip().lower()
        return self.label_aliases.get(label, label)

    def _top_prediction(self, output) -> Prediction:
        # A single image yields a list of {"label", "score"} dicts
        if isinstance(output, dict):
            output = [output]
        if not output:
            raise ClassifierError("Model returned no labels for an image")
        best = max(output, key=lambda item: item["score"])
        return Prediction(
            label=self.normalize_label(best["label"]),
            score=float(best["score"]),
            raw_label=best["label"],
        )

    def predict(self, images: Sequence[Image.Image]) -> list[Prediction]:
        images = list(images)
        if not images:
            return []

        classify = self._get_pipeline()
        logger.debug(f"Classifying {len(images)} image(s) with {self.model_name}")

        try:
            outputs = classify(images, batch_size=self.batch_size)
        except Exception as e:
            logger.error(f"Batch prediction failed: {e}")
            raise ClassifierError(f"Prediction failed: {e}") from e

        outputs = list(outputs)
        if len(outputs) != len(images):
            raise ClassifierError(
                f"Model returned {len(outputs)} result(s) for {len(images)} image(s)"
            )

        try:
            return [self._top_prediction(output) for output in outputs]
        except (KeyError, TypeError, ValueError) as e:
            raise ClassifierError(f"Unexpected model output: {e}") from e
