"""Mover component: class directories and per-file moves."""

import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..utils.logging import get_logger

logger = get_logger(__name__)


class LabelRejectedError(ValueError):
    """Raised when a predicted label cannot be used as a target folder."""

    pass


@dataclass
class MoveResult:
    """Result of a file move operation."""

    source_path: Path
    destination_path: Path
    label: str

    success: bool
    error_message: str | None = None


class FileMover:
    """
    Moves files into ``<output_root>/<label>/<original filename>``.

    Move failures are returned as unsuccessful MoveResults rather than
    raised, so one bad file never stops the rest of a batch. Existing
    files at the destination are never overwritten.
    """

    def __init__(
        self,
        output_root: Path,
        class_labels: Iterable[str] = ("sfw", "nsfw"),
        allow_unknown_labels: bool = False,
    ):
        """
        Initialize the file mover.

        Args:
            output_root: Directory that holds one subdirectory per class
            class_labels: Known class names
            allow_unknown_labels: Accept predicted labels outside class_labels
        """
        self.output_root = Path(output_root)
        self.class_labels = list(class_labels)
        self.allow_unknown_labels = allow_unknown_labels

    def ensure_class_directories(self) -> list[Path]:
        """
        Create any missing class directories under the output root.

        Returns:
            The class directory paths

        Raises:
            OSError: If a directory cannot be created
        """
        folders = []
        for label in self.class_labels:
            folder = self.output_root / label
            if not folder.is_dir():
                folder.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created folder: {folder}")
            folders.append(folder)
        return folders

    def target_folder(self, label: str) -> Path:
        """
        Resolve the folder for a predicted label.

        Raises:
            LabelRejectedError: If the label is not a single plain path
                component, or is unknown and unknown labels are not allowed
        """
        if not label or label in {".", ".."} or "/" in label or "\\" in label:
            raise LabelRejectedError(f"Label is not a valid folder name: {label!r}")
        if label not in self.class_labels and not self.allow_unknown_labels:
            raise LabelRejectedError(
                f"Unexpected label {label!r} (known: {', '.join(self.class_labels)})"
            )
        return self.output_root / label

    def _failure(self, source: Path, destination: Path, label: str, message: str) -> MoveResult:
        logger.warning(f"Failed to move {source}: {message}")
        return MoveResult(
            source_path=source,
            destination_path=destination,
            label=label,
            success=False,
            error_message=message,
        )

    def move(self, source: Path, label: str) -> MoveResult:
        """
        Move a file into the folder for ``label``, keeping its filename.

        Args:
            source: Source file path
            label: Predicted class label

        Returns:
            MoveResult with operation status
        """
        source = Path(source)

        try:
            folder = self.target_folder(label)
        except LabelRejectedError as e:
            return self._failure(source, source, label, str(e))

        destination = folder / source.name

        if not source.exists():
            return self._failure(source, destination, label, f"Source file not found: {source}")
        if not source.is_file():
            return self._failure(source, destination, label, f"Source is not a file: {source}")
        if destination.exists():
            return self._failure(
                source, destination, label, f"Destination already exists: {destination}"
            )

        try:
            if not folder.is_dir():
                # Only reached for unknown labels; class folders exist up front
                folder.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created folder: {folder}")
            shutil.move(str(source), str(destination))
        except PermissionError as e:
            return self._failure(source, destination, label, f"Permission denied: {e}")
        except OSError as e:
            return self._failure(source, destination, label, f"Move failed: {e}")

        logger.info(f"Moved: {source.name} -> {destination}")
        return MoveResult(
            source_path=source,
            destination_path=destination,
            label=label,
            success=True,
        )
