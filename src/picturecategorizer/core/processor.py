"""Batch classify-and-sort workflow."""

import os
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from ..classifier import ClassifierError, ImageClassifier, Prediction
from ..config.models import PictureCategorizerConfig
from ..encoder import EncodedImage, EncodingError, ImageEncoder
from ..mover import FileMover, MoveResult
from ..utils.file_scanner import FileScanner
from ..utils.logging import get_logger

logger = get_logger(__name__)


class SortError(Exception):
    """A failure that aborts the whole run."""

    pass


class DirectoryAccessError(SortError):
    """The input or output directory cannot be used."""

    pass


class OutputDirectoryError(SortError):
    """The class directories could not be created."""

    pass


class NoValidFilesError(SortError):
    """Nothing in the input directory could be encoded."""

    pass


class ClassificationError(SortError):
    """The classifier could not be loaded or failed on the batch."""

    pass


class DirectoryGrant:
    """
    Scoped access to a directory for the duration of a run.

    Access is checked on entry and released on exit, whether the run
    succeeds, returns early, or raises.
    """

    def __init__(self, path: Path, writable: bool = False, role: str = "input"):
        self.path = Path(path).expanduser()
        self.writable = writable
        self.role = role
        self.active = False

    def __enter__(self) -> Path:
        path = self.path
        if not path.exists():
            raise DirectoryAccessError(f"Cannot access {self.role} directory: {path} does not exist")
        if not path.is_dir():
            raise DirectoryAccessError(f"Cannot access {self.role} directory: {path} is not a directory")

        mode = os.R_OK | os.X_OK
        if self.writable:
            mode |= os.W_OK
        if not os.access(path, mode):
            raise DirectoryAccessError(f"Cannot access {self.role} directory: permission denied for {path}")

        self.active = True
        logger.debug(f"Acquired {self.role} directory: {path}")
        return path

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.active = False
        logger.debug(f"Released {self.role} directory: {self.path}")
        return False


@dataclass
class SkippedFile:
    """A candidate that was left out of the batch."""

    file_path: Path
    reason: str


@dataclass
class ClassifiedImage:
    """A file paired with the prediction made for it."""

    file_path: Path
    prediction: Prediction


@dataclass
class SortReport:
    """Outcome of one sort run."""

    input_dir: Path
    output_dir: Path
    candidates: int = 0
    skipped: list[SkippedFile] = field(default_factory=list)
    moves: list[MoveResult] = field(default_factory=list)

    @property
    def classified(self) -> int:
        return len(self.moves)

    @property
    def moved(self) -> list[MoveResult]:
        return [m for m in self.moves if m.success]

    @property
    def failed(self) -> list[MoveResult]:
        return [m for m in self.moves if not m.success]

    @property
    def label_counts(self) -> dict[str, int]:
        """Number of successfully moved files per label."""
        return dict(Counter(m.label for m in self.moved))


def pair_predictions(
    encoded: Sequence[EncodedImage], predictions: Sequence[Prediction]
) -> list[ClassifiedImage]:
    """
    Pair each encoded file with its prediction by submission order.

    Raises:
        ClassificationError: If the counts differ, since any pairing would
            then be a guess
    """
    if len(encoded) != len(predictions):
        raise ClassificationError(
            f"Classifier returned {len(predictions)} prediction(s) for {len(encoded)} file(s)"
        )
    return [
        ClassifiedImage(file_path=item.file_path, prediction=prediction)
        for item, prediction in zip(encoded, predictions)
    ]


class SortProcessor:
    """
    Classifies every image under an input directory and moves it to
    ``<output>/<label>/<filename>``.

    Pipeline: access check -> class folders -> scan -> encode -> classify
    (one batch) -> move.
    """

    def __init__(self, config: PictureCategorizerConfig, classifier: ImageClassifier):
        """
        Args:
            config: Picture Categorizer configuration
            classifier: Loaded classifier, shared and never mutated
        """
        self.config = config
        self.classifier = classifier
        self.scanner = FileScanner(config.sorting.allowed_extensions)
        self.encoder = ImageEncoder(max_image_size=config.sorting.max_image_size)

    def _encode_all(self, candidates: list[Path], report: SortReport) -> list[EncodedImage]:
        encoded: list[EncodedImage] = []
        for path in candidates:
            try:
                encoded.append(self.encoder.encode(path))
            except EncodingError as e:
                logger.warning(f"Skipping {path}: {e}")
                report.skipped.append(SkippedFile(file_path=path, reason=str(e)))
        return encoded

    def _classify(self, encoded: list[EncodedImage]) -> list[ClassifiedImage]:
        logger.info(f"Classifying {len(encoded)} file(s)")
        try:
            predictions = self.classifier.predict([item.image for item in encoded])
        except ClassifierError as e:
            raise ClassificationError(str(e)) from e
        except Exception as e:
            raise ClassificationError(f"Classifier failed: {e}") from e
        finally:
            for item in encoded:
                item.image.close()
        return pair_predictions(encoded, predictions)

    def run(self, input_dir: Path, output_dir: Path) -> SortReport:
        """
        Sort one input directory into one output directory.

        Returns:
            SortReport describing skipped files and every attempted move

        Raises:
            DirectoryAccessError: A directory is missing or not accessible
            OutputDirectoryError: Class folders could not be created
            NoValidFilesError: No candidate image could be decoded
            ClassificationError: The classifier failed on the batch
        """
        with DirectoryGrant(input_dir, role="input") as source_root, DirectoryGrant(
            output_dir, writable=True, role="output"
        ) as output_root:
            report = SortReport(input_dir=source_root, output_dir=output_root)

            mover = FileMover(
                output_root=output_root,
                class_labels=self.config.sorting.class_labels,
                allow_unknown_labels=self.config.sorting.allow_unknown_labels,
            )
            try:
                class_folders = mover.ensure_class_directories()
            except OSError as e:
                raise OutputDirectoryError(f"Failed to create output directories: {e}") from e

            # An output root nested in the input holds only sorted files, including
            # folders made for unknown labels. When both are the same directory
            # only the class folders can be told apart from the user's own.
            if os.path.samefile(source_root, output_root):
                excluded = class_folders
            else:
                excluded = [output_root]
            scan = self.scanner.scan(source_root, exclude=excluded)
            report.candidates = len(scan.candidates)

            encoded = self._encode_all(scan.candidates, report)
            if not encoded:
                raise NoValidFilesError("No valid files found")

            for item in self._classify(encoded):
                result = mover.move(item.file_path, item.prediction.label)
                report.moves.append(result)

            logger.info(
                f"Sorted {len(report.moved)}/{report.classified} file(s) "
                f"({len(report.failed)} failed to move, {len(report.skipped)} skipped)"
            )
            return report
