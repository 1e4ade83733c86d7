"""Single background worker that runs sorts off the interactive thread."""

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from ..classifier import ClassifierError, ClassifierHandle, TransformersImageClassifier
from ..config.models import PictureCategorizerConfig
from ..utils.logging import get_logger
from .processor import ClassificationError, SortProcessor, SortReport

logger = get_logger(__name__)


class WorkerBusyError(RuntimeError):
    """Raised when a run is submitted while another is still in progress."""

    pass


def default_classifier_handle(config: PictureCategorizerConfig) -> ClassifierHandle:
    """Build a handle that loads the configured transformers model."""
    settings = config.model
    return ClassifierHandle(
        lambda: TransformersImageClassifier.from_settings(settings).load()
    )


class SortWorker:
    """
    Runs SortProcessor on one dedicated thread.

    The classifier starts loading on ``start()`` so it can warm up while
    directories are being chosen. Each ``submit()`` returns a Future that
    delivers either the SortReport or the run-fatal SortError. Runs cannot
    be cancelled once started.
    """

    def __init__(
        self,
        config: PictureCategorizerConfig,
        handle: ClassifierHandle | None = None,
    ):
        """
        Args:
            config: Picture Categorizer configuration
            handle: Classifier handle; defaults to the configured transformers model
        """
        self.config = config
        self.handle = handle or default_classifier_handle(config)
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="picturecategorizer-sort"
        )
        self._current: Future | None = None
        self._lock = threading.Lock()

    def start(self):
        """Begin loading the classifier in the background."""
        self.handle.start()

    @property
    def model_ready(self) -> bool:
        return self.handle.ready

    @property
    def busy(self) -> bool:
        """True while a submitted run has not finished."""
        current = self._current
        return current is not None and not current.done()

    def _run(self, input_dir: Path, output_dir: Path) -> SortReport:
        try:
            classifier = self.handle.get()
        except ClassifierError as e:
            raise ClassificationError(str(e)) from e

        logger.info(f"Sorting {input_dir} -> {output_dir}")
        return SortProcessor(self.config, classifier).run(input_dir, output_dir)

    def submit(
        self,
        input_dir: Path,
        output_dir: Path,
        on_done: Callable[[Future], None] | None = None,
    ) -> Future:
        """
        Queue one sort run.

        Args:
            input_dir: Directory tree of images to classify
            output_dir: Directory receiving the class subdirectories
            on_done: Called once with the finished Future

        Returns:
            Future resolving to a SortReport

        Raises:
            WorkerBusyError: If a previous run has not finished yet
        """
        with self._lock:
            if self.busy:
                raise WorkerBusyError("A sort is already in progress")

            self.start()
            future = self._executor.submit(self._run, Path(input_dir), Path(output_dir))
            future.add_done_callback(self._log_outcome)
            if on_done is not None:
                future.add_done_callback(on_done)
            self._current = future
            return future

    @staticmethod
    def _log_outcome(future: Future):
        error = future.exception()
        if error is not None:
            logger.error(f"Error during processing: {error}")

    def shutdown(self, wait: bool = True):
        """Stop accepting runs; optionally wait for the current one."""
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown(wait=True)
        return False
