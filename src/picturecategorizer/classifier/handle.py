"""Load-once handle for the shared classifier instance."""

import threading
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError

from ..utils.logging import get_logger
from .classifier import ClassifierError, ImageClassifier

logger = get_logger(__name__)


class ClassifierHandle:
    """
    Loads a classifier exactly once on a background thread.

    After loading, the classifier is shared read-only by every run for the
    rest of the process lifetime. Loading starts on ``start()`` (or on the
    first ``get()``) and a failed load is reported to every caller.
    """

    def __init__(self, loader: Callable[[], ImageClassifier]):
        """
        Args:
            loader: Callable that builds and fully loads the classifier
        """
        self._loader = loader
        self._future: Future | None = None
        self._lock = threading.Lock()

    def _load(self, future: Future):
        try:
            classifier = self._loader()
        except Exception as e:
            logger.error(f"Classifier failed to load: {e}")
            future.set_exception(e)
        else:
            logger.info("Classifier ready")
            future.set_result(classifier)

    def start(self) -> Future:
        """Start loading in the background. Safe to call repeatedly."""
        with self._lock:
            if self._future is None:
                self._future = Future()
                self._future.set_running_or_notify_cancel()
                thread = threading.Thread(
                    target=self._load,
                    args=(self._future,),
                    name="picturecategorizer-model-loader",
                    daemon=True,
                )
                thread.start()
            return self._future

    @property
    def ready(self) -> bool:
        """True once the classifier has loaded successfully."""
        future = self._future
        return future is not None and future.done() and future.exception() is None

    @property
    def failed(self) -> bool:
        future = self._future
        return future is not None and future.done() and future.exception() is not None

    def get(self, timeout: float | None = None) -> ImageClassifier:
        """
        Block until the classifier is loaded and return it.

        Raises:
            ClassifierError: If loading failed or did not finish within ``timeout``
        """
        future = self.start()
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            raise ClassifierError(f"Classifier did not load within {timeout}s") from e
        except ClassifierError:
            raise
        except Exception as e:
            raise ClassifierError(f"Classifier could not be loaded: {e}") from e
