"""Core module containing the sort workflow and its background worker."""

from .processor import (
    ClassificationError,
    ClassifiedImage,
    DirectoryAccessError,
    DirectoryGrant,
    NoValidFilesError,
    OutputDirectoryError,
    SkippedFile,
    SortError,
    SortProcessor,
    SortReport,
    pair_predictions,
)
from .worker import SortWorker, WorkerBusyError

__all__ = [
    "SortProcessor",
    "SortReport",
    "SkippedFile",
    "ClassifiedImage",
    "DirectoryGrant",
    "pair_predictions",
    "SortError",
    "DirectoryAccessError",
    "OutputDirectoryError",
    "NoValidFilesError",
    "ClassificationError",
    "SortWorker",
    "WorkerBusyError",
]
