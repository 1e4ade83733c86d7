"""Recursive discovery of candidate image files."""

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .logging import get_logger

logger = get_logger(__name__)

DEFAULT_IMAGE_EXTENSIONS = frozenset(
    {"jpg", "jpeg", "png", "gif", "bmp", "tiff", "heic", "webp"}
)


def normalize_extension(extension: str) -> str:
    """Lowercase an extension and strip any leading dot."""
    return extension.strip().lstrip(".").lower()


def _directory_id(path: Path) -> tuple[int, int] | None:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return st.st_dev, st.st_ino


@dataclass
class FileScanResult:
    """Files found under a root, split by the allow-list."""

    root: Path
    candidates: list[Path] = field(default_factory=list)
    ignored: list[Path] = field(default_factory=list)


class FileScanner:
    """
    Recursively enumerates files under a directory and keeps allow-listed images.

    Paths are returned in sorted order so repeated runs over the same tree
    submit files to the classifier in the same order. Symlinked directories
    are not followed, and entries that cannot be inspected (broken or
    looping symlinks) are ignored rather than failing the scan.
    """

    def __init__(self, allowed_extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS):
        self.allowed_extensions = frozenset(
            normalize_extension(ext) for ext in allowed_extensions
        )

    @staticmethod
    def _walk_error(error: OSError):
        logger.warning(f"Cannot read directory {error.filename}: {error.strerror}")

    def scan(self, root: Path, exclude: Iterable[Path] = ()) -> FileScanResult:
        """
        Scan ``root`` recursively.

        Args:
            root: Directory to enumerate
            exclude: Directories whose contents are never returned (e.g. an
                output directory nested inside the input directory). They are
                matched by identity on disk, so differently spelled paths to
                the same directory are excluded too.

        Returns:
            FileScanResult with candidate images and ignored files
        """
        root = Path(root)
        excluded_ids = {_directory_id(Path(p)) for p in exclude} - {None}
        result = FileScanResult(root=root)
        found: list[Path] = []

        for dirpath, dirnames, filenames in os.walk(root, onerror=self._walk_error):
            if excluded_ids:
                dirnames[:] = [
                    name for name in dirnames
                    if _directory_id(Path(dirpath, name)) not in excluded_ids
                ]
            found.extend(Path(dirpath, name) for name in filenames)

        for path in sorted(found):
            if not path.is_file():
                logger.debug(f"Ignoring entry that is not a readable file: {path}")
                continue

            if normalize_extension(path.suffix) in self.allowed_extensions:
                result.candidates.append(path)
            else:
                result.ignored.append(path)
                logger.debug(f"Ignoring file with unsupported extension: {path}")

        logger.info(
            f"Scanned {root}: {len(result.candidates)} candidate image(s), "
            f"{len(result.ignored)} other file(s)"
        )
        return result
