"""Image encoder: turns a file on disk into a classifier input."""

from dataclasses import dataclass
from pathlib import Path

from PIL import Image
from pillow_heif import register_heif_opener

from ..utils.logging import get_logger

logger = get_logger(__name__)

# Lets Pillow open .heic files
register_heif_opener()


class EncodingError(Exception):
    """Raised when an image cannot be decoded into a classifier input."""

    pass


@dataclass
class EncodedImage:
    """A decoded image ready for inference, tied to the file it came from."""

    file_path: Path
    image: Image.Image


class ImageEncoder:
    """
    Decodes image files into RGB Pillow images.

    The file handle is closed before returning so the file can be moved
    afterwards. Images are downscaled to ``max_image_size`` on their longest
    side; the model's own preprocessor does the final resize.
    """

    def __init__(self, max_image_size: int = 1024):
        self.max_image_size = max_image_size

    def encode(self, file_path: Path) -> EncodedImage:
        """
        Decode a single image.

        Args:
            file_path: Path to the image file

        Returns:
            EncodedImage holding the decoded RGB image

        Raises:
            EncodingError: If the file cannot be read or is not a valid image
        """
        file_path = Path(file_path)
        try:
            with Image.open(file_path) as img:
                img.load()
                image = img.convert("RGB")
        except Image.DecompressionBombError as e:
            raise EncodingError(f"Image too large to decode safely: {file_path}: {e}") from e
        except (OSError, ValueError, SyntaxError) as e:
            # UnidentifiedImageError is an OSError; some truncated files raise SyntaxError
            raise EncodingError(f"Could not decode image {file_path}: {e}") from e

        if max(image.size) > self.max_image_size:
            image.thumbnail((self.max_image_size, self.max_image_size))

        logger.debug(f"Encoded {file_path.name} ({image.width}x{image.height})")
        return EncodedImage(file_path=file_path, image=image)
