"""Configuration models using Pydantic for validation."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from ..utils.file_scanner import DEFAULT_IMAGE_EXTENSIONS, normalize_extension


def _check_path_component(value: str) -> str:
    """Ensure a class label can name exactly one subdirectory."""
    if not value or value in {".", ".."} or "/" in value or "\\" in value:
        raise ValueError(f"Invalid class label: {value!r}")
    return value


class ModelSettings(BaseModel):
    """Image classification model configuration."""

    model_name: str = Field(
        default="Falconsai/nsfw_image_detection",
        description="Hugging Face image-classification model id or local path",
    )
    device: str | None = Field(
        default=None, description="Inference device (e.g. 'cpu', 'cuda:0', 'mps'); auto if unset"
    )
    batch_size: int = Field(default=8, ge=1, description="Images per forward pass")
    label_aliases: dict[str, str] = Field(
        default_factory=lambda: {"normal": "sfw"},
        description="Maps raw model labels to class directory names",
    )

    @field_validator("label_aliases")
    @classmethod
    def lowercase_aliases(cls, v: dict[str, str]) -> dict[str, str]:
        """Model labels are matched case-insensitively."""
        return {key.strip().lower(): value.strip().lower() for key, value in v.items()}

    class Config:
        protected_namespaces = ()


class SortingSettings(BaseModel):
    """Settings for enumerating and sorting image files."""

    class_labels: list[str] = Field(
        default_factory=lambda: ["sfw", "nsfw"],
        description="Class subdirectories created under the output directory",
    )
    allowed_extensions: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_IMAGE_EXTENSIONS),
        description="File extensions (case-insensitive) submitted for classification",
    )
    allow_unknown_labels: bool = Field(
        default=False,
        description="Create folders for predicted labels outside class_labels instead of skipping",
    )
    max_image_size: int = Field(
        default=1024, ge=32, description="Longest side (px) images are downscaled to before inference"
    )

    @field_validator("class_labels")
    @classmethod
    def validate_class_labels(cls, v: list[str]) -> list[str]:
        """Ensure class labels are non-empty, unique directory names."""
        labels = [_check_path_component(label.strip().lower()) for label in v]
        if not labels:
            raise ValueError("At least one class label must be specified")
        if len(set(labels)) != len(labels):
            raise ValueError(f"Duplicate class labels: {labels}")
        return labels

    @field_validator("allowed_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Normalize extensions to lowercase without a leading dot."""
        extensions = [normalize_extension(ext) for ext in v]
        if not all(extensions):
            raise ValueError("Extensions must not be empty")
        return extensions


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_dir: Path = Field(
        default=Path.home() / ".picturecategorizer" / "logs", description="Directory for log files"
    )
    max_bytes: int = Field(
        default=10 * 1024 * 1024, ge=1024, description="Max log file size before rotation (bytes)"
    )
    backup_count: int = Field(default=5, ge=1, description="Number of rotated log files to keep")
    console_enabled: bool = Field(default=True, description="Enable console logging")
    file_enabled: bool = Field(default=True, description="Enable file logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper


class PictureCategorizerConfig(BaseModel):
    """Main configuration for Picture Categorizer."""

    model: ModelSettings = Field(default_factory=ModelSettings, description="Model settings")

    sorting: SortingSettings = Field(
        default_factory=SortingSettings, description="File sorting settings"
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings, description="Logging settings"
    )

    class Config:
        """Pydantic config."""

        validate_assignment = True
        extra = "forbid"  # Raise error on unknown fields
