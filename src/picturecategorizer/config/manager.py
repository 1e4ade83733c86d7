"""Locating, reading and writing Picture Categorizer YAML config files."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import PictureCategorizerConfig

USER_CONFIG_PATH = Path.home() / ".config" / "picturecategorizer" / "config.yaml"

# First existing file wins
SEARCH_PATHS = (
    Path("config/default_config.yaml"),
    USER_CONFIG_PATH,
    Path.home() / ".picturecategorizer" / "config.yaml",
)


def _yaml_safe(value):
    """Turn Path values into strings so ``yaml.safe_dump`` accepts them."""
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {key: _yaml_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_yaml_safe(item) for item in value]
    return value


def write_config(config: PictureCategorizerConfig, path: Path) -> Path:
    """
    Write ``config`` to ``path`` as YAML, creating parent directories.

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _yaml_safe(config.model_dump(mode="python"))
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return path


class ConfigManager:
    """
    Loads the configuration for one CLI invocation.

    With an explicit ``config_path`` only that file is considered; otherwise
    ``SEARCH_PATHS`` are tried in order. ``source`` records which file was
    actually read, or stays None when built-in defaults are used.
    """

    def __init__(self, config_path: Path | None = None):
        self.config_path = Path(config_path) if config_path is not None else None
        self.source: Path | None = None

    def locate(self) -> Path | None:
        candidates = (self.config_path,) if self.config_path is not None else SEARCH_PATHS
        return next((path for path in candidates if path.is_file()), None)

    def load(self, create_if_missing: bool = False) -> PictureCategorizerConfig:
        """
        Read and validate the configuration.

        Args:
            create_if_missing: Return the built-in defaults when no file is found

        Raises:
            FileNotFoundError: No file found and ``create_if_missing`` is False
            ValueError: The file is not valid YAML or fails validation
        """
        path = self.locate()
        if path is None:
            if not create_if_missing:
                searched = [self.config_path] if self.config_path is not None else list(SEARCH_PATHS)
                raise FileNotFoundError(f"No configuration file found. Searched: {searched}")
            self.source = None
            return PictureCategorizerConfig()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            config = PictureCategorizerConfig(**data)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {path}: {e}") from e
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {path}: {e}") from e

        self.source = path
        return config
