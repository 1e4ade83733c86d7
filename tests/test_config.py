"""Tests for configuration models and the config manager."""

import pytest
from pydantic import ValidationError

from picturecategorizer.config import (
    ConfigManager,
    LoggingSettings,
    ModelSettings,
    PictureCategorizerConfig,
    SortingSettings,
    write_config,
)


class TestModelSettings:
    """Tests for ModelSettings."""

    def test_defaults(self):
        settings = ModelSettings()
        assert settings.model_name == "Falconsai/nsfw_image_detection"
        assert settings.device is None
        assert settings.batch_size == 8
        assert settings.label_aliases == {"normal": "sfw"}

    def test_aliases_are_lowercased(self):
        settings = ModelSettings(label_aliases={"Normal": "SFW", " Porn ": "nsfw"})
        assert settings.label_aliases == {"normal": "sfw", "porn": "nsfw"}

    def test_batch_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            ModelSettings(batch_size=0)


class TestSortingSettings:
    """Tests for SortingSettings."""

    def test_default_allow_list(self):
        settings = SortingSettings()
        assert set(settings.allowed_extensions) == {
            "jpg", "jpeg", "png", "gif", "bmp", "tiff", "heic", "webp",
        }

    def test_default_class_labels(self):
        assert SortingSettings().class_labels == ["sfw", "nsfw"]

    def test_extensions_are_normalized(self):
        settings = SortingSettings(allowed_extensions=[".JPG", "Png"])
        assert settings.allowed_extensions == ["jpg", "png"]

    def test_class_labels_are_normalized(self):
        settings = SortingSettings(class_labels=["SFW", "Nsfw"])
        assert settings.class_labels == ["sfw", "nsfw"]

    @pytest.mark.parametrize("labels", [[], ["sfw", "sfw"], ["a/b"], [".."], [""]])
    def test_invalid_class_labels(self, labels):
        with pytest.raises(ValidationError):
            SortingSettings(class_labels=labels)

    def test_empty_extension_rejected(self):
        with pytest.raises(ValidationError):
            SortingSettings(allowed_extensions=["jpg", "."])


class TestLoggingSettings:
    """Tests for LoggingSettings."""

    def test_level_uppercased(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="verbose")


class TestPictureCategorizerConfig:
    """Tests for the top-level config."""

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            PictureCategorizerConfig(unknown_option=True)

    def test_nested_dict_construction(self):
        config = PictureCategorizerConfig(
            model={"model_name": "local/model", "batch_size": 2},
            sorting={"allow_unknown_labels": True},
        )
        assert config.model.model_name == "local/model"
        assert config.model.batch_size == 2
        assert config.sorting.allow_unknown_labels is True


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_missing_explicit_file_raises(self, tmp_path):
        manager = ConfigManager(tmp_path / "missing.yaml")
        with pytest.raises(FileNotFoundError):
            manager.load()

    def test_missing_explicit_file_falls_back_to_defaults(self, tmp_path):
        manager = ConfigManager(tmp_path / "missing.yaml")
        config = manager.load(create_if_missing=True)
        assert config == PictureCategorizerConfig()

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "model:\n  model_name: my/model\nsorting:\n  class_labels: [safe, unsafe]\n",
            encoding="utf-8",
        )

        config = ConfigManager(path).load()

        assert config.model.model_name == "my/model"
        assert config.sorting.class_labels == ["safe", "unsafe"]

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert ConfigManager(path).load() == PictureCategorizerConfig()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("model: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            ConfigManager(path).load()

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("model:\n  batch_size: -1\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid configuration"):
            ConfigManager(path).load()

    def test_source_recorded(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("sorting:\n  max_image_size: 512\n", encoding="utf-8")

        manager = ConfigManager(path)
        assert manager.source is None
        manager.load()

        assert manager.source == path

    def test_defaults_have_no_source(self, tmp_path):
        manager = ConfigManager(tmp_path / "missing.yaml")
        manager.load(create_if_missing=True)
        assert manager.source is None

    def test_explicit_path_skips_search_paths(self, tmp_path, monkeypatch):
        other = tmp_path / "other.yaml"
        other.write_text("model:\n  batch_size: 3\n", encoding="utf-8")
        monkeypatch.setattr("picturecategorizer.config.manager.SEARCH_PATHS", (other,))

        config = ConfigManager(tmp_path / "missing.yaml").load(create_if_missing=True)

        assert config.model.batch_size == 8

    def test_search_paths_used_without_explicit_path(self, tmp_path, monkeypatch):
        found = tmp_path / "found.yaml"
        found.write_text("model:\n  batch_size: 3\n", encoding="utf-8")
        monkeypatch.setattr(
            "picturecategorizer.config.manager.SEARCH_PATHS",
            (tmp_path / "absent.yaml", found),
        )

        manager = ConfigManager()
        config = manager.load()

        assert config.model.batch_size == 3
        assert manager.source == found


class TestWriteConfig:
    """Tests for write_config."""

    def test_write_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        config = PictureCategorizerConfig(
            sorting={"class_labels": ["keep", "hide"]},
            logging={"log_dir": tmp_path / "logs"},
        )

        assert write_config(config, path) == path

        reloaded = ConfigManager(path).load()
        assert reloaded.sorting.class_labels == ["keep", "hide"]
        assert reloaded.logging.log_dir == tmp_path / "logs"

    def test_paths_written_as_strings(self, tmp_path):
        path = tmp_path / "config.yaml"
        write_config(PictureCategorizerConfig(logging={"log_dir": tmp_path / "logs"}), path)

        text = path.read_text(encoding="utf-8")

        assert "!!python" not in text
        assert str(tmp_path / "logs") in text
