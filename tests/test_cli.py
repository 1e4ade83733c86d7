"""Tests for the command-line interface."""

from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner
from PIL import Image

from picturecategorizer.classifier import ClassifierHandle, ImageClassifier, Prediction
from picturecategorizer.cli.main import cli


class RedIsUnsafe(ImageClassifier):
    def predict(self, images):
        return [
            Prediction("nsfw", 0.9, "nsfw")
            if image.getpixel((0, 0)) == (255, 0, 0)
            else Prediction("sfw", 0.9, "normal")
            for image in images
        ]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump({"logging": {"file_enabled": False, "console_enabled": False}}),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def stub_model():
    """Replace the transformers model with a local stub classifier."""
    with patch(
        "picturecategorizer.core.worker.default_classifier_handle",
        side_effect=lambda config: ClassifierHandle(RedIsUnsafe),
    ) as factory:
        yield factory


@pytest.fixture
def dirs(tmp_path):
    input_dir = tmp_path / "input"
    output_dir = tmp_path / "output"
    input_dir.mkdir()
    output_dir.mkdir()
    Image.new("RGB", (8, 8), (255, 0, 0)).save(input_dir / "red.png")
    Image.new("RGB", (8, 8), (0, 255, 0)).save(input_dir / "green.png")
    (input_dir / "readme.txt").write_text("ignored")
    return input_dir, output_dir


class TestSortCommand:
    """Tests for the sort command."""

    def test_sort_success(self, runner, config_file, stub_model, dirs):
        input_dir, output_dir = dirs

        result = runner.invoke(
            cli, ["--config", str(config_file), "sort", str(input_dir), str(output_dir)]
        )

        assert result.exit_code == 0, result.output
        assert "All files have been processed" in result.output
        assert (output_dir / "nsfw" / "red.png").exists()
        assert (output_dir / "sfw" / "green.png").exists()
        assert (input_dir / "readme.txt").exists()

    def test_sort_no_valid_files(self, runner, config_file, stub_model, tmp_path):
        empty_in = tmp_path / "empty"
        out = tmp_path / "out"
        empty_in.mkdir()
        out.mkdir()

        result = runner.invoke(
            cli, ["--config", str(config_file), "sort", str(empty_in), str(out)]
        )

        assert result.exit_code == 1
        assert "No valid files found" in result.output

    def test_sort_missing_input(self, runner, config_file, stub_model, tmp_path):
        out = tmp_path / "out"
        out.mkdir()

        result = runner.invoke(
            cli, ["--config", str(config_file), "sort", str(tmp_path / "missing"), str(out)]
        )

        assert result.exit_code == 1
        assert "Cannot access input directory" in result.output

    def test_sort_prompts_for_directories(self, runner, config_file, stub_model, dirs):
        input_dir, output_dir = dirs

        with patch(
            "picturecategorizer.cli.main.Prompt.ask",
            side_effect=[str(input_dir), str(output_dir)],
        ) as ask:
            result = runner.invoke(cli, ["--config", str(config_file), "sort"])

        assert result.exit_code == 0, result.output
        assert ask.call_count == 2
        assert (output_dir / "sfw" / "green.png").exists()

    def test_sort_model_override(self, runner, config_file, stub_model, dirs):
        input_dir, output_dir = dirs

        result = runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "sort", str(input_dir), str(output_dir),
                "--model", "other/model",
                "--device", "cpu",
            ],
        )

        assert result.exit_code == 0, result.output
        config = stub_model.call_args.args[0]
        assert config.model.model_name == "other/model"
        assert config.model.device == "cpu"

    def test_sort_model_load_failure(self, runner, config_file, dirs):
        def broken():
            raise OSError("no such model")

        with patch(
            "picturecategorizer.core.worker.default_classifier_handle",
            side_effect=lambda config: ClassifierHandle(broken),
        ):
            result = runner.invoke(
                cli, ["--config", str(config_file), "sort", str(dirs[0]), str(dirs[1])]
            )

        assert result.exit_code == 1
        assert "no such model" in result.output
        assert (dirs[0] / "red.png").exists()

    def test_sort_unexpected_error(self, runner, config_file, stub_model, dirs):
        with patch(
            "picturecategorizer.core.worker.SortProcessor.run",
            side_effect=RuntimeError("disk vanished"),
        ):
            result = runner.invoke(
                cli, ["--config", str(config_file), "sort", str(dirs[0]), str(dirs[1])]
            )

        assert result.exit_code == 1
        assert "Sort failed" in result.output
        assert "disk vanished" in result.output
        assert not isinstance(result.exception, RuntimeError)

    def test_invalid_config(self, runner, tmp_path, dirs):
        bad = tmp_path / "bad.yaml"
        bad.write_text("model:\n  batch_size: 0\n", encoding="utf-8")

        result = runner.invoke(cli, ["--config", str(bad), "sort", str(dirs[0]), str(dirs[1])])

        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestConfigCommands:
    """Tests for the config command group."""

    def test_config_show(self, runner, config_file):
        result = runner.invoke(cli, ["--config", str(config_file), "config", "show"])

        assert result.exit_code == 0, result.output
        assert "Falconsai/nsfw_image_detection" in result.output
        assert "sfw, nsfw" in result.output

    def test_config_init(self, runner, tmp_path):
        target = tmp_path / "conf" / "config.yaml"

        result = runner.invoke(cli, ["config", "init", str(target)])

        assert result.exit_code == 0, result.output
        data = yaml.safe_load(target.read_text(encoding="utf-8"))
        assert data["sorting"]["class_labels"] == ["sfw", "nsfw"]

    def test_config_init_refuses_overwrite(self, runner, config_file):
        result = runner.invoke(cli, ["config", "init", str(config_file)])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_config_init_force(self, runner, config_file):
        result = runner.invoke(cli, ["config", "init", str(config_file), "--force"])

        assert result.exit_code == 0
        data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        assert data["logging"]["file_enabled"] is True


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
