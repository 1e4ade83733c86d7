"""Main CLI interface for Picture Categorizer using Click."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from .. import __version__
from ..config import USER_CONFIG_PATH, ConfigManager, write_config
from ..config.models import PictureCategorizerConfig
from ..core import SortError, SortReport, SortWorker
from ..utils.logging import get_logger, setup_logging

console = Console()
logger = get_logger(__name__)


def _load_config(ctx) -> PictureCategorizerConfig:
    return ConfigManager(ctx.obj.get("config_path")).load(create_if_missing=True)


def _apply_logging(config: PictureCategorizerConfig):
    setup_logging(
        level=config.logging.level,
        log_dir=config.logging.log_dir,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count,
        console_enabled=config.logging.console_enabled,
        file_enabled=config.logging.file_enabled,
    )


def _ask_directory(label: str) -> Path:
    """Prompt until a non-empty directory path is entered."""
    while True:
        answer = Prompt.ask(f"{label} directory").strip()
        if answer:
            return Path(answer).expanduser()
        console.print("[red]Please enter a directory path.[/red]")


def _print_report(report: SortReport, class_labels: list[str]):
    table = Table(title="Sort Summary", show_header=True, header_style="bold cyan")
    table.add_column("Folder", style="cyan")
    table.add_column("Files", style="green", justify="right")

    counts = report.label_counts
    for label in class_labels:
        table.add_row(label, str(counts.get(label, 0)))
    for label in sorted(set(counts) - set(class_labels)):
        table.add_row(f"{escape(label)} [yellow](unexpected)[/yellow]", str(counts[label]))
    table.add_row("", "")
    table.add_row("Skipped (unreadable)", str(len(report.skipped)))
    table.add_row("Failed to move", str(len(report.failed)))

    console.print()
    console.print(table)

    for skipped in report.skipped:
        console.print(f"  [yellow]skipped[/yellow] {escape(str(skipped.file_path))}: {escape(skipped.reason)}")
    for failed in report.failed:
        console.print(f"  [red]not moved[/red] {escape(str(failed.source_path))}: {escape(failed.error_message or '')}")


@click.group()
@click.version_option(version=__version__, prog_name="Picture Categorizer")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx, config: Optional[Path]):
    """
    Picture Categorizer - sort images into sfw/nsfw folders.

    Classifies every image in a directory tree with a pre-trained model and
    moves each file into a subfolder named after its predicted class.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command()
@click.argument("input_dir", required=False, type=click.Path(path_type=Path))
@click.argument("output_dir", required=False, type=click.Path(path_type=Path))
@click.option("--model", "model_name", help="Model id or path (overrides config)")
@click.option("--device", help="Inference device, e.g. cpu or cuda:0 (overrides config)")
@click.option(
    "--allow-unknown-labels",
    is_flag=True,
    help="Create folders for labels other than the configured classes",
)
@click.pass_context
def sort(
    ctx,
    input_dir: Optional[Path],
    output_dir: Optional[Path],
    model_name: Optional[str],
    device: Optional[str],
    allow_unknown_labels: bool,
):
    """
    Classify images in INPUT_DIR and move them into OUTPUT_DIR/<class>/.

    Directories not given on the command line are asked for interactively.
    """
    try:
        config = _load_config(ctx)
        if model_name:
            config.model.model_name = model_name
        if device:
            config.model.device = device
        if allow_unknown_labels:
            config.sorting.allow_unknown_labels = True
        _apply_logging(config)
    except (ValueError, OSError) as e:
        console.print(f"[bold red]✗ Configuration error:[/bold red] {e}")
        sys.exit(1)

    with SortWorker(config) as worker:
        # The model loads while directories are being chosen
        if input_dir is None:
            input_dir = _ask_directory("Input")
        if output_dir is None:
            output_dir = _ask_directory("Output")

        console.print(f"[green]✓[/green] Input directory:  {escape(str(input_dir))}")
        console.print(f"[green]✓[/green] Output directory: {escape(str(output_dir))}")

        status_text = (
            "Sorting images..."
            if worker.model_ready
            else f"Loading {config.model.model_name} and sorting images..."
        )
        try:
            with console.status(f"[cyan]{status_text}[/cyan]"):
                report = worker.submit(input_dir, output_dir).result()
        except SortError as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(e))}")
            sys.exit(1)
        except Exception as e:
            console.print(f"\n[bold red]✗ Sort failed:[/bold red] {escape(str(e))}")
            logger.exception("Sort command error")
            sys.exit(1)

    _print_report(report, config.sorting.class_labels)
    console.print("\n[bold green]✓ Completed:[/bold green] All files have been processed")


@cli.group(name="config")
def config_group():
    """Manage Picture Categorizer configuration."""
    pass


@config_group.command(name="show")
@click.pass_context
def config_show(ctx):
    """Display the effective configuration."""
    console.print("\n[bold cyan]Picture Categorizer Configuration[/bold cyan]\n")

    try:
        config_manager = ConfigManager(ctx.obj.get("config_path"))
        config = config_manager.load(create_if_missing=True)
    except ValueError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)

    console.print("[bold]Model:[/bold]")
    console.print(f"  Name: {config.model.model_name}")
    console.print(f"  Device: {config.model.device or 'auto'}")
    console.print(f"  Batch Size: {config.model.batch_size}")
    aliases = ", ".join(f"{k} -> {v}" for k, v in config.model.label_aliases.items())
    console.print(f"  Label Aliases: {aliases or '(none)'}")

    console.print("\n[bold]Sorting:[/bold]")
    console.print(f"  Class Folders: {', '.join(config.sorting.class_labels)}")
    console.print(f"  Extensions: {', '.join(config.sorting.allowed_extensions)}")
    console.print(f"  Unknown Labels: {'allowed' if config.sorting.allow_unknown_labels else 'skipped'}")
    console.print(f"  Max Image Size: {config.sorting.max_image_size}px")

    console.print("\n[bold]Logging:[/bold]")
    console.print(f"  Level: {config.logging.level}")
    console.print(f"  Log Dir: {config.logging.log_dir}")

    source = config_manager.source or "(built-in defaults)"
    console.print(f"\n[dim]Config file: {source}[/dim]")


@config_group.command(name="init")
@click.argument("path", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(path: Optional[Path], force: bool):
    """Write the default configuration to PATH (default: user config location)."""
    target = path or USER_CONFIG_PATH
    if target.exists() and not force:
        console.print(f"[yellow]⚠ {target} already exists (use --force to overwrite)[/yellow]")
        sys.exit(1)

    try:
        write_config(PictureCategorizerConfig(), target)
    except OSError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)

    console.print(f"✓ Created default configuration: [green]{target}[/green]")


if __name__ == "__main__":
    cli()
