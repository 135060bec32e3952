"""
Command-line interface for winebuild.

Usage:
    winebuild
    winebuild -o ./out/wine-build.txz --patches ./lib/GPTK/redist/lib
    winebuild --config build.json --parallel -v
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TransferSpeedColumn,
)

from winebuild import __version__
from winebuild.errors import WineBuildError


console = Console(stderr=True)
logger = logging.getLogger("winebuild")


def setup_logging(verbose: bool) -> None:
    """Route winebuild log records to stderr through rich."""
    handler = RichHandler(console=console, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


@click.command()
@click.version_option(__version__)
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path),
              help="Where to write the archive (default: ./wine-build.txz)")
@click.option("--patches", type=click.Path(path_type=Path),
              help="Directory merged onto wine/lib (default: ./lib/GPTK/redist/lib)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON build configuration")
@click.option("--parallel", is_flag=True, default=False,
              help="Assemble Wine, DXVK and winetricks concurrently")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging")
def cli(
    output: Path | None,
    patches: Path | None,
    config_path: Path | None,
    parallel: bool,
    verbose: bool,
):
    """Build wine-build.txz from the latest Wine, MoltenVK, DXVK and winetricks."""
    from winebuild.config import BuildConfig
    from winebuild.pipeline import AssemblyPipeline

    setup_logging(verbose)

    try:
        config = BuildConfig.load(config_path) if config_path else BuildConfig()
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration {config_path}: {e}")
        sys.exit(1)

    overrides = {}
    if output:
        overrides["output"] = output
    if patches:
        overrides["patches_dir"] = patches
    config = config.model_copy(update=overrides).resolve_paths(Path.cwd())

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=console,
            transient=True,
        ) as progress:
            pipeline = AssemblyPipeline(config, progress=progress)
            archive = pipeline.run(parallel=parallel)
    except WineBuildError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    console.print(f"[green]✓[/green] {archive}")


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
