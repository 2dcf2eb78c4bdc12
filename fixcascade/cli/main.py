"""Root command for the fixcascade CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import click

from .. import __version__
from ..config import PatternsConfig, load_config
from ..exceptions import ConfigError


@dataclass
class CLIContext:
    """Shared state handed to every subcommand via ctx.obj."""

    project_dir: Path
    config: PatternsConfig


@click.group()
@click.version_option(__version__, prog_name="fixcascade")
@click.option(
    "--project",
    "project_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root. Defaults to current directory.",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file. Defaults to <project>/.fixcascade/config.toml if present.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    project_dir: Path | None,
    config_file: Path | None,
    verbose: bool,
) -> None:
    """Learn which validation errors follow each other and warn about them."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    root = (project_dir or Path.cwd()).resolve()
    try:
        config = load_config(config_file, project_dir=root)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    ctx.obj = CLIContext(project_dir=root, config=config)
