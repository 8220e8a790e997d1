"""
Repo Mirror — CLI Entry Point

Usage:
    python -m repo_mirror.main sync --src URL --dest URL [--branch B] [--root DIR]
    python -m repo_mirror.main check-config
"""

from __future__ import annotations

# Load .env file FIRST, before any option reads the environment
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from typing import Optional

import click

from .cli.mirror import check_config, mirror_sync
from .logging_config import setup_logging


@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR [$LOG_LEVEL]")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Log output format [$LOG_FORMAT]",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_format: Optional[str]) -> None:
    """Repo Mirror — Mirror one branch from a source remote to a destination remote."""
    setup_logging(level=log_level, format_type=log_format)
    ctx.ensure_object(dict)


cli.add_command(mirror_sync)
cli.add_command(check_config)


if __name__ == "__main__":
    cli()
