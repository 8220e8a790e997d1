"""
CLI mirror commands — run a sync and inspect its configuration.

Usage:
    python -m repo_mirror.main sync --src URL --dest URL [--branch B] [--root DIR] [--json]
    python -m repo_mirror.main check-config [--json]
"""

from __future__ import annotations

import json
import logging
import os

import click

from ..mirror.config import (
    DEFAULT_BRANCH,
    ENV_DEST_REPO,
    ENV_ROOT_PATH,
    ENV_SRC_BRANCH,
    ENV_SRC_REPO,
)
from ..mirror.runner import CommandRunner, Runner, redact_url

logger = logging.getLogger(__name__)


def make_runner() -> Runner:
    """The command runner used by `sync`; swapped for a fake in tests."""
    return CommandRunner()


def _settings_options(func):
    """Attach the --src/--dest/--branch/--root options (env var fallbacks)."""
    options = [
        click.option("--src", envvar=ENV_SRC_REPO, help=f"The git repository to clone [${ENV_SRC_REPO}]"),
        click.option("--dest", envvar=ENV_DEST_REPO, help=f"The git repository to push [${ENV_DEST_REPO}]"),
        click.option(
            "--branch",
            envvar=ENV_SRC_BRANCH,
            default=DEFAULT_BRANCH,
            show_default=True,
            help=f"The git repository branch [${ENV_SRC_BRANCH}]",
        ),
        click.option(
            "--root",
            envvar=ENV_ROOT_PATH,
            type=click.Path(file_okay=False),
            help=f"The git saved directory path, a temp dir if unset [${ENV_ROOT_PATH}]",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.command("sync")
@_settings_options
@click.option("--json", "as_json", is_flag=True, help="Print the sync result as JSON")
@click.pass_context
def mirror_sync(ctx: click.Context, src, dest, branch, root, as_json: bool) -> None:
    """Clone the source on first run; afterwards pull and push to the destination."""
    from ..mirror.errors import MirrorError
    from ..mirror.manager import MirrorSynchronizer
    from ..validation import ConfigurationError, load_settings, validate_git_available

    try:
        settings = load_settings(src=src, dest=dest, branch=branch, root=root)
        validate_git_available()
    except ConfigurationError as e:
        click.secho(f"ERROR: {e}", fg="red", err=True)
        click.echo(ctx.get_help(), err=True)
        raise SystemExit(1)

    settings = settings.resolve_root()
    synchronizer = MirrorSynchronizer(settings, runner=make_runner())

    try:
        result = synchronizer.sync()
    except MirrorError as e:
        logger.error(f"FATAL: {e}", extra={"workspace": str(settings.workspace)})
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.pushed:
        click.secho(f"✓ Mirrored {settings.branch} to {settings.display_dest}", fg="green")
    else:
        click.secho(f"✓ Cloned {settings.branch} into {result.workspace}", fg="green")
        click.echo("  Nothing pushed on first run; the next run pushes to the destination.")


@click.command("check-config")
@_settings_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check_config(src, dest, branch, root, as_json: bool) -> None:
    """Show the resolved mirror configuration without running git."""
    import shutil

    from ..mirror.config import workspace_name

    git_path = shutil.which("git")
    workspace = None
    workspace_exists = None
    if src and root:
        workspace = os.path.join(root, workspace_name(src))
        workspace_exists = os.path.isdir(workspace)

    missing = [name for name, value in (("src", src), ("dest", dest)) if not value]
    if git_path is None:
        missing.append("git")

    result = {
        "src": redact_url(src) if src else None,
        "dest": redact_url(dest) if dest else None,
        "branch": branch,
        "root": root,
        "workspace": workspace,
        "workspace_exists": workspace_exists,
        "git": git_path,
        "missing": missing,
    }

    if as_json:
        click.echo(json.dumps(result, indent=2))
    else:
        click.echo("\n🔀 Mirror Configuration\n")
        click.echo(f"  Source:      {result['src'] or '—'}")
        click.echo(f"  Destination: {result['dest'] or '—'}")
        click.echo(f"  Branch:      {branch}")
        click.echo(f"  Root:        {root or '(temporary directory)'}")
        if workspace:
            state = "exists, next run pulls and pushes" if workspace_exists else "absent, next run clones"
            click.echo(f"  Workspace:   {workspace} ({state})")
        click.echo(f"  git:         {git_path or 'not found'}")
        click.echo()
        if missing:
            click.secho(f"Missing: {', '.join(missing)}", fg="red", bold=True)
        else:
            click.secho("Configuration OK", fg="green", bold=True)

    if missing:
        raise SystemExit(1)
