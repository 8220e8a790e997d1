"""
Git Sync — The individual git steps of a mirror run.

Each function issues exactly the git commands it names, in the
workspace it is given, and turns a CommandError into the error type
of its step. The destination is always registered as the remote "dest".
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Optional, Tuple

from .errors import CloneError, PullError, PushError, RemoteAddError
from .runner import CommandError, Runner, redact_url

logger = logging.getLogger(__name__)

GIT = "git"
DEST_REMOTE = "dest"
SOURCE_REMOTE = "origin"

# Output git prints from "remote show <name>" when <name> is not a
# configured remote: it falls back to treating the name as a URL.
_UNKNOWN_REMOTE_MARKERS = (
    f"'{DEST_REMOTE}' does not appear to be a git repository",
    f"No such remote '{DEST_REMOTE}'",
    f"no such remote '{DEST_REMOTE}'",
)


class RemoteBinding(enum.Enum):
    """Result of probing for the "dest" remote."""

    BOUND = "bound"
    UNBOUND = "unbound"
    PROBE_FAILED = "probe-failed"


def clone_repo(runner: Runner, src: str, branch: str, workspace: Path) -> None:
    """git clone -b <branch> <src> <workspace>, run from the current directory."""
    try:
        runner.run("", GIT, "clone", "-b", branch, src, str(workspace))
    except CommandError as e:
        raise CloneError(redact_url(src), workspace, e) from e
    logger.info(
        f"[mirror-git] Clone repository {workspace} from {redact_url(src)}",
        extra={"workspace": str(workspace), "step": "clone"},
    )


def pull_repo(runner: Runner, branch: str, workspace: Path, src: str = "") -> None:
    """git pull origin <branch>, inside the workspace."""
    try:
        runner.run(workspace, GIT, "pull", SOURCE_REMOTE, branch)
    except CommandError as e:
        raise PullError(branch, redact_url(src), e) from e
    logger.info(
        f"[mirror-git] Pull repository {workspace} from {redact_url(src) or SOURCE_REMOTE} "
        f"(branch is {branch})",
        extra={"workspace": str(workspace), "step": "pull"},
    )


def probe_dest_remote(runner: Runner, workspace: Path) -> Tuple[RemoteBinding, str]:
    """
    Check whether the "dest" remote is configured.

    Returns the binding state and the probe's captured output. A failed
    probe whose output does not say the remote is unknown is reported as
    PROBE_FAILED (e.g. the remote exists but could not be contacted).
    """
    try:
        output = runner.run(workspace, GIT, "remote", "show", DEST_REMOTE)
    except CommandError as e:
        if any(marker in e.output for marker in _UNKNOWN_REMOTE_MARKERS):
            return RemoteBinding.UNBOUND, e.output
        return RemoteBinding.PROBE_FAILED, e.output
    return RemoteBinding.BOUND, output


def _fetch_url(probe_output: str) -> Optional[str]:
    for line in probe_output.splitlines():
        line = line.strip()
        if line.startswith("Fetch URL:"):
            return line[len("Fetch URL:"):].strip()
    return None


def ensure_dest_remote(runner: Runner, dest: str, workspace: Path) -> bool:
    """
    Make sure the "dest" remote exists, adding it if needed.

    An existing binding is never modified, even when it points somewhere
    other than ``dest``. Returns True if the remote was added.
    """
    binding, output = probe_dest_remote(runner, workspace)

    if binding is RemoteBinding.BOUND:
        current = _fetch_url(output)
        if current is not None and current != dest:
            logger.warning(
                f"[mirror-git] Remote '{DEST_REMOTE}' points at {redact_url(current)}, "
                f"not {redact_url(dest)}; leaving it unchanged",
                extra={"workspace": str(workspace), "step": "remote"},
            )
        return False

    if binding is RemoteBinding.PROBE_FAILED:
        logger.warning(
            f"[mirror-git] Probe of remote '{DEST_REMOTE}' failed, assuming it is absent: "
            f"{output.strip()!r}",
            extra={"workspace": str(workspace), "step": "remote"},
        )

    try:
        runner.run(workspace, GIT, "remote", "add", DEST_REMOTE, dest)
    except CommandError as e:
        raise RemoteAddError(redact_url(dest), e) from e

    logger.info(
        f"[mirror-git] Adding remote: {DEST_REMOTE} → {redact_url(dest)}",
        extra={"workspace": str(workspace), "step": "remote"},
    )
    return True


def push_repo(runner: Runner, dest: str, branch: str, workspace: Path) -> None:
    """git push dest <branch>, inside the workspace."""
    try:
        runner.run(workspace, GIT, "push", DEST_REMOTE, branch)
    except CommandError as e:
        raise PushError(redact_url(dest), branch, e) from e
    logger.info(
        f"[mirror-git] Push repository {workspace} to {redact_url(dest)} (branch is {branch})",
        extra={"workspace": str(workspace), "step": "push"},
    )
