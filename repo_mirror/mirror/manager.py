"""
Mirror Manager — Sequences one mirror synchronization.

Decides from the filesystem whether this is a first run (clone) or a
refresh (pull, ensure "dest" remote, push) and runs the steps in order.
Any failure stops the run; nothing is rolled back and nothing is retried.
A later run re-enters at the pull step because the workspace now exists.

## Usage from other modules:

    from repo_mirror.mirror.config import MirrorSettings
    from repo_mirror.mirror.manager import MirrorSynchronizer

    settings = MirrorSettings.from_env().resolve_root()
    result = MirrorSynchronizer(settings).sync()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from . import git_sync
from .config import MirrorSettings
from .errors import WorkspaceProbeError
from .runner import CommandRunner, PathLike, Runner

logger = logging.getLogger(__name__)

ACTION_BOOTSTRAP = "bootstrap"
ACTION_REFRESH = "refresh"


@dataclass
class SyncResult:
    """What a successful sync did."""

    action: str  # bootstrap or refresh
    workspace: Path
    commands: List[List[str]] = field(default_factory=list)
    remote_added: bool = False

    @property
    def pushed(self) -> bool:
        return self.action == ACTION_REFRESH

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "workspace": str(self.workspace),
            "commands": [list(c) for c in self.commands],
            "remote_added": self.remote_added,
            "pushed": self.pushed,
        }


class _RecordingRunner:
    """Delegates to another runner and remembers every command it was given."""

    def __init__(self, inner: Runner):
        self.inner = inner
        self.commands: List[List[str]] = []

    def run(self, cwd: Optional[PathLike], command: str, *args: str) -> str:
        self.commands.append([command] + list(args))
        return self.inner.run(cwd, command, *args)


class MirrorSynchronizer:
    """
    Runs the clone-or-refresh state machine for one source repository.

    Holds no state between calls; the workspace on disk is the only memory.
    Not safe to run concurrently against the same workspace.
    """

    def __init__(self, settings: MirrorSettings, runner: Optional[Runner] = None):
        if settings.root is None:
            settings = settings.resolve_root()
        self.settings = settings
        self.runner = runner or CommandRunner()

    @property
    def workspace(self) -> Path:
        return self.settings.workspace

    def workspace_exists(self) -> bool:
        """
        True if the workspace path exists.

        Raises WorkspaceProbeError for any stat failure other than absence.
        """
        try:
            os.stat(self.workspace)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise WorkspaceProbeError(self.workspace, e) from e
        return True

    def sync(self) -> SyncResult:
        s = self.settings
        runner = _RecordingRunner(self.runner)

        if not self.workspace_exists():
            logger.info(
                f"[mirror] No workspace at {self.workspace}, cloning",
                extra={"workspace": str(self.workspace), "step": "probe"},
            )
            git_sync.clone_repo(runner, s.src, s.branch, self.workspace)
            return SyncResult(
                action=ACTION_BOOTSTRAP,
                workspace=self.workspace,
                commands=runner.commands,
            )

        git_sync.pull_repo(runner, s.branch, self.workspace, s.src)
        added = git_sync.ensure_dest_remote(runner, s.dest, self.workspace)
        git_sync.push_repo(runner, s.dest, s.branch, self.workspace)

        return SyncResult(
            action=ACTION_REFRESH,
            workspace=self.workspace,
            commands=runner.commands,
            remote_added=added,
        )


def sync_repo(
    src: str,
    dest: str,
    branch: str,
    root: PathLike,
    runner: Optional[Runner] = None,
) -> SyncResult:
    """Mirror ``branch`` of ``src`` to ``dest`` using a workspace under ``root``."""
    settings = MirrorSettings(src=src, dest=dest, branch=branch, root=Path(root))
    return MirrorSynchronizer(settings, runner).sync()
