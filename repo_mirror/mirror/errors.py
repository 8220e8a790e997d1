"""
Mirror Errors — One exception per step of the synchronization.

Each error wraps the underlying cause (usually a CommandError) and
keeps the captured command output so the caller can show git's own
explanation of what went wrong.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .runner import CommandError


class MirrorError(Exception):
    """Base class for synchronization failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(self._format_message())

    @property
    def output(self) -> str:
        """Captured output of the failed command, if any."""
        if isinstance(self.cause, CommandError):
            return self.cause.output
        return ""

    def _format_message(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class WorkspaceProbeError(MirrorError):
    """The workspace path could not be inspected (other than not existing)."""

    def __init__(self, workspace: Path, cause: OSError):
        self.workspace = workspace
        super().__init__(f"error checking if repo exists: {str(workspace)!r}", cause)


class CloneError(MirrorError):
    def __init__(self, src: str, workspace: Path, cause: BaseException):
        self.src = src
        self.workspace = workspace
        super().__init__(f"failure to clone {src} into {workspace}", cause)


class PullError(MirrorError):
    def __init__(self, branch: str, src: str, cause: BaseException):
        self.branch = branch
        self.src = src
        super().__init__(f"failure to pull {branch} from {src or 'origin'}", cause)


class RemoteAddError(MirrorError):
    def __init__(self, dest: str, cause: BaseException):
        self.dest = dest
        super().__init__("failure to add remote repository", cause)


class PushError(MirrorError):
    def __init__(self, dest: str, branch: str, cause: BaseException):
        self.dest = dest
        self.branch = branch
        super().__init__(f"failure to push {branch} to {dest}", cause)
