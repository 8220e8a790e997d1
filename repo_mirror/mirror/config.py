"""
Mirror Configuration — The four values a sync needs.

Built once at startup (from CLI flags or GIT_* environment variables)
and handed to the synchronizer; nothing reads process-wide state after
that point.

Environment:
    GIT_SRC_REPO=https://github.com/org/repo     (required)
    GIT_DEST_REPO=https://mirror.example/org/repo (required)
    GIT_SRC_BRANCH=master                         (default: master)
    GIT_ROOT_PATH=/var/lib/mirror                 (default: fresh temp dir)
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .runner import redact_url

logger = logging.getLogger(__name__)

ENV_SRC_REPO = "GIT_SRC_REPO"
ENV_DEST_REPO = "GIT_DEST_REPO"
ENV_SRC_BRANCH = "GIT_SRC_BRANCH"
ENV_ROOT_PATH = "GIT_ROOT_PATH"

DEFAULT_BRANCH = "master"


def workspace_name(src: str) -> str:
    """
    Derive the workspace directory name from a repository reference.

    This is everything after the last "/", e.g.
    "https://example.com/org/myrepo" -> "myrepo".
    """
    return src[src.rfind("/") + 1:]


class MirrorSettings(BaseModel):
    """Source, destination, branch and local root for one mirror."""

    model_config = ConfigDict(frozen=True)

    src: str
    dest: str
    branch: str = DEFAULT_BRANCH
    root: Optional[Path] = Field(default=None)

    @field_validator("src", "dest", "branch")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("src")
    @classmethod
    def _has_workspace_name(cls, value: str) -> str:
        if not workspace_name(value):
            raise ValueError(f"cannot derive a workspace name from {value!r}")
        return value

    @field_validator("root", mode="before")
    @classmethod
    def _blank_root_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_env(cls, **overrides) -> "MirrorSettings":
        """
        Build settings from GIT_* environment variables.

        Keyword overrides that are not None win over the environment.
        """
        values = {
            "src": os.environ.get(ENV_SRC_REPO, ""),
            "dest": os.environ.get(ENV_DEST_REPO, ""),
            "branch": os.environ.get(ENV_SRC_BRANCH) or DEFAULT_BRANCH,
            "root": os.environ.get(ENV_ROOT_PATH) or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def name(self) -> str:
        return workspace_name(self.src)

    @property
    def workspace(self) -> Path:
        """Local working copy path: root / name."""
        if self.root is None:
            raise ValueError("root is not set; call resolve_root() first")
        return self.root / self.name

    @property
    def display_dest(self) -> str:
        return redact_url(self.dest)

    def resolve_root(self) -> "MirrorSettings":
        """Return settings with a fresh temporary root if none was given."""
        if self.root is not None:
            return self
        root = Path(tempfile.mkdtemp())
        logger.info(f"[mirror] Directory: {root}")
        return self.model_copy(update={"root": root})
