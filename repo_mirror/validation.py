"""
Validation — Startup checks run before any sync begins.

## Usage

    from repo_mirror.validation import load_settings, validate_git_available

    try:
        validate_git_available()
        settings = load_settings(src=..., dest=...)
    except ConfigurationError as e:
        print(f"Configuration invalid: {e}")
"""

from __future__ import annotations

import shutil
from typing import Dict, List, Optional

import pydantic

from .mirror.config import ENV_DEST_REPO, ENV_SRC_BRANCH, ENV_SRC_REPO, MirrorSettings

# Flag / environment variable pairs, for error messages
_FIELD_SOURCES = {
    "src": f"--src or ${ENV_SRC_REPO}",
    "dest": f"--dest or ${ENV_DEST_REPO}",
    "branch": f"--branch or ${ENV_SRC_BRANCH}",
}


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


def validate_git_available(executable: str = "git") -> str:
    """
    Check that the git executable is on PATH.

    Returns the resolved path.

    Raises:
        ConfigurationError: If git cannot be found
    """
    path = shutil.which(executable)
    if path is None:
        raise ConfigurationError(f"{executable} executable not found in PATH")
    return path


def load_settings(**overrides) -> MirrorSettings:
    """
    Build MirrorSettings from the environment plus overrides.

    Pydantic validation errors are reported as a ConfigurationError naming
    the flag/environment variable that must be provided.
    """
    try:
        return MirrorSettings.from_env(**overrides)
    except pydantic.ValidationError as e:
        problems: List[str] = []
        details = []
        for err in e.errors():
            name = str(err["loc"][0]) if err.get("loc") else "settings"
            source = _FIELD_SOURCES.get(name, name)
            if "empty" in err["msg"]:
                problems.append(f"{source} must be provided")
            else:
                problems.append(f"{source}: {err['msg']}")
            details.append({"field": name, "msg": err["msg"]})
        raise ConfigurationError("; ".join(problems), details={"errors": details}) from e
