"""
Shared fixtures for mirror tests.

FakeRunner stands in for the git executable: it records every call and
answers from a table keyed on the first two git arguments, so tests can
make any single step fail without touching a real repository.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple, Union

import pytest

from repo_mirror.mirror.runner import CommandError

UNKNOWN_DEST_OUTPUT = (
    "fatal: 'dest' does not appear to be a git repository\n"
    "fatal: Could not read from remote repository.\n"
)


def git_error(*args: str, output: str = "", returncode: int = 1) -> CommandError:
    """Build the CommandError a failed git call would raise."""
    return CommandError("git", list(args), output=output, returncode=returncode)


Response = Union[str, BaseException]


class FakeRunner:
    """Records calls; responds by (args[0], args[1]) lookup."""

    def __init__(self, responses: Optional[Dict[Tuple[str, str], Response]] = None):
        self.calls: List[Tuple[str, str, List[str]]] = []
        self.responses = dict(responses or {})

    def run(self, cwd, command, *args):
        self.calls.append((str(cwd) if cwd else "", command, list(args)))
        response = self.responses.get(tuple(args[:2]))
        if isinstance(response, BaseException):
            raise response
        return response or ""

    @property
    def steps(self) -> List[Tuple[str, ...]]:
        """The first two git arguments of each call, e.g. ("pull", "origin")."""
        return [tuple(args[:2]) for _, _, args in self.calls]


class RemoteTrackingRunner(FakeRunner):
    """FakeRunner that remembers which remotes were added."""

    def __init__(self, remotes: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(**kwargs)
        self.remotes = dict(remotes or {})

    def run(self, cwd, command, *args):
        if tuple(args[:2]) == ("remote", "show"):
            self.calls.append((str(cwd) if cwd else "", command, list(args)))
            name = args[2]
            if name not in self.remotes:
                raise git_error(*args, output=UNKNOWN_DEST_OUTPUT, returncode=128)
            url = self.remotes[name]
            return f"* remote {name}\n  Fetch URL: {url}\n  Push  URL: {url}\n"
        if tuple(args[:2]) == ("remote", "add"):
            self.calls.append((str(cwd) if cwd else "", command, list(args)))
            name, url = args[2], args[3]
            if name in self.remotes:
                raise git_error(*args, output=f"error: remote {name} already exists.\n", returncode=3)
            self.remotes[name] = url
            return ""
        return super().run(cwd, command, *args)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def remote_runner() -> RemoteTrackingRunner:
    return RemoteTrackingRunner()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove GIT_* mirror variables the developer may have exported."""
    for name in ("GIT_SRC_REPO", "GIT_DEST_REPO", "GIT_SRC_BRANCH", "GIT_ROOT_PATH", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
