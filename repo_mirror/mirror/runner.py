"""
Command Runner — Run one external command and capture its output.

stdout and stderr are merged into a single stream so that git's
human-readable diagnostics survive into the error raised on failure.
Output is decoded as UTF-8; undecodable bytes (hook messages, Latin-1
refs) become U+FFFD rather than failing the call.
There is no retry and no timeout: a hung command hangs the caller.
"""

from __future__ import annotations

import logging
import subprocess
import urllib.parse
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def redact_url(url: str) -> str:
    """Hide the password/token part of a URL for display."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return url
    if not parts.password:
        return url
    userinfo, _, hostport = parts.netloc.rpartition("@")
    username = userinfo.partition(":")[0]
    netloc = f"{username}:***@{hostport}"
    return urllib.parse.urlunsplit(parts._replace(netloc=netloc))


class CommandError(Exception):
    """Raised when a command cannot be launched or exits non-zero."""

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        output: str = "",
        returncode: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        self.command = command
        self.args_list = list(args)
        self.output = output
        self.returncode = returncode
        self.cause = cause
        super().__init__(self._format_message())

    @property
    def command_line(self) -> str:
        """The command as typed, with URL credentials hidden."""
        return " ".join([self.command] + [redact_url(a) for a in self.args_list])

    def _format_message(self) -> str:
        if self.cause is not None:
            reason = str(self.cause)
        else:
            reason = f"exit status {self.returncode}"
        message = f"error running command: {self.command_line}: {reason}"
        if self.output.strip():
            message += f": {self.output.strip()!r}"
        return message


class Runner(Protocol):
    """Anything that can run a named command in a working directory."""

    def run(self, cwd: Optional[PathLike], command: str, *args: str) -> str:
        ...


class CommandRunner:
    """
    Runs commands as blocking subprocesses.

    An empty or None ``cwd`` runs in the caller's current directory.
    The caller's environment is inherited unchanged.
    """

    def run(self, cwd: Optional[PathLike], command: str, *args: str) -> str:
        cmd = [command] + list(args)
        workdir = str(cwd) if cwd else None
        shown = " ".join([command] + [redact_url(a) for a in args])

        logger.debug(f"[runner] {shown} (cwd={workdir or '.'})")

        try:
            result = subprocess.run(
                cmd,
                cwd=workdir,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise CommandError(command, args, cause=e) from e

        if result.returncode != 0:
            raise CommandError(
                command,
                args,
                output=result.stdout or "",
                returncode=result.returncode,
            )

        return result.stdout or ""
