"""Command host that runs external commands through the system shell.

The session engine never times out an external command; this host adds
an optional timeout on top of it.
"""

from __future__ import annotations

import asyncio
import logging
import re

from termsession.config.settings import ShellConfig
from termsession.domain.models import EntryKind, LogEntry
from termsession.session.base import CommandHost, Fail, Succeed

logger = logging.getLogger(__name__)

_ANSI_PATTERNS = [
    re.compile(r"\x1b\[[0-9;?]*[a-zA-Z]"),  # CSI sequences
    re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"),  # OSC sequences
    re.compile(r"\x1b[()][AB012]"),
    re.compile(r"\x1b[>=]"),
    re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]"),
]


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences and stray control characters."""
    for pattern in _ANSI_PATTERNS:
        text = pattern.sub("", text)
    return text.replace("\r\n", "\n").replace("\r", "\n")


class ShellCommandHost(CommandHost):
    """Executes each command line with ``/bin/sh`` (or a configured shell).

    Output is returned as a single ``code`` entry. A non-zero exit status
    or a timeout fails the command with the captured output.
    """

    def __init__(
        self,
        executable: str | None = None,
        timeout: float | None = 30.0,
        cwd: str | None = None,
    ) -> None:
        self._executable = executable
        self._timeout = timeout
        self._cwd = cwd

    @classmethod
    def from_config(cls, config: ShellConfig) -> ShellCommandHost:
        return cls(executable=config.executable, timeout=config.timeout)

    async def on_execute(
        self,
        command_key: str,
        command_line: str,
        succeed: Succeed,
        fail: Fail,
        session_name: str,
    ) -> LogEntry | None:
        output = await self.run(command_line)
        if not output.strip():
            return None
        return LogEntry(kind=EntryKind.CODE, content=output.rstrip("\n"))

    async def run(self, command_line: str) -> str:
        """Run command_line and return its combined stdout/stderr.

        Raises:
            ShellCommandError: On non-zero exit or timeout.
        """
        logger.debug("Running shell command: %s", command_line)
        process = await asyncio.create_subprocess_shell(
            command_line,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            executable=self._executable,
            cwd=self._cwd,
        )
        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ShellCommandError(f"Command timed out after {self._timeout}s") from None
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        output = strip_ansi(stdout.decode("utf-8", errors="replace"))
        if process.returncode != 0:
            raise ShellCommandError(
                output.strip() or f"Command exited with status {process.returncode}",
                exit_code=process.returncode,
            )
        return output


class ShellCommandError(Exception):
    """Raised when a shell command fails or times out."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code
