"""Host contract for terminal sessions.

A host resolves every command the session does not handle itself and
receives lifecycle notifications. Hosts may execute commands
synchronously, later from another callback, or as a coroutine.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Succeed = Callable[..., None]
Fail = Callable[..., None]


class CommandHost(ABC):
    """Abstract interface between a session and its embedding application.

    ``on_execute`` must eventually call exactly one of ``succeed`` or
    ``fail``. It may instead be a coroutine function, in which case the
    session runs it as a task and treats its return value as the
    ``succeed`` result and any exception as ``fail``.

    Example usage::

        class EchoHost(CommandHost):
            def on_execute(self, command_key, command_line, succeed, fail, session_name):
                succeed(LogEntry(content=command_line))
    """

    @abstractmethod
    def on_execute(
        self,
        command_key: str,
        command_line: str,
        succeed: Succeed,
        fail: Fail,
        session_name: str,
    ) -> Awaitable[Any] | None:
        """Run an external command.

        Args:
            command_key: First token of the command line.
            command_line: The full submitted line.
            succeed: Call with None, a LogEntry (or list), a FlashStream
                     or a PromptRequest.
            fail: Call with an error message, or with no argument for
                  the default message.
            session_name: Name of the submitting session.
        """
        ...

    def before_parse(self, session_name: str, command_key: str, command_line: str) -> None:
        """Called after a command is echoed and before it is dispatched."""

    def after_init(self, session_name: str) -> None:
        """Called once the session is registered and its initial log pushed."""

    def after_destroy(self, session_name: str) -> None:
        """Called after the session has been torn down."""

    def key_event(self, session_name: str, key: str) -> None:
        """Called for every key routed to the session."""

    def chrome_click(self, session_name: str, target: str) -> None:
        """Called when a window chrome button is clicked."""


class RejectingCommandHost(CommandHost):
    """Host with no external commands; every lookup fails."""

    def on_execute(
        self,
        command_key: str,
        command_line: str,
        succeed: Succeed,
        fail: Fail,
        session_name: str,
    ) -> None:
        fail(f"Unknown command: {command_key}")


class TerminalError(Exception):
    """Base class for termsession errors."""


class SessionNotFoundError(TerminalError):
    """Raised when no live session has the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No session named {name!r}")
        self.name = name


class DuplicateSessionError(TerminalError):
    """Raised when a session name is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Session {name!r} already exists")
        self.name = name
