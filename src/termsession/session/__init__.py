"""Session engine for termsession.

Public API:
    Session -- One interactive terminal instance
    CommandHost -- Abstract host contract for external commands
    FlashStream / PromptRequest -- Interaction requests returned via succeed()
    TerminalController -- Owns the session directory and history store
"""

from termsession.session.base import (
    CommandHost,
    DuplicateSessionError,
    RejectingCommandHost,
    SessionNotFoundError,
    TerminalError,
)
from termsession.session.controller import TerminalController
from termsession.session.directory import SessionDirectory
from termsession.session.engine import Session
from termsession.session.interaction import (
    DEFAULT_FAIL_MESSAGE,
    FlashStream,
    PendingDispatch,
    PromptRequest,
)

__all__ = [
    "CommandHost",
    "DEFAULT_FAIL_MESSAGE",
    "DuplicateSessionError",
    "FlashStream",
    "PendingDispatch",
    "PromptRequest",
    "RejectingCommandHost",
    "Session",
    "SessionDirectory",
    "SessionNotFoundError",
    "TerminalController",
    "TerminalError",
]
