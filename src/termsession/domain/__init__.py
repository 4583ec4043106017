"""Domain models for termsession.

This package contains the core data structures, enumerations, and value
objects used throughout the system. All models use Pydantic v2 for
validation and serialization.
"""

from termsession.domain.models import (
    CharWidth,
    CommandDescriptor,
    CommandExample,
    CursorBox,
    EntryClass,
    EntryKind,
    ExecutingMode,
    FlashMode,
    InputMode,
    InteractionMode,
    LayoutMetrics,
    LogEntry,
    PromptMode,
    SessionState,
    TableContent,
    state_of,
)

__all__ = [
    "CharWidth",
    "CommandDescriptor",
    "CommandExample",
    "CursorBox",
    "EntryClass",
    "EntryKind",
    "ExecutingMode",
    "FlashMode",
    "InputMode",
    "InteractionMode",
    "LayoutMetrics",
    "LogEntry",
    "PromptMode",
    "SessionState",
    "TableContent",
    "state_of",
]
