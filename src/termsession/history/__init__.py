"""Submitted-command history for termsession sessions."""

from termsession.history.store import CommandHistory, HistoryStore

__all__ = ["CommandHistory", "HistoryStore"]
