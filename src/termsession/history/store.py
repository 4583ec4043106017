"""Per-session command history with a navigable cursor.

The cursor lives in ``[0, len(log)]``; ``len(log)`` means no entry is
selected and the user is editing fresh input.
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class CommandHistory:
    """Ordered log of commands submitted in one session."""

    def __init__(self, commands: list[str] | None = None) -> None:
        self._log: list[str] = list(commands or [])
        self._cursor = len(self._log)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def commands(self) -> list[str]:
        return list(self._log)

    def __len__(self) -> int:
        return len(self._log)

    def push(self, text: str) -> None:
        """Append a submitted command and move the cursor past the end."""
        if not text:
            return
        self._log.append(text)
        self._cursor = len(self._log)

    def previous(self, current: str) -> str:
        """Step back one entry.

        Returns ``current`` unchanged when there is nothing older.
        """
        if self._log and self._cursor > 0:
            self._cursor -= 1
            return self._log[self._cursor]
        return current

    def next(self) -> str:
        """Step forward one entry, or return "" once past the newest."""
        if self._log and self._cursor < len(self._log) - 1:
            self._cursor += 1
            return self._log[self._cursor]
        self._cursor = len(self._log)
        return ""

    def clear(self) -> None:
        self._log.clear()
        self._cursor = 0


class HistoryStore:
    """Histories keyed by session name.

    Outlives individual sessions so that a terminal recreated under the
    same name sees its earlier commands.
    """

    def __init__(self) -> None:
        self._histories: dict[str, CommandHistory] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> CommandHistory:
        with self._lock:
            history = self._histories.get(name)
            if history is None:
                history = CommandHistory()
                self._histories[name] = history
            return history

    def rename(self, old: str, new: str) -> None:
        with self._lock:
            history = self._histories.pop(old, None)
            if history is not None:
                self._histories[new] = history
                logger.debug("Moved history %s -> %s", old, new)

    def discard(self, name: str) -> None:
        with self._lock:
            self._histories.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._histories
