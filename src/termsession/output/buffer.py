"""Append-only log of display entries.

Entries are never reordered or mutated once appended. When the log grows
past ``warn_limit`` a single system warning is added for each multiple
of the limit the log size crosses.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping

from pydantic import ValidationError

from termsession.domain.models import EntryClass, EntryKind, LogEntry

logger = logging.getLogger(__name__)

# Older hosts send these kind names
LEGACY_KINDS = {
    "normal": EntryKind.PLAIN,
    "html": EntryKind.MARKUP,
    "json": EntryKind.STRUCTURED_DATA,
    "cmdLine": EntryKind.COMMAND_ECHO,
    "splitLine": EntryKind.SEPARATOR,
}

_VALID_KINDS = {kind.value for kind in EntryKind}


def coerce_entry(raw: LogEntry | Mapping[str, Any] | str) -> LogEntry:
    """Build a LogEntry, falling back to ``plain`` for unknown kinds."""
    if isinstance(raw, LogEntry):
        return raw
    if not isinstance(raw, Mapping):
        return LogEntry(content=raw if isinstance(raw, str) else str(raw))

    data = dict(raw)
    kind = data.pop("kind", None) or data.get("type")
    if isinstance(kind, EntryKind):
        kind = kind.value
    if kind in LEGACY_KINDS:
        kind = LEGACY_KINDS[kind].value
    elif kind not in _VALID_KINDS:
        logger.debug("Invalid log entry type %r, using plain", kind)
        kind = EntryKind.PLAIN.value
    data["type"] = kind

    try:
        return LogEntry.model_validate(data)
    except ValidationError as e:
        # Payload did not fit the declared kind
        logger.debug("Malformed log entry, rendering as plain: %s", e)
        return LogEntry(
            kind=EntryKind.PLAIN,
            category=EntryClass.NONE,
            content=str(data.get("content", "")),
            tag=data.get("tag") if isinstance(data.get("tag"), str) else None,
        )


class LogBuffer:
    """Ordered display entries for one session."""

    def __init__(self, warn_limit: int = 200) -> None:
        if warn_limit < 0:
            raise ValueError("warn_limit must be >= 0")
        self._entries: list[LogEntry] = []
        self._warn_limit = warn_limit
        self._warned_multiple = 0

    @property
    def warn_limit(self) -> int:
        return self._warn_limit

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(tuple(self._entries))

    def __getitem__(self, index: int) -> LogEntry:
        return self._entries[index]

    def since(self, index: int) -> list[LogEntry]:
        """Entries appended at or after position index."""
        return self._entries[max(index, 0):]

    def append(self, entry: LogEntry | dict[str, Any] | str, check: bool = True) -> LogEntry:
        coerced = coerce_entry(entry)
        self._entries.append(coerced)
        if check:
            self._check_overflow()
        return coerced

    def extend(
        self, entries: Iterable[LogEntry | dict[str, Any] | str], check: bool = True
    ) -> list[LogEntry]:
        """Append a batch; the overflow guard runs once for the whole batch."""
        added = [coerce_entry(entry) for entry in entries]
        self._entries.extend(added)
        if check:
            self._check_overflow()
        return added

    def clear(self) -> None:
        self._entries.clear()
        self._warned_multiple = 0

    def reset_guard(self) -> None:
        """Re-arm the overflow warning without dropping entries.

        The next checked append warns once if the log is still over the limit.
        """
        if self._warn_limit > 0:
            self._warned_multiple = max(len(self._entries) // self._warn_limit - 1, 0)

    def _check_overflow(self) -> None:
        limit = self._warn_limit
        count = len(self._entries)
        if limit <= 0 or count <= limit:
            return
        multiple = count // limit
        if multiple <= self._warned_multiple:
            return
        crossed = multiple - self._warned_multiple
        self._warned_multiple = multiple
        logger.info("Log size %d exceeded limit %d", count, limit)
        for _ in range(crossed):
            self._entries.append(
                LogEntry(
                    kind=EntryKind.PLAIN,
                    category=EntryClass.SYSTEM,
                    content=(
                        f"Terminal log count exceeded {count}/{limit}. If the log content "
                        "is too large, it may affect rendering performance. It is "
                        'recommended to execute the "clear" command to clear it.'
                    ),
                )
            )
