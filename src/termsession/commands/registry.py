"""Command descriptor registry and autocomplete search.

Search ranks descriptors by where the typed text occurs in their key::

    score = 1000 * match_start + (len(query) - len(match)) + (len(key) - len(match))

Lower is better and 0 is an exact full-key match, which ends the scan.
Equal scores keep registry order.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, Iterator

from termsession.domain.models import CommandDescriptor

logger = logging.getLogger(__name__)

GROUP_PREFIX = ":"


def score(query: str, key: str) -> int | None:
    """Score how well query matches key, or None if it does not occur."""
    match = re.search(re.escape(query), key, re.IGNORECASE)
    if match is None:
        return None
    matched = match.end() - match.start()
    return match.start() * 1000 + (len(query) - matched) + (len(key) - matched)


def glob_pattern(pattern: str) -> re.Pattern[str]:
    """Compile an anchored, case-insensitive glob where only ``*`` is special."""
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE)


def group_filter(pattern: str | None) -> str | None:
    """Return the lowercased group name for a ``:group`` pattern."""
    if pattern and len(pattern) > 1 and pattern.startswith(GROUP_PREFIX):
        return pattern[1:].lower()
    return None


class CommandRegistry:
    """Ordered mapping of command key to descriptor.

    Registering an existing key replaces its descriptor in place.
    """

    def __init__(self, descriptors: Iterable[CommandDescriptor] = ()) -> None:
        self._commands: dict[str, CommandDescriptor] = {}
        self.register_all(descriptors)

    def register(self, descriptor: CommandDescriptor) -> None:
        if descriptor.key in self._commands:
            logger.debug("Overwriting command descriptor %s", descriptor.key)
        self._commands[descriptor.key] = descriptor

    def register_all(
        self,
        descriptors: Iterable[CommandDescriptor],
        sort_key: Callable[[CommandDescriptor], object] | None = None,
    ) -> None:
        items = list(descriptors)
        if sort_key is not None:
            items.sort(key=sort_key)
        for descriptor in items:
            self.register(descriptor)

    def unregister(self, key: str) -> CommandDescriptor | None:
        return self._commands.pop(key, None)

    def get(self, key: str) -> CommandDescriptor | None:
        return self._commands.get(key)

    def descriptors(self) -> list[CommandDescriptor]:
        return list(self._commands.values())

    def __contains__(self, key: object) -> bool:
        return key in self._commands

    def __iter__(self) -> Iterator[CommandDescriptor]:
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)

    def search(self, key: str | None) -> CommandDescriptor | None:
        """Best descriptor for a partially typed key.

        A ``:group`` query returns the first descriptor in that group.
        """
        if key is None or not key.strip():
            return None

        group = group_filter(key)
        if group is not None:
            for descriptor in self._commands.values():
                if descriptor.group and descriptor.group.lower() == group:
                    return descriptor
            return None

        best: CommandDescriptor | None = None
        best_score: int | None = None
        for descriptor in self._commands.values():
            if not descriptor.key:
                continue
            result = score(key, descriptor.key)
            if result is None:
                continue
            if result == 0:
                return descriptor
            # Strict comparison keeps the earliest descriptor on ties
            if best_score is None or result < best_score:
                best, best_score = descriptor, result
        return best

    def matching(self, pattern: str | None) -> list[CommandDescriptor]:
        """Descriptors selected by a help pattern (glob or ``:group``)."""
        group = group_filter(pattern)
        if group is not None:
            return [
                d for d in self._commands.values() if d.group and d.group.lower() == group
            ]
        regex = glob_pattern(pattern or "*")
        return [d for d in self._commands.values() if regex.match(d.key)]
