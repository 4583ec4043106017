"""Name to live-session directory used for host-initiated addressing."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Callable

from termsession.session.base import DuplicateSessionError, SessionNotFoundError

if TYPE_CHECKING:
    from termsession.session.engine import Session

logger = logging.getLogger(__name__)


class SessionDirectory:
    """Registry of live sessions keyed by their unique name."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def register(self, session: Session) -> None:
        with self._lock:
            if session.name in self._sessions:
                raise DuplicateSessionError(session.name)
            self._sessions[session.name] = session
        logger.debug("Registered session %s", session.name)

    def unregister(self, name: str) -> Session | None:
        with self._lock:
            session = self._sessions.pop(name, None)
        if session is not None:
            logger.debug("Unregistered session %s", name)
        return session

    def rename(self, old: str, new: str) -> Session:
        with self._lock:
            session = self._sessions.get(old)
            if session is None:
                raise SessionNotFoundError(old)
            if new == old:
                return session
            if new in self._sessions:
                raise DuplicateSessionError(new)
            del self._sessions[old]
            session._set_name(new)
            self._sessions[new] = session
        logger.info("Renamed session %s -> %s", old, new)
        return session

    def get(self, name: str) -> Session | None:
        with self._lock:
            return self._sessions.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def broadcast(self, action: Callable[[Session], object]) -> int:
        """Apply action to every live session; returns how many were visited."""
        with self._lock:
            sessions = list(self._sessions.values())
        for session in sessions:
            action(session)
        return len(sessions)

    def __contains__(self, name: object) -> bool:
        return name in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
