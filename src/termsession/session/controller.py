"""Top-level controller that manages session lifecycles.

The controller owns the session directory and the history store, builds
sessions from settings, and exposes the programmatic control surface by
session name.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Iterable

from termsession.config.settings import Settings
from termsession.domain.models import CommandDescriptor, LayoutMetrics
from termsession.history.store import HistoryStore
from termsession.session.base import CommandHost, RejectingCommandHost, SessionNotFoundError
from termsession.session.directory import SessionDirectory
from termsession.session.engine import InputFilter, SearchHandler, Session
from termsession.text.metrics import TextMetrics

logger = logging.getLogger(__name__)


class TerminalController:
    """Creates, addresses and tears down named sessions.

    Example usage::

        controller = TerminalController(settings, host_factory=MyHost)
        session = controller.create_session("main")
        controller.execute("main", "help")
        controller.destroy_session("main")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        host_factory: Callable[[], CommandHost] | None = None,
        commands: Iterable[CommandDescriptor] = (),
        url_opener: Callable[[str], Any] | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._host_factory = host_factory or RejectingCommandHost
        self._commands = list(commands)
        self._url_opener = url_opener
        self._directory = SessionDirectory()
        self._histories = HistoryStore()
        self._counter = itertools.count(1)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def directory(self) -> SessionDirectory:
        return self._directory

    @property
    def histories(self) -> HistoryStore:
        return self._histories

    def create_session(
        self,
        name: str | None = None,
        host: CommandHost | None = None,
        commands: Iterable[CommandDescriptor] | None = None,
        formatter: Callable[[str], str] | None = None,
        search_handler: SearchHandler | None = None,
        sort_key: Callable[[CommandDescriptor], object] | None = None,
        initial_log: Iterable[Any] | None = None,
        input_filter: InputFilter | None = None,
        tab_handler: Callable[[Session], Any] | None = None,
    ) -> Session:
        """Build, register and start a session.

        Raises:
            DuplicateSessionError: If name is already in use.
        """
        name = name or self._generate_name()
        metrics_cfg = self._settings.metrics
        session_cfg = self._settings.session
        session = Session(
            name,
            host=host or self._host_factory(),
            commands=self._commands if commands is None else commands,
            history=self._histories.get(name),
            metrics=TextMetrics.from_config(metrics_cfg),
            warn_limit=session_cfg.warn_limit,
            context=session_cfg.context,
            formatter=formatter,
            url_opener=self._url_opener,
            search_handler=search_handler,
            auto_help=session_cfg.auto_help,
            screen_width=metrics_cfg.screen_width,
            screen_height=metrics_cfg.screen_height,
            content_padding=metrics_cfg.content_padding,
            sort_key=sort_key,
            input_filter=input_filter,
            tab_handler=tab_handler,
        )
        self._directory.register(session)
        session.start(session_cfg.initial_log if initial_log is None else initial_log)
        logger.info("Session %s created", name)
        return session

    def destroy_session(self, name: str) -> None:
        session = self._directory.unregister(name)
        if session is None:
            raise SessionNotFoundError(name)
        session.destroy()

    def rename(self, old: str, new: str) -> Session:
        session = self._directory.rename(old, new)
        if old != new:
            self._histories.rename(old, new)
        return session

    def get(self, name: str) -> Session:
        session = self._directory.get(name)
        if session is None:
            raise SessionNotFoundError(name)
        return session

    def names(self) -> list[str]:
        return self._directory.names()

    def broadcast(self, entries: Any) -> int:
        """Push entries to every live session."""
        return self._directory.broadcast(lambda session: session.push(entries))

    def shutdown(self) -> None:
        for name in self._directory.names():
            self.destroy_session(name)

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def push(self, name: str, entries: Any) -> None:
        self.get(name).push(entries)

    def execute(self, name: str, command_line: str) -> bool:
        return self.get(name).execute(command_line)

    def focus(self, name: str) -> str:
        return self.get(name).focus()

    def fullscreen(self, name: str) -> bool:
        return self.get(name).toggle_fullscreen()

    def is_fullscreen(self, name: str) -> bool:
        return self.get(name).is_fullscreen

    def layout_metrics(self, name: str) -> LayoutMetrics:
        return self.get(name).layout_metrics()

    def text_editor_open(
        self, name: str, content: str = "", on_close: Callable[[str], Any] | None = None
    ) -> None:
        self.get(name).open_text_editor(content, on_close)

    def text_editor_close(self, name: str) -> str | None:
        return self.get(name).close_text_editor()

    def control(self, name: str, message_type: str, payload: Any = None) -> Any:
        """Dispatch a control message by type.

        Unsupported types are logged and ignored.

        Raises:
            SessionNotFoundError: If no session has that name.
        """
        session = self.get(name)
        options = payload if isinstance(payload, dict) else {}
        if message_type == "push":
            return session.push(payload)
        if message_type == "execute":
            return session.execute(payload or "")
        if message_type == "focus":
            return session.focus()
        if message_type == "fullscreen":
            return session.toggle_fullscreen()
        if message_type == "is_fullscreen":
            return session.is_fullscreen
        if message_type == "metrics":
            return session.layout_metrics()
        if message_type == "text_editor_open":
            on_close = options.get("on_close")
            return session.open_text_editor(
                options.get("content", ""), on_close if callable(on_close) else None
            )
        if message_type == "text_editor_close":
            return session.close_text_editor()
        logger.error("Unsupported control message type: %s", message_type)
        return None

    def _generate_name(self) -> str:
        while True:
            name = f"terminal_{next(self._counter)}"
            if name not in self._directory:
                return name
