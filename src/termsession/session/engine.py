"""The command-session engine.

A Session owns one input line, its log and its history cursor, and moves
between four interaction modes::

    INPUT --submit external--> EXECUTING --succeed(stream)--> FLASH
                                         --succeed(prompt)--> PROMPT
    EXECUTING | FLASH | PROMPT --finish / fail--> INPUT

Built-in commands and parse faults stay in INPUT.
"""

from __future__ import annotations

import functools
import html
import inspect
import logging
import threading
import webbrowser
from typing import Any, Callable, Iterable

from termsession.commands.builtins import BUILTIN_COMMANDS, help_entry
from termsession.commands.registry import CommandRegistry
from termsession.domain.models import (
    CharWidth,
    CommandDescriptor,
    CursorBox,
    EntryClass,
    EntryKind,
    ExecutingMode,
    FlashMode,
    InputMode,
    LayoutMetrics,
    LogEntry,
    PromptMode,
    SessionState,
    state_of,
)
from termsession.history.store import CommandHistory
from termsession.output.buffer import LogBuffer
from termsession.session.base import CommandHost
from termsession.session.interaction import FlashStream, PendingDispatch, PromptRequest
from termsession.text.metrics import TextMetrics

logger = logging.getLogger(__name__)

BuiltinHandler = Callable[["Session", list[str]], None]
SearchHandler = Callable[[list[CommandDescriptor], str], CommandDescriptor | None]
InputFilter = Callable[[str], str | None]

MASK_CHAR = "*"


def _open_url(url: str) -> None:
    webbrowser.open(url)


class Session:
    """One interactive terminal instance.

    Example usage::

        session = Session("main", host=MyHost())
        session.set_input("help")
        session.submit()
        for entry in session.log:
            render(entry)
    """

    def __init__(
        self,
        name: str,
        host: CommandHost,
        commands: Iterable[CommandDescriptor] = (),
        history: CommandHistory | None = None,
        metrics: TextMetrics | None = None,
        warn_limit: int = 200,
        context: str = "/termsession",
        formatter: Callable[[str], str] | None = None,
        url_opener: Callable[[str], Any] | None = None,
        search_handler: SearchHandler | None = None,
        auto_help: bool = True,
        screen_width: float = 700.0,
        screen_height: float = 500.0,
        content_padding: float = 40.0,
        sort_key: Callable[[CommandDescriptor], object] | None = None,
        input_filter: InputFilter | None = None,
        tab_handler: Callable[["Session"], Any] | None = None,
    ) -> None:
        self._name = name
        self._host = host
        self._registry = CommandRegistry(BUILTIN_COMMANDS)
        self._registry.register_all(commands, sort_key=sort_key)
        self._history = history if history is not None else CommandHistory()
        self._metrics = metrics or TextMetrics()
        self._log = LogBuffer(warn_limit=warn_limit)
        self._context = context
        self._formatter = formatter or html.escape
        self._url_opener = url_opener or _open_url
        self._search_handler = search_handler
        self._auto_help = auto_help
        self._screen_width = screen_width
        self._screen_height = screen_height
        self._content_padding = content_padding
        self._input_filter = input_filter
        self._tab_handler = tab_handler

        self._builtins: dict[str, BuiltinHandler] = {
            "help": Session._run_help,
            "clear": Session._run_clear,
            "open": Session._run_open,
        }
        self._mode: InputMode | ExecutingMode | FlashMode | PromptMode = InputMode()
        self._input = ""
        self._cursor = self._metrics.reset("")
        self._hint: CommandDescriptor | None = None
        self._pending: PendingDispatch | None = None
        self._request: FlashStream | PromptRequest | None = None
        self._fullscreen = False
        self._editor_open = False
        self._editor_value = ""
        self._editor_on_close: Callable[[str], Any] | None = None
        self._destroyed = False
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def host(self) -> CommandHost:
        return self._host

    @property
    def state(self) -> SessionState:
        return state_of(self._mode)

    @property
    def mode(self) -> InputMode | ExecutingMode | FlashMode | PromptMode:
        return self._mode

    @property
    def accepting_input(self) -> bool:
        return self.state is SessionState.INPUT

    @property
    def input(self) -> str:
        return self._input

    @property
    def cursor(self) -> CursorBox:
        return self._cursor

    @property
    def hint(self) -> CommandDescriptor | None:
        """Autocomplete suggestion for the current first token."""
        return self._hint

    @property
    def log(self) -> LogBuffer:
        return self._log

    @property
    def history(self) -> CommandHistory:
        return self._history

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def pending(self) -> PendingDispatch | None:
        return self._pending

    @property
    def is_fullscreen(self) -> bool:
        return self._fullscreen

    @property
    def text_editor_open(self) -> bool:
        return self._editor_open

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def line_width(self) -> float:
        return max(self._screen_width - self._content_padding, 0.0)

    # ------------------------------------------------------------------
    # Input editing
    # ------------------------------------------------------------------

    def set_input(self, text: str, cursor: int | None = None) -> None:
        """Replace the input line, as typing or pasting would."""
        with self._lock:
            if not self.accepting_input:
                logger.debug("Session %s ignoring input while %s", self._name, self.state.value)
                return
            if self._input_filter is not None:
                filtered = self._input_filter(text)
                if filtered is not None:
                    text = filtered
            self._input = text
            index = len(text) if cursor is None else min(max(cursor, 0), len(text))
            self._place_cursor(index)
            self._refresh_hint(text.split(" ")[0])

    def move_cursor_left(self) -> None:
        with self._lock:
            index = self._cursor.index
            if index > 0:
                index -= 1
            self._place_cursor(index)

    def move_cursor_right(self) -> None:
        with self._lock:
            index = self._cursor.index
            if index < len(self._input):
                index += 1
            self._place_cursor(index)

    def history_previous(self) -> str:
        with self._lock:
            if self.accepting_input:
                self._load_history(self._history.previous(self._input))
            return self._input

    def history_next(self) -> str:
        with self._lock:
            if self.accepting_input:
                self._load_history(self._history.next())
            return self._input

    def complete(self) -> bool:
        """Replace the input with the hinted command key."""
        with self._lock:
            if self._hint is None or not self.accepting_input:
                return False
            self._input = self._hint.key
            self._cursor = self._metrics.reset(self._input)
            return True

    def calibrate(self, narrow: float, wide: float, prompt_width: float | None = None) -> None:
        with self._lock:
            self._metrics.calibrate(narrow, wide, prompt_width)
            self._place_cursor(self._cursor.index)

    def resize(self, screen_width: float, screen_height: float) -> None:
        with self._lock:
            self._screen_width = screen_width
            self._screen_height = screen_height
            self._place_cursor(self._cursor.index)

    # ------------------------------------------------------------------
    # Submission and dispatch
    # ------------------------------------------------------------------

    def submit(self) -> None:
        """Echo, record and dispatch the current input line."""
        with self._lock:
            if not self.accepting_input:
                logger.debug("Session %s busy (%s), submit ignored", self._name, self.state.value)
                return
            command = self._input
            if not command.strip():
                return

            self._hint = None
            self._log.append(
                LogEntry(
                    kind=EntryKind.COMMAND_ECHO,
                    content=f"{self._context} > {self._formatter(command)}",
                )
            )
            self._history.push(command)

            try:
                self._host.before_parse(self._name, command.split(" ")[0], command)
                self.dispatch(command)
            except Exception as e:
                logger.error("Command %r failed in session %s: %s", command, self._name, e)
                self._log.append(
                    LogEntry(
                        kind=EntryKind.PLAIN,
                        category=EntryClass.ERROR,
                        content=f"{type(e).__name__}: {e}",
                        tag="error",
                    )
                )
                if self._pending is not None:
                    self._pending.cancel()
                self._finish()

    def dispatch(self, command_line: str) -> None:
        """Run a built-in or hand the line to the host."""
        with self._lock:
            tokens = command_line.split(" ")
            key = tokens[0]
            handler = self._builtins.get(key)
            if handler is not None:
                handler(self, tokens)
                self._finish()
                return
            self._dispatch_external(key, command_line)

    def execute(self, command_line: str) -> bool:
        """Inject a command line and submit it immediately."""
        with self._lock:
            if not self.accepting_input or not command_line.strip():
                return False
            self._input = command_line
            self.submit()
            return True

    def add_builtin(self, descriptor: CommandDescriptor, handler: BuiltinHandler) -> None:
        """Register an extra command executed inside the session."""
        with self._lock:
            self._registry.register(descriptor)
            self._builtins[descriptor.key] = handler

    def answer(self, text: str) -> None:
        """Submit an answer to the open prompt question."""
        with self._lock:
            mode = self._mode
            if not isinstance(mode, PromptMode) or mode.question is None:
                logger.debug("Session %s has no open question", self._name)
                return
            if mode.auto_echo:
                shown = MASK_CHAR * len(text) if mode.secret else text
                self._log.append(LogEntry(content=f"{mode.question}{shown}"))
            self._mode = PromptMode()
            if mode.callback is None:
                return
            try:
                mode.callback(text)
            except Exception as e:
                logger.error("Prompt callback failed in session %s: %s", self._name, e)
                self._log.append(
                    LogEntry(category=EntryClass.ERROR, content=f"{type(e).__name__}: {e}", tag="error")
                )

    # ------------------------------------------------------------------
    # Host-facing surface
    # ------------------------------------------------------------------

    def push(self, entries: Any, check: bool = True) -> None:
        """Append one entry (LogEntry, wire dict or string) or a list of them."""
        if entries is None:
            return
        with self._lock:
            if isinstance(entries, (list, tuple)):
                self._log.extend(entries, check=check)
            else:
                self._log.append(entries, check=check)

    def key_event(self, key: str) -> None:
        with self._lock:
            name = key.lower()
            if self.accepting_input and not self._editor_open:
                if name == "tab":
                    if self._tab_handler is None:
                        self.complete()
                    else:
                        self._tab_handler(self)
                elif name == "arrowup":
                    self.history_previous()
                elif name == "arrowdown":
                    self.history_next()
                elif name == "arrowleft":
                    self.move_cursor_left()
                elif name == "arrowright":
                    self.move_cursor_right()
                elif name == "enter":
                    self.submit()
            self._host.key_event(self._name, key)

    def chrome_click(self, target: str) -> None:
        with self._lock:
            if target == "fullscreen" and not self._fullscreen:
                self.toggle_fullscreen()
            elif target == "minscreen" and self._fullscreen:
                self.toggle_fullscreen()
            self._host.chrome_click(self._name, target)

    def toggle_fullscreen(self) -> bool:
        with self._lock:
            self._fullscreen = not self._fullscreen
            return self._fullscreen

    def set_fullscreen(self, value: bool) -> None:
        with self._lock:
            self._fullscreen = value

    def focus(self) -> str:
        """Which input should receive keyboard focus."""
        if self.state is SessionState.PROMPT:
            return "prompt"
        if self._editor_open:
            return "editor"
        return "command"

    def open_text_editor(self, content: str = "", on_close: Callable[[str], Any] | None = None) -> None:
        with self._lock:
            self._editor_open = True
            self._editor_value = content
            self._editor_on_close = on_close

    def edit_text(self, content: str) -> None:
        with self._lock:
            if self._editor_open:
                self._editor_value = content

    def close_text_editor(self) -> str | None:
        """Close the editor overlay and return its content."""
        with self._lock:
            if not self._editor_open:
                return None
            content = self._editor_value
            on_close = self._editor_on_close
            self._editor_open = False
            self._editor_value = ""
            self._editor_on_close = None
            if on_close is not None:
                on_close(content)
            return content

    def layout_metrics(self) -> LayoutMetrics:
        return LayoutMetrics(
            screen_width=self._screen_width,
            screen_height=self._screen_height,
            client_width=self.line_width,
            client_height=self._screen_height,
            char_width=CharWidth(narrow=self._metrics.narrow, wide=self._metrics.wide),
        )

    def start(self, initial_log: Iterable[Any] = ()) -> None:
        """Push the welcome log and announce the session to the host."""
        self.push(list(initial_log), check=False)
        self._host.after_init(self._name)

    def destroy(self) -> None:
        """Tear down; cancels any in-flight external command."""
        with self._lock:
            if self._destroyed:
                return
            self._destroyed = True
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
        self._host.after_destroy(self._name)
        logger.info("Session %s destroyed", self._name)

    def _set_name(self, name: str) -> None:
        self._name = name

    # ------------------------------------------------------------------
    # Built-in commands
    # ------------------------------------------------------------------

    def _run_help(self, args: list[str]) -> None:
        pattern = args[1] if len(args) > 1 and args[1] else None
        self._log.append(help_entry(self._registry, pattern))

    def _run_clear(self, args: list[str]) -> None:
        if len(args) == 1:
            self._log.clear()
        elif len(args) == 2 and args[1] == "history":
            self._history.clear()
            self._log.reset_guard()

    def _run_open(self, args: list[str]) -> None:
        if len(args) < 2 or not args[1]:
            raise ValueError("Usage: open <url>")
        url = args[1]
        if "://" not in url:
            url = "http://" + url
        self._url_opener(url)

    # ------------------------------------------------------------------
    # External command lifecycle
    # ------------------------------------------------------------------

    def _dispatch_external(self, key: str, command_line: str) -> None:
        self._mode = ExecutingMode(command_key=key, command_line=command_line)
        dispatch = PendingDispatch(
            key,
            command_line,
            lambda result: self._on_succeed(dispatch, result),
            lambda message: self._on_fail(dispatch, message),
        )
        self._pending = dispatch
        try:
            result = self._host.on_execute(key, command_line, dispatch.succeed, dispatch.fail, self._name)
        except Exception as e:
            logger.error("Host failed to execute %r: %s", command_line, e)
            dispatch.fail(str(e) or type(e).__name__)
            return
        if inspect.isawaitable(result):
            try:
                dispatch.attach(result)
            except RuntimeError as e:
                if inspect.iscoroutine(result):
                    result.close()
                dispatch.fail(f"Cannot run asynchronous command: {e}")

    def _is_current(self, dispatch: PendingDispatch) -> bool:
        if self._destroyed:
            return False
        if dispatch is not self._pending:
            logger.warning(
                "Session %s ignoring stale completion of %r", self._name, dispatch.command_line
            )
            return False
        return True

    def _on_succeed(self, dispatch: PendingDispatch, result: Any) -> None:
        with self._lock:
            if not self._is_current(dispatch):
                return
            if isinstance(result, FlashStream):
                self._mode = FlashMode()
                self._request = result
                result.bind(
                    functools.partial(self._on_flash_chunk, result),
                    functools.partial(self._on_request_finish, result),
                )
                return
            if isinstance(result, PromptRequest):
                self._mode = PromptMode()
                self._request = result
                result.bind(
                    functools.partial(self._on_prompt_ask, result),
                    functools.partial(self._on_request_finish, result),
                )
                return
            try:
                self.push(result)
            finally:
                self._finish()

    def _on_fail(self, dispatch: PendingDispatch, message: str | None) -> None:
        with self._lock:
            if not self._is_current(dispatch):
                return
            if message is not None:
                self._log.append(LogEntry(category=EntryClass.ERROR, content=message))
            self._finish()

    def _on_flash_chunk(self, stream: FlashStream, chunk: str) -> None:
        with self._lock:
            if stream is self._request and self.state is SessionState.FLASH:
                self._mode = FlashMode(content=chunk)

    def _on_prompt_ask(self, prompt: PromptRequest, options: PromptMode) -> None:
        with self._lock:
            if prompt is self._request and self.state is SessionState.PROMPT:
                self._mode = options

    def _on_request_finish(self, request: FlashStream | PromptRequest) -> None:
        with self._lock:
            if self._destroyed or request is not self._request:
                return
            if self.state in (SessionState.FLASH, SessionState.PROMPT):
                self._finish()

    def _finish(self) -> None:
        self._mode = InputMode()
        self._pending = None
        self._request = None
        self._input = ""
        self._cursor = self._metrics.reset("")
        self._hint = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _place_cursor(self, index: int) -> None:
        self._cursor = self._metrics.layout(self._input, index, self.line_width)

    def _load_history(self, text: str) -> None:
        self._input = text
        self._cursor = self._metrics.reset(text)
        self._refresh_hint(text.strip().split(" ")[0])

    def _refresh_hint(self, token: str) -> None:
        if not self._auto_help:
            return
        if self._search_handler is not None:
            self._hint = self._search_handler(self._registry.descriptors(), token)
        elif not token.strip():
            self._hint = None
        else:
            self._hint = self._registry.search(token)
