"""Interaction requests a host can hand back from ``succeed``.

``FlashStream`` is a push channel of display-only chunks closed by
``finish()``. ``PromptRequest`` asks one or more questions and is closed
the same way. Both buffer whatever the host sends before the session
binds to them. ``PendingDispatch`` is the session's handle on one
in-flight external command.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from typing import Any, Awaitable, Callable

from termsession.domain.models import PromptMode

logger = logging.getLogger(__name__)

DEFAULT_FAIL_MESSAGE = "Failed to execute."


class FlashStream:
    """Incremental output that replaces itself on screen.

    Example usage::

        stream = FlashStream()
        succeed(stream)
        for pct in range(0, 101, 10):
            stream.push(f"downloading {pct}%")
        stream.finish()
    """

    def __init__(self) -> None:
        self._pending: deque[str] = deque()
        self._finished = False
        self._on_chunk: Callable[[str], None] | None = None
        self._on_finish: Callable[[], None] | None = None

    @property
    def finished(self) -> bool:
        return self._finished

    def push(self, chunk: str) -> None:
        if self._finished:
            raise RuntimeError("FlashStream already finished")
        if self._on_chunk is None:
            self._pending.append(chunk)
        else:
            self._on_chunk(chunk)

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        if self._on_finish is not None:
            self._on_finish()

    def bind(self, on_chunk: Callable[[str], None], on_finish: Callable[[], None]) -> None:
        """Attach the consuming session and replay buffered chunks."""
        if self._on_chunk is not None:
            raise RuntimeError("FlashStream is already bound")
        self._on_chunk = on_chunk
        self._on_finish = on_finish
        while self._pending:
            on_chunk(self._pending.popleft())
        if self._finished:
            on_finish()


class PromptRequest:
    """A blocking, possibly multi-turn question and answer exchange.

    Example usage::

        prompt = PromptRequest()
        succeed(prompt)
        prompt.ask("Password: ", on_password, secret=True, auto_echo=True)
        ...
        prompt.finish()
    """

    def __init__(self) -> None:
        self._pending: PromptMode | None = None
        self._finished = False
        self._on_ask: Callable[[PromptMode], None] | None = None
        self._on_finish: Callable[[], None] | None = None

    @property
    def finished(self) -> bool:
        return self._finished

    def ask(
        self,
        question: str,
        callback: Callable[[str], Any],
        secret: bool = False,
        auto_echo: bool = False,
    ) -> None:
        if self._finished:
            raise RuntimeError("PromptRequest already finished")
        options = PromptMode(
            question=question, secret=secret, auto_echo=auto_echo, callback=callback
        )
        if self._on_ask is None:
            if self._pending is not None:
                raise RuntimeError("PromptRequest already has an unanswered question")
            self._pending = options
        else:
            self._on_ask(options)

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        if self._on_finish is not None:
            self._on_finish()

    def bind(self, on_ask: Callable[[PromptMode], None], on_finish: Callable[[], None]) -> None:
        if self._on_ask is not None:
            raise RuntimeError("PromptRequest is already bound")
        self._on_ask = on_ask
        self._on_finish = on_finish
        if self._pending is not None:
            options, self._pending = self._pending, None
            on_ask(options)
        if self._finished:
            on_finish()


class PendingDispatch:
    """An external command awaiting its single completion.

    ``succeed`` and ``fail`` are handed to the host. Only the first call
    to either is honoured. Asynchronous hosts are tracked as a future that
    ``cancel()`` stops on session teardown.
    """

    def __init__(
        self,
        command_key: str,
        command_line: str,
        on_succeed: Callable[[Any], None],
        on_fail: Callable[[str | None], None],
    ) -> None:
        self.command_key = command_key
        self.command_line = command_line
        self._on_succeed = on_succeed
        self._on_fail = on_fail
        self._done = False
        self._task: asyncio.Future[Any] | None = None
        self._lock = threading.Lock()

    @property
    def done(self) -> bool:
        return self._done

    @property
    def task(self) -> asyncio.Future[Any] | None:
        return self._task

    def succeed(self, result: Any = None) -> None:
        if self._claim("succeed"):
            self._on_succeed(result)

    def fail(self, message: str | None = DEFAULT_FAIL_MESSAGE) -> None:
        if self._claim("fail"):
            self._on_fail(message)

    def attach(self, awaitable: Awaitable[Any]) -> None:
        """Track a host awaitable (coroutine or future) on the current event loop.

        Raises:
            RuntimeError: If no event loop is running.
        """
        loop = asyncio.get_running_loop()
        self._task = asyncio.ensure_future(awaitable, loop=loop)
        self._task.add_done_callback(self._task_done)

    def cancel(self) -> None:
        with self._lock:
            self._done = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _claim(self, how: str) -> bool:
        with self._lock:
            if self._done:
                logger.warning(
                    "Ignoring %s for %r: command already completed", how, self.command_line
                )
                return False
            self._done = True
            return True

    def _task_done(self, task: asyncio.Future[Any]) -> None:
        if task.cancelled():
            logger.debug("External command %r cancelled", self.command_key)
            return
        error = task.exception()
        if error is not None:
            logger.error("External command %r raised: %s", self.command_key, error)
            if not self._done:
                self.fail(str(error) or type(error).__name__)
        elif not self._done:
            self.succeed(task.result())
