"""Shared test fixtures for the termsession test suite.

Provides a recording command host, preconfigured text metrics, and
ready-to-use sessions and controllers.
"""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from termsession.config.settings import Settings
from termsession.domain.models import CommandDescriptor, CommandExample
from termsession.session.base import CommandHost
from termsession.session.controller import TerminalController
from termsession.session.engine import Session
from termsession.text.metrics import TextMetrics


class RecordingHost(CommandHost):
    """CommandHost that records every call and keeps the last callbacks.

    ``action`` runs inside on_execute with (succeed, fail) when set.
    """

    def __init__(self, action: Callable[[Any, Any], Any] | None = None) -> None:
        self.action = action
        self.calls: list[tuple[str, str, str]] = []
        self.events: list[tuple[Any, ...]] = []
        self.succeed: Any = None
        self.fail: Any = None

    def on_execute(self, command_key, command_line, succeed, fail, session_name):
        self.calls.append((command_key, command_line, session_name))
        self.succeed = succeed
        self.fail = fail
        if self.action is not None:
            return self.action(succeed, fail)
        return None

    def before_parse(self, session_name, command_key, command_line):
        self.events.append(("before_parse", session_name, command_key, command_line))

    def after_init(self, session_name):
        self.events.append(("after_init", session_name))

    def after_destroy(self, session_name):
        self.events.append(("after_destroy", session_name))

    def key_event(self, session_name, key):
        self.events.append(("key_event", session_name, key))

    def chrome_click(self, session_name, target):
        self.events.append(("chrome_click", session_name, target))


# ---------------------------------------------------------------------------
# Component Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def metrics() -> TextMetrics:
    """Metrics with 8px narrow and 13px wide characters."""
    return TextMetrics(narrow=8, wide=13, line_height=20, prompt_width=0)


@pytest.fixture
def deploy_command() -> CommandDescriptor:
    return CommandDescriptor(
        key="deploy",
        title="Deploy",
        group="ops",
        usage="deploy <env>",
        description="Deploy the current build.",
        examples=[CommandExample(command="deploy staging", description="Ship to staging")],
    )


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def make_host() -> Callable[..., RecordingHost]:
    """Factory for extra recording hosts, e.g. one per session."""
    return RecordingHost


@pytest.fixture
def url_opener() -> MagicMock:
    return MagicMock()


@pytest.fixture
def session(
    host: RecordingHost,
    metrics: TextMetrics,
    url_opener: MagicMock,
    deploy_command: CommandDescriptor,
) -> Session:
    """A session with an empty log and a recording host."""
    return Session(
        "test",
        host=host,
        commands=[deploy_command],
        metrics=metrics,
        url_opener=url_opener,
    )


@pytest.fixture
def controller(host: RecordingHost) -> TerminalController:
    """A controller whose sessions all share the recording host."""
    return TerminalController(Settings(), host_factory=lambda: host)
