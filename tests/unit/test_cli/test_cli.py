"""Tests for CLI argument parsing and plain-text rendering."""

from __future__ import annotations

import pytest

from termsession.cli import main, parse_args, render_entry
from termsession.domain.models import EntryClass, EntryKind, LogEntry, TableContent


class TestParseArgs:
    """Test subcommand parsing."""

    def test_repl(self) -> None:
        args = parse_args(["repl", "--shell", "--name", "ops"])
        assert args.command == "repl"
        assert args.shell is True
        assert args.name == "ops"

    def test_send(self) -> None:
        args = parse_args(["-v", "send", "--session", "main", "echo", "hi"])
        assert args.verbose is True
        assert args.session == "main"
        assert args.line == ["echo", "hi"]

    def test_send_requires_session(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["send", "ls"])

    def test_no_command_prints_help(self) -> None:
        with pytest.raises(SystemExit):
            main([])


class TestRenderEntry:
    """Test rendering log entries for a character terminal."""

    def test_markup_is_stripped(self) -> None:
        entry = LogEntry(kind=EntryKind.MARKUP, content="<b>a</b><br>b &amp; c")
        assert render_entry(entry) == "a\nb & c"

    def test_code_is_verbatim(self) -> None:
        entry = LogEntry(kind=EntryKind.CODE, content="<tag>")
        assert render_entry(entry) == "<tag>"

    def test_class_prefix(self) -> None:
        assert render_entry(LogEntry(category=EntryClass.ERROR, content="bad", tag="error")) == "[error] bad"
        assert render_entry(LogEntry(category=EntryClass.SYSTEM, content="x")) == "[system] x"

    def test_separator(self) -> None:
        assert render_entry(LogEntry(kind=EntryKind.SEPARATOR), columns=10) == "-" * 10

    def test_structured_data(self) -> None:
        entry = LogEntry(kind=EntryKind.STRUCTURED_DATA, content={"a": 1})
        assert render_entry(entry) == '{\n  "a": 1\n}'

    def test_table(self) -> None:
        entry = LogEntry(
            kind=EntryKind.TABLE,
            content=TableContent(head=["KEY", "GROUP"], rows=[["help", "local"]]),
        )
        assert render_entry(entry) == "KEY   GROUP\nhelp  local"

    def test_long_lines_wrap(self) -> None:
        assert render_entry(LogEntry(content="abcdefgh"), columns=4) == "abcd\nefgh"

    def test_wide_characters_take_two_cells(self) -> None:
        assert render_entry(LogEntry(content="中中中"), columns=4) == "中中\n中"
