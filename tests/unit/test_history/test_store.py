"""Tests for command history navigation and the per-name store."""

from __future__ import annotations

from termsession.history.store import CommandHistory, HistoryStore


class TestCommandHistory:
    """Test the history cursor."""

    def test_push_moves_cursor_past_end(self) -> None:
        history = CommandHistory()
        history.push("ls")
        history.push("pwd")
        assert history.commands == ["ls", "pwd"]
        assert history.cursor == 2

    def test_push_ignores_empty(self) -> None:
        history = CommandHistory()
        history.push("")
        assert len(history) == 0

    def test_previous_walks_back(self) -> None:
        history = CommandHistory(["a", "b", "c"])
        assert history.previous("typed") == "c"
        assert history.previous("typed") == "b"
        assert history.previous("typed") == "a"
        # Nothing older: current text is kept
        assert history.previous("typed") == "typed"
        assert history.cursor == 0

    def test_previous_on_empty_history(self) -> None:
        history = CommandHistory()
        assert history.previous("draft") == "draft"

    def test_next_walks_forward_then_clears(self) -> None:
        history = CommandHistory(["a", "b"])
        history.previous("")
        history.previous("")
        assert history.next() == "b"
        assert history.next() == ""
        assert history.cursor == 2

    def test_push_after_navigation_resets_cursor(self) -> None:
        history = CommandHistory(["a", "b"])
        history.previous("")
        history.push("c")
        assert history.cursor == 3
        assert history.previous("") == "c"

    def test_clear(self) -> None:
        history = CommandHistory(["a"])
        history.clear()
        assert len(history) == 0
        assert history.cursor == 0
        assert history.previous("x") == "x"
        assert history.next() == ""


class TestHistoryStore:
    """Test histories keyed by session name."""

    def test_get_creates_and_reuses(self) -> None:
        store = HistoryStore()
        history = store.get("main")
        history.push("ls")
        assert store.get("main") is history
        assert "main" in store

    def test_rename_moves_history(self) -> None:
        store = HistoryStore()
        store.get("old").push("ls")
        store.rename("old", "new")
        assert "old" not in store
        assert store.get("new").commands == ["ls"]

    def test_rename_unknown_is_noop(self) -> None:
        store = HistoryStore()
        store.rename("missing", "other")
        assert "other" not in store

    def test_discard(self) -> None:
        store = HistoryStore()
        store.get("main")
        store.discard("main")
        assert "main" not in store
