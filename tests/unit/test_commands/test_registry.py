"""Tests for the command registry, autocomplete search and help."""

from __future__ import annotations

import pytest

from termsession.commands.builtins import BUILTIN_COMMANDS, HELP_HEAD, format_detail, help_entry
from termsession.commands.registry import CommandRegistry, glob_pattern, group_filter, score
from termsession.domain.models import CommandDescriptor, EntryKind, TableContent


@pytest.fixture
def registry(deploy_command: CommandDescriptor) -> CommandRegistry:
    return CommandRegistry([*BUILTIN_COMMANDS, deploy_command])


class TestScore:
    """Test the match scoring formula."""

    def test_exact_match_scores_zero(self) -> None:
        assert score("help", "help") == 0

    def test_prefix_match(self) -> None:
        assert score("cl", "clear") == 3

    def test_match_position_dominates(self) -> None:
        assert score("e", "help") == 1003
        assert score("e", "deploy") == 1005

    def test_case_insensitive(self) -> None:
        assert score("HE", "help") == 2

    def test_no_match(self) -> None:
        assert score("zz", "help") is None

    def test_query_is_literal(self) -> None:
        assert score("a.b", "axb") is None
        assert score("a.b", "a.b") == 0


class TestPatterns:
    """Test help pattern helpers."""

    def test_glob_is_anchored(self) -> None:
        regex = glob_pattern("c*")
        assert regex.match("clear")
        assert not regex.match("exec")

    def test_glob_escapes_other_characters(self) -> None:
        assert not glob_pattern("a.c").match("abc")
        assert glob_pattern("a.c").match("A.C")

    def test_group_filter(self) -> None:
        assert group_filter(":Local") == "local"
        assert group_filter(":") is None
        assert group_filter("local") is None
        assert group_filter(None) is None


class TestCommandRegistry:
    """Test registration and search."""

    def test_register_overwrite_keeps_position(self, registry: CommandRegistry) -> None:
        registry.register(CommandDescriptor(key="help", group="docs"))
        assert [d.key for d in registry][0] == "help"
        assert registry.get("help").group == "docs"
        assert len(registry) == 4

    def test_register_all_with_sort_key(self) -> None:
        registry = CommandRegistry()
        registry.register_all(
            [CommandDescriptor(key="zeta"), CommandDescriptor(key="alpha")],
            sort_key=lambda d: d.key,
        )
        assert [d.key for d in registry.descriptors()] == ["alpha", "zeta"]

    def test_unregister(self, registry: CommandRegistry) -> None:
        assert registry.unregister("deploy").key == "deploy"
        assert "deploy" not in registry
        assert registry.unregister("deploy") is None

    def test_search_exact(self, registry: CommandRegistry) -> None:
        assert registry.search("help").key == "help"

    def test_search_best_score(self, registry: CommandRegistry) -> None:
        assert registry.search("op").key == "open"
        assert registry.search("e").key == "help"

    def test_search_ties_keep_registry_order(self) -> None:
        registry = CommandRegistry([CommandDescriptor(key="xa"), CommandDescriptor(key="ya")])
        assert registry.search("a").key == "xa"

    def test_search_exact_beats_earlier_partials(self) -> None:
        registry = CommandRegistry(
            [
                CommandDescriptor(key="helper"),
                CommandDescriptor(key="xhelp"),
                CommandDescriptor(key="help"),
            ]
        )
        assert registry.search("help").key == "help"

    def test_search_builtins_only(self) -> None:
        registry = CommandRegistry(BUILTIN_COMMANDS)
        assert [d.key for d in registry.descriptors()] == ["help", "clear", "open"]
        assert registry.search("cl").key == "clear"

    def test_search_group(self, registry: CommandRegistry) -> None:
        assert registry.search(":ops").key == "deploy"
        assert registry.search(":LOCAL").key == "help"
        assert registry.search(":missing") is None

    @pytest.mark.parametrize("query", [None, "", "   ", "zzz"])
    def test_search_without_result(self, registry: CommandRegistry, query: str | None) -> None:
        assert registry.search(query) is None

    def test_matching_all(self, registry: CommandRegistry) -> None:
        assert [d.key for d in registry.matching(None)] == ["help", "clear", "open", "deploy"]

    def test_matching_glob_and_group(self, registry: CommandRegistry) -> None:
        assert [d.key for d in registry.matching("c*")] == ["clear"]
        assert [d.key for d in registry.matching("HELP")] == ["help"]
        assert [d.key for d in registry.matching(":local")] == ["help", "clear", "open"]
        assert registry.matching("nothing") == []


class TestHelp:
    """Test help table rendering."""

    def test_format_detail(self, deploy_command: CommandDescriptor) -> None:
        detail = format_detail(deploy_command)
        assert detail == (
            "Description: Deploy the current build.<br>"
            "Usage: <code>deploy &lt;env&gt;</code><br>"
            "<br>"
            "<div class='t-cmd-help-example'>eg1: <code>deploy staging</code> Ship to staging</div>"
        )

    def test_format_detail_minimal(self) -> None:
        assert format_detail(CommandDescriptor(key="x")) == ""

    def test_help_entry_table(self, registry: CommandRegistry) -> None:
        entry = help_entry(registry, ":ops")
        assert entry.kind is EntryKind.TABLE
        assert isinstance(entry.content, TableContent)
        assert entry.content.head == HELP_HEAD
        assert len(entry.content.rows) == 1
        assert entry.content.rows[0][:2] == ["deploy", "ops"]

    def test_help_entry_no_match_has_empty_rows(self, registry: CommandRegistry) -> None:
        entry = help_entry(registry, "nope")
        assert entry.content.rows == []
