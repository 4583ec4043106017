"""Command registry, autocomplete search and built-in command help."""

from termsession.commands.builtins import BUILTIN_COMMANDS, help_entry
from termsession.commands.registry import CommandRegistry, score

__all__ = ["BUILTIN_COMMANDS", "CommandRegistry", "help_entry", "score"]
