"""Descriptors and help rendering for the built-in commands."""

from __future__ import annotations

import html

from termsession.commands.registry import CommandRegistry
from termsession.domain.models import (
    CommandDescriptor,
    CommandExample,
    EntryKind,
    LogEntry,
    TableContent,
)

HELP_HEAD = ["KEY", "GROUP", "DETAIL"]

BUILTIN_COMMANDS: list[CommandDescriptor] = [
    CommandDescriptor(
        key="help",
        title="Help",
        group="local",
        usage="help [pattern]",
        description="Show command document.",
        examples=[
            CommandExample(command="help", description="Get all commands."),
            CommandExample(
                command="help refresh",
                description="Get help documentation for exact match commands.",
            ),
            CommandExample(
                command="help *e*",
                description="Get help documentation for fuzzy matching commands.",
            ),
            CommandExample(
                command="help :groupA",
                description="Get help documentation for specified group, match key must start with ':'.",
            ),
        ],
    ),
    CommandDescriptor(
        key="clear",
        title="Clear screen or history logs",
        group="local",
        usage="clear [history]",
        description="Clear screen or history.",
        examples=[
            CommandExample(command="clear", description="Clear all records on the current screen."),
            CommandExample(command="clear history", description="Clear command history"),
        ],
    ),
    CommandDescriptor(
        key="open",
        title="Open page",
        group="local",
        usage="open <url>",
        description="Open a specified page.",
        examples=[CommandExample(command="open example.com")],
    ),
]


def format_detail(descriptor: CommandDescriptor) -> str:
    """Markup cell describing a command's purpose, usage and examples."""
    parts: list[str] = []
    if descriptor.description:
        parts.append(f"Description: {html.escape(descriptor.description)}<br>")
    if descriptor.usage:
        parts.append(f"Usage: <code>{html.escape(descriptor.usage)}</code><br>")
    if descriptor.examples:
        parts.append("<br>")
    for number, example in enumerate(descriptor.examples, start=1):
        line = f"eg{number}: <code>{html.escape(example.command)}</code>"
        if example.description:
            line += f" {html.escape(example.description)}"
        parts.append(f"<div class='t-cmd-help-example'>{line}</div>")
    return "".join(parts)


def help_entry(registry: CommandRegistry, pattern: str | None = None) -> LogEntry:
    """Table entry listing every descriptor selected by pattern."""
    rows = [
        [descriptor.key, descriptor.group, format_detail(descriptor)]
        for descriptor in registry.matching(pattern)
    ]
    return LogEntry(kind=EntryKind.TABLE, content=TableContent(head=HELP_HEAD, rows=rows))
