"""Command-line interface for termsession.

Provides an interactive console session, the HTTP control endpoint, and
a small client for driving a session on a running endpoint.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import html
import json
import logging
import re
import shutil
import sys
from pathlib import Path

from termsession.domain.models import EntryClass, EntryKind, FlashMode, LogEntry, PromptMode, SessionState
from termsession.output.buffer import coerce_entry
from termsession.text.metrics import TextMetrics

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<[^>]+>")
_BREAK = re.compile(r"<br\s*/?>|</div>", re.IGNORECASE)

# Terminal cells: one for ASCII, two for everything else
_CELLS = TextMetrics(narrow=1, wide=2)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="termsession",
        description="Embeddable interactive terminal session engine",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/termsession.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    repl_parser = subparsers.add_parser("repl", help="Run an interactive console session")
    repl_parser.add_argument("--name", type=str, default=None, help="Session name")
    repl_parser.add_argument(
        "--shell", action="store_true",
        help="Run unknown commands through the system shell",
    )

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP control endpoint")
    serve_parser.add_argument(
        "--shell", action="store_true",
        help="Run unknown commands through the system shell",
    )

    send_parser = subparsers.add_parser("send", help="Execute a command on a remote session")
    send_parser.add_argument("--session", type=str, required=True, help="Target session name")
    send_parser.add_argument("line", nargs="+", help="Command line to execute")

    return parser.parse_args(argv)


def render_entry(entry: LogEntry, columns: int = 80) -> str:
    """Plain-text rendering of a log entry for a character terminal."""
    if entry.kind is EntryKind.SEPARATOR:
        return "-" * columns
    if entry.kind is EntryKind.TABLE:
        text = _render_table(entry.content.head, entry.content.rows)
    elif entry.kind is EntryKind.STRUCTURED_DATA:
        text = json.dumps(entry.content, indent=2, ensure_ascii=False)
    elif entry.kind is EntryKind.CODE:
        text = str(entry.content)
    else:
        text = _strip_markup(str(entry.content))

    if entry.category is not EntryClass.NONE:
        text = f"[{entry.tag or entry.category.value}] {text}"
    lines: list[str] = []
    for line in text.split("\n"):
        lines.extend(_CELLS.wrap(line, columns))
    return "\n".join(lines)


def _strip_markup(text: str) -> str:
    return html.unescape(_TAG.sub("", _BREAK.sub("\n", text)))


def _render_table(head: list[str], rows: list[list[str]]) -> str:
    cells = [[_strip_markup(c).strip() for c in row] for row in [head, *rows]]
    count = max(len(row) for row in cells)
    widths = [0] * count
    for row in cells:
        for i, cell in enumerate(row):
            first = cell.split("\n")[0]
            widths[i] = max(widths[i], int(_CELLS.string_width(first)))
    out = []
    for row in cells:
        parts = [cell.split("\n")[0] for cell in row]
        padded = [p + " " * (widths[i] - int(_CELLS.string_width(p))) for i, p in enumerate(parts)]
        out.append("  ".join(padded).rstrip())
        # Extra detail lines go under the last column
        indent = sum(widths[:-1]) + 2 * (count - 1)
        for extra in row[-1].split("\n")[1:]:
            if extra.strip():
                out.append(" " * indent + extra.strip())
    return "\n".join(out)


def _host_factory(settings, use_shell: bool):
    from termsession.hosts.shell import ShellCommandHost
    from termsession.session.base import RejectingCommandHost

    if use_shell or settings.shell.enabled:
        return lambda: ShellCommandHost.from_config(settings.shell)
    return RejectingCommandHost


async def _read_line(prompt: str, secret: bool = False) -> str | None:
    loop = asyncio.get_running_loop()
    reader = getpass.getpass if secret else input
    try:
        return await loop.run_in_executor(None, reader, prompt)
    except EOFError:
        return None


def _print_new(session, printed: int, columns: int) -> int:
    if len(session.log) < printed:
        printed = 0
    for entry in session.log.since(printed):
        print(render_entry(entry, columns))
    return len(session.log)


async def _repl(settings, args) -> None:
    """Run one console-backed session until EOF or 'exit'."""
    from termsession.session.controller import TerminalController

    controller = TerminalController(
        settings, host_factory=_host_factory(settings, args.shell)
    )
    session = controller.create_session(args.name)
    columns = shutil.get_terminal_size().columns
    printed = _print_new(session, 0, columns)
    prompt = f"{settings.session.context} > "

    try:
        while True:
            line = await _read_line(prompt)
            if line is None or line.strip() in ("exit", "quit"):
                break
            session.set_input(line)
            session.submit()

            flash = None
            while not session.accepting_input:
                printed = _print_new(session, printed, columns)
                mode = session.mode
                if isinstance(mode, FlashMode) and mode.content != flash:
                    flash = mode.content
                    print(f"\r{flash or ''}", end="", flush=True)
                elif isinstance(mode, PromptMode) and mode.question is not None:
                    answer = await _read_line(_strip_markup(mode.question), secret=mode.secret)
                    session.answer(answer or "")
                await asyncio.sleep(0.05)
            if flash is not None:
                print()
            printed = _print_new(session, printed, columns)
    finally:
        controller.shutdown()


async def _send(settings, args) -> None:
    """Execute a command on a remote session and print its output."""
    from termsession.endpoint.client import ControlClient

    columns = shutil.get_terminal_size().columns
    async with ControlClient(settings.endpoint.base_url, settings.endpoint.timeout) as client:
        before = (await client.state(args.session))["log_size"]
        await client.execute(args.session, " ".join(args.line))
        while True:
            state = await client.state(args.session)
            if state["state"] == SessionState.PROMPT.value and state["question"]:
                answer = await _read_line(_strip_markup(state["question"]), secret=state["secret"])
                await client.answer(args.session, answer or "")
            elif state["state"] == SessionState.INPUT.value:
                break
            await asyncio.sleep(0.1)
        log = await client.log(args.session, since=before)
        for raw in log["entries"]:
            print(render_entry(coerce_entry(raw), columns))


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the termsession CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from termsession.config.settings import load_settings
    from termsession.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "repl":
        logger.info("Starting console session")
        asyncio.run(_repl(settings, args))

    elif args.command == "serve":
        logger.info("Starting control endpoint")
        import uvicorn

        from termsession.endpoint.server import create_app
        from termsession.session.controller import TerminalController

        controller = TerminalController(
            settings, host_factory=_host_factory(settings, args.shell)
        )
        uvicorn.run(
            create_app(controller),
            host=settings.endpoint.host,
            port=settings.endpoint.port,
        )

    elif args.command == "send":
        from termsession.endpoint.client import ControlClientError

        try:
            asyncio.run(_send(settings, args))
        except ControlClientError as e:
            logger.error("%s", e)
            sys.exit(1)


if __name__ == "__main__":
    main()
