"""Command-line front door for githd.

Parses CLI options, locates the git repository, activates the extension in a
terminal host, and runs the interactive session until the user quits.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from .commands import COMMAND_TITLES, COMMANDS
from .config import ConfigurationStore
from .extension import activate, deactivate
from .git import GitRepository, find_repository
from .host import ExtensionContext
from .model import OPEN_COMMITTED_FILE_COMMAND
from .terminal_host import TerminalHost


def palette_items() -> list[tuple[str, str]]:
    """Palette entries in registration order; file diffs open from file rows instead."""
    return [
        (command_id, COMMAND_TITLES[command_id])
        for command_id, _method in COMMANDS
        if command_id != OPEN_COMMITTED_FILE_COMMAND
    ]


async def run_session(repository: GitRepository, store: ConfigurationStore, host: TerminalHost) -> None:
    context = ExtensionContext()
    try:
        activate(context, host, store, repository)
        await host.run(palette_items(), store)
    finally:
        deactivate()
        context.dispose()
        host.dispose()
        store.dispose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Browse git history and per-commit file diffs in the terminal."
    )
    parser.add_argument("path", nargs="?", default=None, help="Path inside a git repository. Defaults to current directory.")
    parser.add_argument("--style", default="monokai", help="Pygments style name for diff output.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--config", metavar="PATH", default=None, help="Settings JSON file.")
    parser.add_argument("--log-file", metavar="PATH", default=None, help="Write debug logs to PATH.")
    args = parser.parse_args(argv)

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    path = Path(args.path) if args.path else Path.cwd()
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    repository = find_repository(path.resolve())
    if repository is None:
        raise SystemExit(f"Not inside a git repository: {path}")

    store = ConfigurationStore(Path(args.config) if args.config else None)
    host = TerminalHost(style=args.style, no_color=args.no_color)
    try:
        asyncio.run(run_session(repository, store, host))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
