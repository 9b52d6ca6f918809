"""Line-oriented interactive host for a terminal session.

Session input, one line at a time:

* ``<n>``      run palette entry ``n``
* ``f<n>``     open file row ``n`` of the committed-files view
* ``l<n>``     follow link ``n`` of the shown document (history commits)
* ``=<text>``  set the input box value read by ``githd.updateSha``
* ``?``        show the palette, ``q`` quits

Handlers run detached; the session waits for them (and for any prompt they
raise) before reading the next line, so only one reader touches stdin.
"""

from __future__ import annotations

import asyncio
import difflib
import sys
from collections.abc import Callable, Sequence
from typing import Any, TextIO

from .config import ConfigurationStore
from .highlight import colorize_diff, sanitize_terminal_text
from .host import (
    CURSOR_TOP_COMMAND,
    DIFF_COMMAND,
    SCM_SWITCH_COMMAND,
    Disposable,
    FileRow,
    Host,
    QuickPickItem,
    TextDocument,
)
from .tasks import drain, spawn


def _read_stdin_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _parse_index(text: str, size: int) -> int | None:
    """Parse a 1-based index into ``range(size)``."""
    try:
        index = int(text.strip()) - 1
    except ValueError:
        return None
    return index if 0 <= index < size else None


class TerminalHost(Host):
    def __init__(
        self,
        style: str = "monokai",
        no_color: bool = False,
        out: TextIO | None = None,
        read_line: Callable[[str], str | None] | None = None,
    ) -> None:
        super().__init__()
        self.style = style
        self.no_color = no_color
        self._out = out if out is not None else sys.stdout
        self._read_line = read_line if read_line is not None else _read_stdin_line
        self.active_document: TextDocument | None = None
        self.cursor_line = 0
        self.scm_view: str | None = None
        self._document_watch: Disposable | None = None
        self._running = False
        self._builtins = [
            self.commands.register_command(CURSOR_TOP_COMMAND, self._cursor_top),
            self.commands.register_command(DIFF_COMMAND, self._open_diff),
            self.commands.register_command(SCM_SWITCH_COMMAND, self._switch_scm),
        ]

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    async def _next_line(self, prompt: str) -> str | None:
        return await asyncio.to_thread(self._read_line, prompt)

    async def show_quick_pick(self, items: Sequence[QuickPickItem | str], placeholder: str = "") -> Any:
        if not items:
            return None
        lines = [placeholder] if placeholder else []
        for index, item in enumerate(items, start=1):
            if isinstance(item, QuickPickItem):
                description = f"  {item.description}" if item.description else ""
                lines.append(f"  {index}. {item.label}{description}")
            else:
                lines.append(f"  {index}. {item}")
        self._write(sanitize_terminal_text("\n".join(lines)) + "\n")
        answer = await self._next_line("pick> ")
        if answer is None:
            return None
        index = _parse_index(answer, len(items))
        return items[index] if index is not None else None

    async def show_input_box(self, placeholder: str = "") -> str | None:
        if placeholder:
            self._write(placeholder + "\n")
        answer = await self._next_line("input> ")
        if answer is None:
            return None
        return answer if answer.strip() else None

    async def show_text_document(self, document: TextDocument) -> None:
        self.active_document = document
        self._watch_document(document.uri)
        self._write(f"\n== {document.uri}\n{sanitize_terminal_text(document.text)}")

    def _watch_document(self, uri: str) -> None:
        if self._document_watch is not None:
            self._document_watch.dispose()
            self._document_watch = None
        provider = self.content_provider_for(uri)
        on_did_change = getattr(provider, "on_did_change", None)
        if on_did_change is None:
            return

        def _changed(changed_uri: str | None = None) -> None:
            if changed_uri not in (None, uri):
                return
            spawn(self._refresh_document(uri), name="githd.terminal.refresh")

        self._document_watch = on_did_change(_changed)

    async def _refresh_document(self, uri: str) -> None:
        if self.active_document is None or self.active_document.uri != uri:
            return
        document = await self.open_text_document(uri)
        self.active_document = document
        self._write(f"\n== {document.uri}\n{sanitize_terminal_text(document.text)}")

    def register_file_view(self, view_id: str, provider: Any) -> Disposable:
        registration = super().register_file_view(view_id, provider)
        subscription = provider.on_did_change(lambda *_: self.render_file_views())
        return Disposable.from_disposables(subscription, registration)

    def file_rows(self) -> list[FileRow]:
        rows: list[FileRow] = []
        for provider in self.file_views().values():
            rows.extend(provider.rows())
        return rows

    def render_file_views(self) -> None:
        lines: list[str] = []
        number = 0
        for view_id, provider in self.file_views().items():
            lines.append(f"\n[{view_id}] {provider.ref or '(no ref)'}")
            for row in provider.rows():
                prefix = "    "
                if row.command is not None:
                    number += 1
                    prefix = f"f{number:<3}"
                lines.append(f"{prefix}{'  ' * row.depth}{row.label}")
        self._write(sanitize_terminal_text("\n".join(lines)) + "\n")

    async def _cursor_top(self) -> None:
        self.cursor_line = 0

    async def _switch_scm(self, providers: Sequence[str] = ()) -> None:
        self.scm_view = providers[0] if providers else None
        self._write(f"source control: {self.scm_view or '(none)'}\n")

    async def _open_diff(self, left: object, right: object, title: str, options: dict | None = None) -> None:
        left_document = await self.open_text_document(left)
        right_document = await self.open_text_document(right)
        diff_lines = difflib.unified_diff(
            left_document.text.splitlines(),
            right_document.text.splitlines(),
            fromfile=left_document.uri,
            tofile=right_document.uri,
            lineterm="",
        )
        diff_text = "\n".join(diff_lines)
        mode = " (preview)" if (options or {}).get("preview") else ""
        self._write(f"\n== {sanitize_terminal_text(title)}{mode}\n")
        self._write(colorize_diff(diff_text + "\n" if diff_text else "", self.style, self.no_color))

    def _print_palette(self, palette: Sequence[tuple[str, str]]) -> None:
        lines = [f"  {index}. {title}" for index, (_command_id, title) in enumerate(palette, start=1)]
        lines.append("  f<n> open file, l<n> follow link, =<text> set input, q quit")
        self._write("\n".join(lines) + "\n")

    async def handle_line(self, line: str, palette: Sequence[tuple[str, str]]) -> None:
        text = line.strip()
        if not text:
            return
        if text in {"q", "quit"}:
            self._running = False
            return
        if text in {"?", "help"}:
            self._print_palette(palette)
            return
        if text.startswith("="):
            self.input_box_value = text[1:].strip()
            return
        if text[0] == "f" and text[1:].isdigit():
            rows = [row for row in self.file_rows() if row.command is not None]
            index = _parse_index(text[1:], len(rows))
            if index is None:
                self._write(f"no file row {text[1:]}\n")
                return
            command_id, args = rows[index].command
            await self.commands.execute_command(command_id, *args)
            return
        if text[0] == "l" and text[1:].isdigit():
            self._follow_link(text[1:])
            return
        index = _parse_index(text, len(palette))
        if index is None:
            self._write(f"unknown input: {text!r} (? for help)\n")
            return
        await self.commands.execute_command(palette[index][0])

    def _follow_link(self, number: str) -> None:
        if self.active_document is None:
            self._write("no document is shown\n")
            return
        provider = self.content_provider_for(self.active_document.uri)
        links = getattr(provider, "provide_document_links", lambda _uri: [])(self.active_document.uri)
        index = _parse_index(number, len(links))
        if index is None:
            self._write(f"no link {number}\n")
            return
        spawn(links[index].action(), name="githd.terminal.link")

    async def run(self, palette: Sequence[tuple[str, str]], store: ConfigurationStore | None = None) -> None:
        """Read and handle session lines until ``q`` or end of input."""
        self._running = True
        self._print_palette(palette)
        while self._running:
            line = await self._next_line("githd> ")
            if line is None:
                break
            await self.handle_line(line, palette)
            await drain()
            if store is not None:
                store.poll()
                await drain()

    def dispose(self) -> None:
        if self._document_watch is not None:
            self._document_watch.dispose()
        for registration in self._builtins:
            registration.dispose()


__all__ = ["TerminalHost"]
