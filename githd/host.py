"""Host environment contracts shared by the extension and its hosts.

The extension only talks to a ``Host``: a command registry, prompts,
text-document providers, and file views. ``TerminalHost`` is the interactive
implementation; tests use a scripted one.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

CURSOR_TOP_COMMAND = "cursorTop"
DIFF_COMMAND = "diff"
SCM_SWITCH_COMMAND = "scm.switch"


class Disposable:
    """Releases a resource once; later calls are no-ops."""

    def __init__(self, on_dispose: Callable[[], None] | None = None) -> None:
        self._on_dispose = on_dispose

    @classmethod
    def from_disposables(cls, *disposables: Disposable) -> Disposable:
        def _dispose_all() -> None:
            for disposable in disposables:
                disposable.dispose()

        return cls(_dispose_all)

    def dispose(self) -> None:
        on_dispose, self._on_dispose = self._on_dispose, None
        if on_dispose is not None:
            on_dispose()


class EventEmitter:
    """Synchronous listener fan-out."""

    def __init__(self) -> None:
        self._listeners: list[Callable[..., None]] = []

    def event(self, listener: Callable[..., None]) -> Disposable:
        """Subscribe ``listener`` and return its subscription handle."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Disposable(_remove)

    def fire(self, *args: Any) -> None:
        for listener in list(self._listeners):
            listener(*args)

    def dispose(self) -> None:
        self._listeners.clear()


class CommandAlreadyRegisteredError(ValueError):
    pass


class CommandNotFoundError(KeyError):
    pass


class CommandRegistry:
    """Process-wide table from command id to callback."""

    def __init__(self) -> None:
        self._commands: dict[str, Callable[..., Any]] = {}

    def register_command(self, command_id: str, callback: Callable[..., Any]) -> Disposable:
        """Bind ``command_id``; the returned handle unbinds exactly this callback."""
        if command_id in self._commands:
            raise CommandAlreadyRegisteredError(f"command {command_id!r} already exists")
        self._commands[command_id] = callback

        def _unregister() -> None:
            if self._commands.get(command_id) is callback:
                del self._commands[command_id]

        return Disposable(_unregister)

    def has_command(self, command_id: str) -> bool:
        return command_id in self._commands

    def command_ids(self) -> list[str]:
        return list(self._commands)

    def get_command(self, command_id: str) -> Callable[..., Any]:
        """Return the callback bound to ``command_id``."""
        callback = self._commands.get(command_id)
        if callback is None:
            raise CommandNotFoundError(command_id)
        return callback

    async def execute_command(self, command_id: str, *args: Any) -> Any:
        """Invoke a command, awaiting its result when the callback returns one."""
        result = self.get_command(command_id)(*args)
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass(frozen=True)
class QuickPickItem:
    label: str
    description: str = ""


@dataclass(frozen=True)
class TextDocument:
    uri: str
    text: str

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()


@dataclass(frozen=True)
class DocumentLink:
    """Actionable line inside a rendered document."""

    line: int
    action: Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class FileRow:
    """One rendered row of a file view; ``command`` runs when the row is opened."""

    label: str
    depth: int = 0
    command: tuple[str, tuple[Any, ...]] | None = None


class Host:
    """Base host: command registry plus provider bookkeeping.

    Subclasses supply the interactive parts (prompts and document display).
    """

    def __init__(self) -> None:
        self.commands = CommandRegistry()
        self.input_box_value = ""
        self._content_providers: dict[str, Any] = {}
        self._file_views: dict[str, Any] = {}

    def register_text_document_content_provider(self, scheme: str, provider: Any) -> Disposable:
        self._content_providers[scheme] = provider

        def _remove() -> None:
            if self._content_providers.get(scheme) is provider:
                del self._content_providers[scheme]

        return Disposable(_remove)

    def content_provider_for(self, uri: str) -> Any:
        scheme = uri.partition(":")[0]
        provider = self._content_providers.get(scheme)
        if provider is None:
            raise LookupError(f"no content provider for scheme {scheme!r}")
        return provider

    def register_file_view(self, view_id: str, provider: Any) -> Disposable:
        self._file_views[view_id] = provider

        def _remove() -> None:
            if self._file_views.get(view_id) is provider:
                del self._file_views[view_id]

        return Disposable(_remove)

    def file_views(self) -> dict[str, Any]:
        return dict(self._file_views)

    async def open_text_document(self, uri: object) -> TextDocument:
        """Resolve ``uri`` through its scheme's content provider."""
        uri_text = str(uri)
        provider = self.content_provider_for(uri_text)
        text = await provider.provide_text_document_content(uri_text)
        return TextDocument(uri=uri_text, text=text)

    async def show_text_document(self, document: TextDocument) -> None:
        raise NotImplementedError

    async def show_quick_pick(self, items: Sequence[QuickPickItem | str], placeholder: str = "") -> Any:
        raise NotImplementedError

    async def show_input_box(self, placeholder: str = "") -> str | None:
        raise NotImplementedError


@dataclass
class ExtensionContext:
    """Owner of everything the extension registers; disposed as a unit."""

    subscriptions: list[Any] = field(default_factory=list)

    def dispose(self) -> None:
        subscriptions, self.subscriptions = self.subscriptions, []
        for subscription in subscriptions:
            subscription.dispose()


__all__ = [
    "CURSOR_TOP_COMMAND",
    "CommandAlreadyRegisteredError",
    "CommandNotFoundError",
    "CommandRegistry",
    "DIFF_COMMAND",
    "Disposable",
    "DocumentLink",
    "EventEmitter",
    "ExtensionContext",
    "FileRow",
    "Host",
    "QuickPickItem",
    "SCM_SWITCH_COMMAND",
    "TextDocument",
]
