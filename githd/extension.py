"""Extension lifecycle and live preference reconciliation.

``activate`` wires the committed-files provider, history view, content
providers and commands into a host. ``ConfigurationReconciler`` keeps that
wiring consistent when preferences change while the session runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .commands import CommandCenter
from .config import ConfigurationStore, ViewPreferences
from .content import GitContentProvider
from .git import GitRepository
from .history import HISTORY_SCHEME, HistoryViewProvider
from .host import ExtensionContext, Host
from .model import ProviderHandle, create_file_provider
from .tasks import spawn
from .uri import GIT_SCHEME

logger = logging.getLogger(__name__)


class ConfigurationReconciler:
    """Applies a new preferences snapshot to the live components.

    Order per change: provider kind (swap, carrying the new grouping flag),
    then grouping in place, then history page size.
    """

    def __init__(
        self,
        store: ConfigurationStore,
        handle: ProviderHandle,
        history: HistoryViewProvider,
        context: ExtensionContext,
        repository: GitRepository,
        host: Host,
    ) -> None:
        self._store = store
        self._handle = handle
        self._history = history
        self._context = context
        self._repository = repository
        self._host = host
        self.preferences = store.preferences()
        self._subscription = store.on_did_change(self.on_configuration_changed)

    def on_configuration_changed(self) -> None:
        self.apply(self._store.preferences())

    def apply(self, new: ViewPreferences) -> None:
        old = self.preferences
        if new.use_explorer != old.use_explorer:
            self._swap_provider(new)
        elif new.with_folder != old.with_folder:
            provider = self._handle.current
            if provider.supports_folder_grouping:
                provider.with_folder = new.with_folder
        self._history.commits_count = new.commits_count
        self.preferences = new

    def _swap_provider(self, new: ViewPreferences) -> None:
        old_provider = self._handle.current
        ref = old_provider.ref
        old_provider.dispose()
        if old_provider in self._context.subscriptions:
            self._context.subscriptions.remove(old_provider)
        provider = create_file_provider(new.use_explorer, new.with_folder, self._repository, self._host)
        self._handle.rebind(provider)
        self._context.subscriptions.append(provider)
        logger.debug("swapped committed files provider to %s (ref=%s)", type(provider).__name__, ref)
        if ref is not None:
            spawn(provider.update(ref), name="githd.restoreRef")

    def dispose(self) -> None:
        self._subscription.dispose()


@dataclass
class Extension:
    handle: ProviderHandle
    history: HistoryViewProvider
    command_center: CommandCenter
    reconciler: ConfigurationReconciler


def activate(
    context: ExtensionContext,
    host: Host,
    store: ConfigurationStore,
    repository: GitRepository,
) -> Extension:
    preferences = store.preferences()
    provider = create_file_provider(preferences.use_explorer, preferences.with_folder, repository, host)
    handle = ProviderHandle(provider)
    history = HistoryViewProvider(repository, handle, preferences.commits_count)
    command_center = CommandCenter(host, handle, history, repository, store)
    reconciler = ConfigurationReconciler(store, handle, history, context, repository, host)

    context.subscriptions.extend(
        [
            host.register_text_document_content_provider(HISTORY_SCHEME, history),
            host.register_text_document_content_provider(GIT_SCHEME, GitContentProvider(repository)),
            reconciler,
            command_center,
            history,
            provider,
        ]
    )
    return Extension(handle=handle, history=history, command_center=command_center, reconciler=reconciler)


def deactivate() -> None:
    pass


__all__ = ["ConfigurationReconciler", "Extension", "activate", "deactivate"]
