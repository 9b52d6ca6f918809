"""User-invokable commands and their dispatch.

``COMMANDS`` is the fixed registration table. ``CommandCenter`` binds every
entry with the host at construction and unbinds them all on ``dispose``.
Handlers run as detached tasks: the invoker never waits for them, and a
failing handler is logged, not propagated.
"""

from __future__ import annotations

import logging

from .config import USE_EXPLORER_KEY, WITH_FOLDER_KEY, ConfigurationStore
from .git import CommittedFile, GitRepository, RefType
from .history import HistoryViewProvider
from .host import CURSOR_TOP_COMMAND, DIFF_COMMAND, SCM_SWITCH_COMMAND, Disposable, Host, QuickPickItem
from .model import EXPLORER_VIEW_NAME, OPEN_COMMITTED_FILE_COMMAND, SCM_VIEW_NAME, ProviderHandle
from .tasks import spawn
from .uri import to_git_uri

logger = logging.getLogger(__name__)

COMMANDS: tuple[tuple[str, str], ...] = (
    ("githd.updateSha", "update_sha"),
    ("githd.clear", "clear"),
    ("githd.switch", "switch"),
    ("githd.viewHistory", "view_history"),
    ("githd.viewAllHistory", "view_all_history"),
    ("githd.selectBranch", "select_branch"),
    ("githd.inputRef", "input_ref"),
    (OPEN_COMMITTED_FILE_COMMAND, "open_committed_file"),
    ("githd.selectCommittedFilesView", "select_committed_files_view"),
    ("githd.setExplorerViewWithFolder", "set_explorer_view_with_folder"),
)

COMMAND_TITLES: dict[str, str] = {
    "githd.updateSha": "Update committed files from the input box",
    "githd.clear": "Clear committed files",
    "githd.switch": "Switch to the Git source-control view",
    "githd.viewHistory": "View history",
    "githd.viewAllHistory": "View all history",
    "githd.selectBranch": "View branch history",
    "githd.inputRef": "Input a ref",
    OPEN_COMMITTED_FILE_COMMAND: "Open committed file diff",
    "githd.selectCommittedFilesView": "Select committed files view",
    "githd.setExplorerViewWithFolder": "Set explorer view with folder",
}


def describe_ref(ref_type: RefType, commit: str) -> str:
    if ref_type is RefType.TAG:
        return f"Tag at {commit}"
    if ref_type is RefType.REMOTE_HEAD:
        return f"Remote branch at {commit}"
    return commit


def select_committed_files_view(store: ConfigurationStore, view_name: str) -> None:
    """Persist the committed-files view choice; the reconciler reacts to the write."""
    store.update(USE_EXPLORER_KEY, view_name == EXPLORER_VIEW_NAME)


def set_explorer_view_with_folder(store: ConfigurationStore, with_folder: str) -> None:
    store.update(WITH_FOLDER_KEY, with_folder.lower() == "yes")


class CommandCenter:
    def __init__(
        self,
        host: Host,
        handle: ProviderHandle,
        history: HistoryViewProvider,
        repository: GitRepository,
        store: ConfigurationStore,
    ) -> None:
        self._host = host
        self._handle = handle
        self._history = history
        self._repository = repository
        self._store = store
        self._disposed = False
        self._registrations: list[Disposable] = []
        try:
            for command_id, method_name in COMMANDS:
                self._registrations.append(
                    host.commands.register_command(command_id, self._dispatcher(command_id, method_name))
                )
        except Exception:
            self.dispose()
            raise

    def _dispatcher(self, command_id: str, method_name: str):
        method = getattr(self, method_name)

        async def _run(args: tuple) -> None:
            await method(*args)

        def _dispatch(*args) -> None:
            if self._disposed:
                return
            logger.debug("dispatch %s", command_id)
            spawn(_run(args), name=command_id)

        return _dispatch

    def dispose(self) -> None:
        self._disposed = True
        registrations, self._registrations = self._registrations, []
        for registration in registrations:
            registration.dispose()

    async def update_sha(self) -> None:
        await self._handle.current.update(self._host.input_box_value)

    async def clear(self) -> None:
        self._handle.current.clear()

    async def switch(self) -> None:
        await self._host.commands.execute_command(SCM_SWITCH_COMMAND, ["Git"])

    async def view_history(self) -> None:
        await self._show_history(show_all=False)

    async def view_all_history(self) -> None:
        await self._show_history(show_all=True)

    async def _show_history(self, show_all: bool) -> None:
        self._history.update(show_all)
        document = await self._host.open_text_document(HistoryViewProvider.DEFAULT_URI)
        await self._host.show_text_document(document)
        # Content below the cursor is still shifting while more history loads.
        if not self._history.loading_more:
            await self._host.commands.execute_command(CURSOR_TOP_COMMAND)

    async def select_branch(self) -> None:
        refs = await self._repository.get_refs()
        picks = [
            QuickPickItem(label=ref.name or ref.commit, description=describe_ref(ref.type, ref.commit))
            for ref in refs
        ]
        item = await self._host.show_quick_pick(picks, placeholder="Select a ref to see its history")
        if item is None:
            return
        self._history.branch = item.label
        await self.view_history()

    async def input_ref(self) -> None:
        ref = await self._host.show_input_box(placeholder="Input a ref (sha1) to see its committed files")
        if not ref:
            return
        await self._handle.current.update(ref)

    async def open_committed_file(self, file: CommittedFile) -> None:
        ref = self._handle.current.ref
        if ref is None:
            return
        left = to_git_uri(file.uri, f"{ref}~")
        right = to_git_uri(file.uri, ref)
        await self._host.commands.execute_command(
            DIFF_COMMAND, left, right, f"{ref} {file.relative_path}", {"preview": True}
        )

    async def select_committed_files_view(self) -> None:
        item = await self._host.show_quick_pick(
            [EXPLORER_VIEW_NAME, SCM_VIEW_NAME], placeholder="Select the committed files view"
        )
        if item is None:
            return
        select_committed_files_view(self._store, item)

    async def set_explorer_view_with_folder(self) -> None:
        item = await self._host.show_quick_pick(
            ["Yes", "No"], placeholder="Set if the committed files show with folder or not"
        )
        if item is None:
            return
        set_explorer_view_with_folder(self._store, item)


__all__ = [
    "COMMANDS",
    "COMMAND_TITLES",
    "CommandCenter",
    "describe_ref",
    "select_committed_files_view",
    "set_explorer_view_with_folder",
]
