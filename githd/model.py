"""Committed-file listing contract and the swappable provider handle."""

from __future__ import annotations

from .git import CommittedFile, GitRepository
from .host import Disposable, EventEmitter, FileRow, Host

EXPLORER_VIEW_NAME = "Explorer"
SCM_VIEW_NAME = "SCM"
OPEN_COMMITTED_FILE_COMMAND = "githd.openCommittedFile"


class FileProvider:
    """Lists the files changed at one ref.

    Subclasses decide how ``rows()`` lays the files out. A result that arrives
    after ``dispose()`` is dropped.
    """

    view_id = ""
    supports_folder_grouping = False

    def __init__(self, repository: GitRepository, host: Host) -> None:
        self._repository = repository
        self._ref: str | None = None
        self._files: list[CommittedFile] = []
        self._disposed = False
        self._on_did_change = EventEmitter()
        self._view_registration = host.register_file_view(self.view_id, self)

    @property
    def ref(self) -> str | None:
        return self._ref

    @property
    def files(self) -> list[CommittedFile]:
        return list(self._files)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def on_did_change(self, listener) -> Disposable:
        return self._on_did_change.event(listener)

    async def update(self, ref: str) -> None:
        files = await self._repository.get_committed_files(ref)
        if self._disposed:
            return
        self._ref = ref
        self._files = files
        self._on_did_change.fire()

    def clear(self) -> None:
        if self._disposed:
            return
        self._ref = None
        self._files = []
        self._on_did_change.fire()

    def rows(self) -> list[FileRow]:
        raise NotImplementedError

    def _file_row(self, label: str, file: CommittedFile, depth: int = 0) -> FileRow:
        return FileRow(label=label, depth=depth, command=(OPEN_COMMITTED_FILE_COMMAND, (file,)))

    def dispose(self) -> None:
        self._disposed = True
        self._view_registration.dispose()
        self._on_did_change.dispose()


class ProviderHandle:
    """Shared, swappable reference to the live ``FileProvider``.

    Consumers read ``current`` at use time; only the configuration reconciler
    calls ``rebind``.
    """

    def __init__(self, provider: FileProvider) -> None:
        self._provider = provider

    @property
    def current(self) -> FileProvider:
        return self._provider

    def rebind(self, provider: FileProvider) -> FileProvider:
        """Point at ``provider`` and return the previous instance."""
        previous, self._provider = self._provider, provider
        return previous


def create_file_provider(
    use_explorer: bool,
    with_folder: bool,
    repository: GitRepository,
    host: Host,
) -> FileProvider:
    """Build the explorer (tree) or SCM (flat) provider."""
    if use_explorer:
        from .committed_files import CommittedFilesProvider

        return CommittedFilesProvider(repository, host, with_folder=with_folder)

    from .scm_provider import ScmFilesProvider

    return ScmFilesProvider(repository, host)


__all__ = [
    "EXPLORER_VIEW_NAME",
    "FileProvider",
    "OPEN_COMMITTED_FILE_COMMAND",
    "ProviderHandle",
    "SCM_VIEW_NAME",
    "create_file_provider",
]
