"""Commit-history document with paging.

The document at ``DEFAULT_URI`` lists one page of commits for the selected
branch. More history loads in the background; ``loading_more`` reports
whether such a fetch is still outstanding.
"""

from __future__ import annotations

from .git import Commit, GitRepository
from .host import Disposable, DocumentLink, EventEmitter
from .model import ProviderHandle
from .tasks import spawn

HISTORY_SCHEME = "githd-logs"
LOAD_MORE_LABEL = "... load more commits"
LOADING_MORE_LABEL = "... loading more commits"


def format_commit_line(commit: Commit) -> str:
    return f"{commit.short_sha}  {commit.date}  {commit.author}  {commit.subject}"


class HistoryViewProvider:
    DEFAULT_URI = f"{HISTORY_SCHEME}://Git History"

    def __init__(self, repository: GitRepository, handle: ProviderHandle, commits_count: int) -> None:
        self._repository = repository
        self._handle = handle
        self.commits_count = commits_count
        self._branch: str | None = None
        self._first_page: list[Commit] = []
        self._more: list[Commit] = []
        self._stale = True
        self._has_more = False
        self._show_all = False
        self._loading_more = False
        # Bumped by update(); fetches started under an older value are dropped.
        self._generation = 0
        self._links: list[DocumentLink] = []
        self._disposed = False
        self._on_did_change = EventEmitter()

    @property
    def branch(self) -> str | None:
        return self._branch

    @branch.setter
    def branch(self, value: str | None) -> None:
        self._branch = value or None

    @property
    def loading_more(self) -> bool:
        return self._loading_more

    @property
    def commits(self) -> list[Commit]:
        return self._first_page + self._more

    def on_did_change(self, listener) -> Disposable:
        return self._on_did_change.event(listener)

    def update(self, show_all: bool = False) -> None:
        """Drop loaded history and re-render; ``show_all`` also fetches the rest."""
        if self._disposed:
            return
        self._generation += 1
        self._first_page = []
        self._more = []
        self._stale = True
        self._has_more = False
        self._show_all = show_all
        self._loading_more = show_all
        if show_all:
            spawn(self._load_more(self._generation, None), name="githd.history.loadAll")
        self._on_did_change.fire(self.DEFAULT_URI)

    def load_more(self) -> None:
        """Fetch the next page in the background unless a fetch is running."""
        if self._disposed or self._loading_more or not self._has_more:
            return
        self._loading_more = True
        spawn(self._load_more(self._generation, self.commits_count), name="githd.history.loadMore")
        self._on_did_change.fire(self.DEFAULT_URI)

    async def _load_more(self, generation: int, count: int | None) -> None:
        """Fetch ``count`` commits after those shown, or the whole log for ``None``.

        Paging continues from what is loaded rather than from the page size,
        which may change between pages.
        """
        try:
            if count is None:
                commits = await self._repository.get_log(self._branch)
                if generation != self._generation or self._disposed:
                    return
                self._first_page = commits[: self.commits_count]
                self._more = commits[self.commits_count :]
                self._has_more = False
                self._stale = False
                return
            skip = len(self._first_page) + len(self._more)
            commits = await self._repository.get_log(self._branch, count + 1, skip=skip)
            if generation != self._generation or self._disposed:
                return
            self._more.extend(commits[:count])
            self._has_more = len(commits) > count
        finally:
            if generation == self._generation and not self._disposed:
                self._loading_more = False
                self._on_did_change.fire(self.DEFAULT_URI)

    async def _load_first_page(self) -> None:
        generation = self._generation
        count = self.commits_count
        commits = await self._repository.get_log(self._branch, count + 1)
        # A full-history fetch may have landed first.
        if generation != self._generation or self._disposed or not self._stale:
            return
        self._first_page = commits[:count]
        if not self._show_all:
            self._has_more = len(commits) > count
        self._stale = False

    async def provide_text_document_content(self, uri: str) -> str:
        if self._stale:
            await self._load_first_page()
        return self._render()

    def provide_document_links(self, uri: str) -> list[DocumentLink]:
        return list(self._links)

    def _render(self) -> str:
        lines = [f"Git History ({self._branch or 'HEAD'})", ""]
        links: list[DocumentLink] = []
        for commit in self.commits:
            links.append(DocumentLink(line=len(lines), action=self._select_commit_action(commit.sha)))
            lines.append(format_commit_line(commit))
        if self._loading_more:
            lines.append(LOADING_MORE_LABEL)
        elif self._has_more:
            links.append(DocumentLink(line=len(lines), action=self._load_more_action))
            lines.append(LOAD_MORE_LABEL)
        self._links = links
        return "\n".join(lines) + "\n"

    def _select_commit_action(self, sha: str):
        async def _select() -> None:
            await self._handle.current.update(sha)

        return _select

    async def _load_more_action(self) -> None:
        self.load_more()

    def dispose(self) -> None:
        self._disposed = True
        self._on_did_change.dispose()


__all__ = ["HISTORY_SCHEME", "HistoryViewProvider", "format_commit_line"]
