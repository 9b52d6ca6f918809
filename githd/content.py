"""Content provider for ``git:`` resources: a file's text at a ref."""

from __future__ import annotations

import logging

from .git import GitError, GitRepository
from .uri import DiffResource, from_git_uri

logger = logging.getLogger(__name__)

_MISSING_PATH_MARKERS = ("does not exist in", "exists on disk, but not in")
_MISSING_PARENT_MARKERS = ("invalid object name", "unknown revision", "bad revision")


def is_missing_content(exc: GitError, ref: str) -> bool:
    """True when ``git show`` failed only because there is nothing to show.

    That covers a path absent at ``ref`` and the parent of a root commit.
    """
    message = exc.stderr.lower()
    if any(marker in message for marker in _MISSING_PATH_MARKERS):
        return True
    return ref.endswith("~") and any(marker in message for marker in _MISSING_PARENT_MARKERS)


class GitContentProvider:
    def __init__(self, repository: GitRepository) -> None:
        self._repository = repository

    async def provide_text_document_content(self, uri: DiffResource | str) -> str:
        """Return the file text at the encoded ref; absent content is empty."""
        path, ref = from_git_uri(uri)
        relative_path = self._repository.relative_path(path)
        try:
            return await self._repository.show(ref, relative_path)
        except GitError as exc:
            if not is_missing_content(exc, ref):
                raise
            logger.debug("no content for %s at %s", relative_path, ref)
            return ""


__all__ = ["GitContentProvider", "is_missing_content"]
