"""Flat committed-files listing shown in the source-control view."""

from __future__ import annotations

from .host import FileRow
from .model import FileProvider


class ScmFilesProvider(FileProvider):
    view_id = "githd.scm"

    def rows(self) -> list[FileRow]:
        return [self._file_row(f"{file.status} {file.relative_path}", file) for file in self._files]


__all__ = ["ScmFilesProvider"]
