"""Explorer-style committed-files listing, optionally grouped by folder."""

from __future__ import annotations

from dataclasses import dataclass, field
from posixpath import basename, dirname

from .git import CommittedFile, GitRepository
from .host import FileRow, Host
from .model import FileProvider


@dataclass
class _FolderNode:
    name: str
    folders: dict[str, _FolderNode] = field(default_factory=dict)
    files: list[CommittedFile] = field(default_factory=list)


def build_folder_tree(files: list[CommittedFile]) -> _FolderNode:
    root = _FolderNode(name="")
    for file in files:
        node = root
        parent = dirname(file.relative_path)
        for part in parent.split("/") if parent else []:
            node = node.folders.setdefault(part, _FolderNode(name=part))
        node.files.append(file)
    return root


def _folder_rows(node: _FolderNode, depth: int, make_row) -> list[FileRow]:
    """Folders first, then files; both sorted case-insensitively."""
    rows: list[FileRow] = []
    for name in sorted(node.folders, key=str.casefold):
        rows.append(FileRow(label=f"{name}/", depth=depth))
        rows.extend(_folder_rows(node.folders[name], depth + 1, make_row))
    for file in sorted(node.files, key=lambda item: basename(item.relative_path).casefold()):
        rows.append(make_row(f"{file.status} {basename(file.relative_path)}", file, depth))
    return rows


class CommittedFilesProvider(FileProvider):
    view_id = "githd.committedFiles"
    supports_folder_grouping = True

    def __init__(self, repository: GitRepository, host: Host, with_folder: bool = True) -> None:
        super().__init__(repository, host)
        self._with_folder = with_folder

    @property
    def with_folder(self) -> bool:
        return self._with_folder

    @with_folder.setter
    def with_folder(self, value: bool) -> None:
        if value == self._with_folder:
            return
        self._with_folder = value
        if not self._disposed:
            self._on_did_change.fire()

    def rows(self) -> list[FileRow]:
        if self._with_folder:
            return _folder_rows(build_folder_tree(self._files), 0, self._file_row)

        rows: list[FileRow] = []
        for file in self._files:
            label = f"{file.status} {basename(file.relative_path)}"
            folder = dirname(file.relative_path)
            if folder:
                label = f"{label}  {folder}"
            rows.append(self._file_row(label, file))
        return rows


__all__ = ["CommittedFilesProvider", "build_folder_tree"]
