"""Encode and decode ``git:`` resources consumed by the diff viewer.

A resource names one side of a diff: the file location plus the ref whose
content is wanted. Both travel losslessly in a JSON query payload.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote, unquote

GIT_SCHEME = "git"
DIFF_TARGET_SUFFIX = ".git"


class DecodeError(ValueError):
    """Raised when a resource was not produced by ``to_git_uri``."""


@dataclass(frozen=True)
class DiffResource:
    """Addressable resource: ``scheme:path?query``."""

    scheme: str
    path: str
    query: str

    def to_string(self) -> str:
        return f"{self.scheme}:{quote(self.path, safe='/')}?{quote(self.query, safe='')}"

    @classmethod
    def parse(cls, text: str) -> DiffResource:
        """Parse the string form produced by ``to_string``."""
        scheme, sep, rest = text.partition(":")
        if not sep or not scheme:
            raise DecodeError(f"missing scheme in resource: {text!r}")
        path, sep, query = rest.partition("?")
        if not sep:
            raise DecodeError(f"missing query in resource: {text!r}")
        return cls(scheme=scheme, path=unquote(path), query=unquote(query))

    def __str__(self) -> str:
        return self.to_string()


def to_git_uri(path: str | os.PathLike[str], ref: str, replace_file_extension: bool = False) -> DiffResource:
    """Build the resource for ``path`` at ``ref``.

    ``replace_file_extension`` appends a marker suffix to the display path so a
    viewer can tell this side apart from an otherwise identical resource. It
    never affects the encoded payload.
    """
    fs_path = os.fspath(path)
    display_path = Path(fs_path).as_posix()
    if replace_file_extension:
        display_path = f"{display_path}{DIFF_TARGET_SUFFIX}"
    query = json.dumps({"path": fs_path, "ref": ref}, ensure_ascii=False)
    return DiffResource(scheme=GIT_SCHEME, path=display_path, query=query)


def from_git_uri(resource: DiffResource | str) -> tuple[str, str]:
    """Recover ``(path, ref)`` from a resource built by ``to_git_uri``."""
    if isinstance(resource, str):
        resource = DiffResource.parse(resource)
    if resource.scheme != GIT_SCHEME:
        raise DecodeError(f"unexpected scheme {resource.scheme!r}")
    try:
        payload = json.loads(resource.query)
    except ValueError as exc:
        raise DecodeError(f"query is not JSON: {resource.query!r}") from exc
    if not isinstance(payload, dict):
        raise DecodeError("query must be a JSON object")

    path = payload.get("path")
    ref = payload.get("ref")
    if not isinstance(path, str) or not isinstance(ref, str):
        raise DecodeError("query must carry string 'path' and 'ref'")
    return path, ref


__all__ = [
    "DIFF_TARGET_SUFFIX",
    "DecodeError",
    "DiffResource",
    "GIT_SCHEME",
    "from_git_uri",
    "to_git_uri",
]
