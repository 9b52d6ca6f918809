"""Git query facade.

Lists refs, the files a commit touched, commit history, and file content at a
ref. Every query shells out to ``git`` in a worker thread so callers suspend
instead of blocking the event loop.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 10.0
_FIELD_SEP = "\x1f"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%h", "%an", "%ad", "%s"])


class GitError(RuntimeError):
    """A git invocation exited non-zero or could not be started."""

    def __init__(self, args: list[str], stderr: str = "", returncode: int | None = None) -> None:
        self.git_args = args
        self.stderr = stderr.strip()
        self.returncode = returncode
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"git {' '.join(args)} failed{detail}")


class RefType(enum.Enum):
    HEAD = "head"
    TAG = "tag"
    REMOTE_HEAD = "remote_head"


@dataclass(frozen=True)
class Ref:
    name: str | None
    commit: str
    type: RefType


@dataclass(frozen=True)
class CommittedFile:
    """A file touched by a commit.

    ``uri`` is the absolute work-tree location; ``relative_path`` is the
    repo-relative POSIX path shown to the user.
    """

    uri: Path
    relative_path: str
    status: str = "M"


@dataclass(frozen=True)
class Commit:
    sha: str
    short_sha: str
    author: str
    date: str
    subject: str


def _run_git(cwd: Path, args: list[str], timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> str:
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        proc = subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise GitError(args, str(exc)) from exc
    if proc.returncode != 0:
        raise GitError(args, proc.stderr, proc.returncode)
    return proc.stdout


def find_repository(path: Path) -> GitRepository | None:
    """Return the repository containing ``path``, or ``None`` outside one."""
    start = path if path.is_dir() else path.parent
    try:
        output = _run_git(start, ["rev-parse", "--show-toplevel"], timeout_seconds=2.0)
    except GitError:
        return None
    top = output.strip()
    return GitRepository(Path(top).resolve()) if top else None


def _parse_ref_line(line: str) -> Ref | None:
    refname, _, commit = line.partition(" ")
    if refname.startswith("refs/heads/"):
        return Ref(name=refname[len("refs/heads/"):], commit=commit, type=RefType.HEAD)
    if refname.startswith("refs/tags/"):
        return Ref(name=refname[len("refs/tags/"):], commit=commit, type=RefType.TAG)
    if refname.startswith("refs/remotes/"):
        name = refname[len("refs/remotes/"):]
        # origin/HEAD is a symbolic pointer, not a branch.
        if name.endswith("/HEAD"):
            return None
        return Ref(name=name, commit=commit, type=RefType.REMOTE_HEAD)
    return None


def parse_refs(output: str) -> list[Ref]:
    refs: list[Ref] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        ref = _parse_ref_line(line)
        if ref is not None:
            refs.append(ref)
    return refs


def parse_name_status(output: str, repo_root: Path) -> list[CommittedFile]:
    """Parse ``--name-status -z`` output; renames and copies keep the new path."""
    tokens = output.split("\0")
    files: list[CommittedFile] = []
    index = 0
    while index < len(tokens):
        status = tokens[index]
        index += 1
        if not status:
            continue
        letter = status[0]
        if letter in {"R", "C"}:
            index += 1
        if index >= len(tokens):
            break
        rel_path = tokens[index]
        index += 1
        files.append(CommittedFile(uri=repo_root / rel_path, relative_path=rel_path, status=letter))
    return files


def parse_log(output: str) -> list[Commit]:
    commits: list[Commit] = []
    for line in output.splitlines():
        fields = line.split(_FIELD_SEP)
        if len(fields) != 5:
            continue
        sha, short_sha, author, date, subject = fields
        commits.append(Commit(sha=sha, short_sha=short_sha, author=author, date=date, subject=subject))
    return commits


class GitRepository:
    def __init__(self, root: Path) -> None:
        self.root = root

    async def _git(self, *args: str) -> str:
        return await asyncio.to_thread(_run_git, self.root, list(args))

    async def get_refs(self) -> list[Ref]:
        output = await self._git("for-each-ref", "--format=%(refname) %(objectname:short)")
        return parse_refs(output)

    async def get_committed_files(self, ref: str) -> list[CommittedFile]:
        output = await self._git(
            "diff-tree", "--no-commit-id", "-r", "--root", "--name-status", "-z", ref, "--"
        )
        return parse_name_status(output, self.root)

    async def get_log(self, branch: str | None = None, count: int | None = None, skip: int = 0) -> list[Commit]:
        """List commits reachable from ``branch`` (HEAD when ``None``), newest first.

        ``count=None`` lists everything after ``skip``.
        """
        args = ["log", f"--format={_LOG_FORMAT}", "--date=short", f"--skip={max(0, skip)}"]
        if count is not None:
            args.append(f"--max-count={max(0, count)}")
        args.extend([branch or "HEAD", "--"])
        return parse_log(await self._git(*args))

    async def show(self, ref: str, relative_path: str) -> str:
        return await self._git("show", f"{ref}:{relative_path}")

    def relative_path(self, path: str | Path) -> str:
        # Lexical: a committed symlink maps to its own path, not its target.
        return Path(os.path.abspath(path)).relative_to(self.root).as_posix()


__all__ = [
    "Commit",
    "CommittedFile",
    "GitError",
    "GitRepository",
    "Ref",
    "RefType",
    "find_repository",
    "parse_log",
    "parse_name_status",
    "parse_refs",
]
