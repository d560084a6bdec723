"""``git worktree`` and ``git branch`` wrappers."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .repository import current_branch
from .runner import run_git

logger = logging.getLogger(__name__)


@dataclass
class WorktreeEntry:
    """One record of ``git worktree list --porcelain``."""

    path: Path
    head: Optional[str] = None
    branch: Optional[str] = None
    branch_ref: Optional[str] = None
    bare: bool = False
    detached: bool = False
    locked: bool = False
    prunable: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    def matches(self, path: Path) -> bool:
        """True when this entry refers to ``path`` (symlinks resolved)."""
        return _same_path(self.path, path)


def _same_path(a: Path, b: Path) -> bool:
    try:
        return Path(a).resolve() == Path(b).resolve()
    except OSError:
        return Path(a) == Path(b)


def parse_worktree_list(stdout: str) -> List[WorktreeEntry]:
    """Parse ``git worktree list --porcelain`` output into entries.

    Records are separated by blank lines; each starts with ``worktree <path>``.
    The first record is always the main working tree.
    """
    entries: List[WorktreeEntry] = []
    current: Optional[WorktreeEntry] = None

    for raw in stdout.splitlines():
        line = raw.strip()
        if not line:
            if current is not None:
                entries.append(current)
                current = None
            continue

        if line.startswith("worktree "):
            if current is not None:
                entries.append(current)
            current = WorktreeEntry(path=Path(line.split(" ", 1)[1]))
            continue

        if current is None:
            continue

        if line.startswith("HEAD "):
            current.head = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            ref = line.split(" ", 1)[1]
            current.branch_ref = ref
            current.branch = ref[len("refs/heads/"):] if ref.startswith("refs/heads/") else ref
        elif line == "bare":
            current.bare = True
        elif line == "detached":
            current.detached = True
        elif line == "locked" or line.startswith("locked "):
            current.locked = True
        elif line == "prunable" or line.startswith("prunable "):
            current.prunable = True

    if current is not None:
        entries.append(current)

    return entries


def list_worktrees(repo_root: Path) -> List[WorktreeEntry]:
    """List all worktrees of the repository, main working tree first."""
    result = run_git(
        ["worktree", "list", "--porcelain"],
        cwd=repo_root,
        operation="git worktree list",
    )
    return parse_worktree_list(result.stdout)


def linked_worktrees(repo_root: Path) -> List[WorktreeEntry]:
    """List linked worktrees, excluding the main working tree."""
    entries = list_worktrees(repo_root)
    return [e for e in entries[1:] if not e.matches(repo_root)]


def find_worktree_in(entries: Iterable[WorktreeEntry], path: Path) -> Optional[WorktreeEntry]:
    """Return the entry of an already fetched worktree list that matches ``path``."""
    for entry in entries:
        if entry.matches(path):
            return entry
    return None


def find_worktree(repo_root: Path, path: Path) -> Optional[WorktreeEntry]:
    """Return the registered worktree entry for ``path`` or None."""
    return find_worktree_in(list_worktrees(repo_root), path)


def add_worktree(
    repo_root: Path,
    path: Path,
    *,
    branch: str,
    new_branch: bool = True,
    start_point: Optional[str] = None,
) -> None:
    """Create a linked worktree at ``path``.

    With ``new_branch`` a fresh branch is created from ``start_point``;
    otherwise the existing ``branch`` is checked out.
    """
    args = ["worktree", "add"]
    if new_branch:
        args += ["-b", branch, str(path)]
        if start_point:
            args.append(start_point)
    else:
        args += [str(path), branch]
    run_git(args, cwd=repo_root, operation=f"git worktree add {path}")
    logger.info("Created worktree %s on branch %s", path, branch)


def remove_worktree(repo_root: Path, path: Path, *, force: bool = False) -> None:
    """Remove the linked worktree at ``path`` via git."""
    args = ["worktree", "remove"]
    if force:
        args.append("--force")
    args += ["--", str(path)]
    run_git(args, cwd=repo_root, operation=f"git worktree remove {path}")
    logger.info("Removed worktree %s", path)


def list_branches(repo_root: Path) -> List[str]:
    """Return local branch names."""
    result = run_git(
        ["branch", "--list", "--format=%(refname:short)"],
        cwd=repo_root,
        operation="git branch --list",
    )
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def branch_exists(repo_root: Path, branch: str) -> bool:
    return branch in list_branches(repo_root)


def resolve_start_point(repo_root: Path, preferred: str) -> str:
    """Branch new agent branches start from.

    ``preferred`` when it exists locally, otherwise the branch checked out in
    the main working tree (e.g. ``master``). Falls back to ``preferred`` so
    git reports the missing ref.
    """
    if branch_exists(repo_root, preferred):
        return preferred
    checked_out = current_branch(repo_root)
    if checked_out:
        logger.warning("Branch %s not found; starting from %s", preferred, checked_out)
        return checked_out
    return preferred


__all__ = [
    "WorktreeEntry",
    "parse_worktree_list",
    "list_worktrees",
    "linked_worktrees",
    "find_worktree",
    "find_worktree_in",
    "add_worktree",
    "remove_worktree",
    "list_branches",
    "branch_exists",
    "resolve_start_point",
]
