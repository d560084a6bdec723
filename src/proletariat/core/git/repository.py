"""Git repository root discovery and working-tree status."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from proletariat.core.exceptions import GitCommandError, NotAGitRepositoryError
from .runner import run_git


def _starting_path(start_path: Optional[Path | str]) -> Path:
    """Normalize start_path to an absolute directory Path."""
    start = Path.cwd() if start_path is None else Path(start_path)
    start = start.resolve()
    if start.is_file():
        start = start.parent
    return start


def _rev_parse(start: Path, *flags: str) -> str:
    try:
        result = run_git(["rev-parse", *flags], cwd=start, operation="git rev-parse")
    except GitCommandError as exc:
        raise NotAGitRepositoryError(
            f"Not in a git repository: {start}. Proletariat requires version control.",
            context={"path": str(start), "stderr": exc.context.get("stderr", "")},
        ) from exc
    return result.stdout.strip()


def git_common_dir(start_path: Optional[Path | str] = None) -> Path:
    """Return the absolute shared git directory (``<main>/.git``) for ``start_path``."""
    start = _starting_path(start_path)
    return Path(_rev_parse(start, "--path-format=absolute", "--git-common-dir")).resolve()


def locate_root(start_path: Optional[Path | str] = None, *, main: bool = True) -> Path:
    """Return the repository root enclosing ``start_path`` (default: cwd).

    Uses ``git rev-parse`` so discovery matches git exactly. Inside a linked
    worktree, ``main=True`` returns the main checkout that owns it, which is
    where the project config lives.

    Raises:
        NotAGitRepositoryError: When ``start_path`` is not inside a repository.
    """
    start = _starting_path(start_path)
    toplevel = Path(_rev_parse(start, "--show-toplevel")).resolve()
    if not main:
        return toplevel

    git_dir = Path(_rev_parse(start, "--path-format=absolute", "--git-dir")).resolve()
    common_dir = Path(_rev_parse(start, "--path-format=absolute", "--git-common-dir")).resolve()
    if git_dir != common_dir and git_dir.is_relative_to(common_dir / "worktrees"):
        # Common dir is <main>/.git
        return common_dir.parent
    return toplevel


def working_tree_changes(repo_root: Path, *, include_untracked: bool = False) -> List[str]:
    """Return ``git status --porcelain`` lines for ``repo_root``.

    Untracked files are ignored by default: a directory rename carries them
    along, so only tracked modifications count as uncommitted work.
    """
    args = ["status", "--porcelain"]
    if not include_untracked:
        args.append("--untracked-files=no")
    result = run_git(args, cwd=repo_root, operation="git status")
    return [line for line in result.stdout.splitlines() if line.strip()]


def is_clean_working_tree(repo_root: Path) -> bool:
    """Return True when the working tree has no staged or unstaged changes."""
    return not working_tree_changes(repo_root)


def current_branch(path: Path) -> Optional[str]:
    """Return the branch checked out at ``path`` (None when detached)."""
    result = run_git(["branch", "--show-current"], cwd=path, operation="git branch --show-current")
    branch = result.stdout.strip()
    return branch or None


def probe_worktree(path: Path) -> bool:
    """Run a trivial read-only git command inside ``path``; True when it succeeds."""
    if not Path(path).is_dir():
        return False
    try:
        run_git(["status", "--porcelain"], cwd=path, operation="git status")
    except GitCommandError:
        return False
    return True


__all__ = [
    "locate_root",
    "git_common_dir",
    "working_tree_changes",
    "is_clean_working_tree",
    "current_branch",
    "probe_worktree",
]
