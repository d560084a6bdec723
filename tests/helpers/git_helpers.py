"""Git operation helpers for tests (plain subprocess, independent of the code under test)."""
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List


def git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


def git_init_repo(repo_path: Path, branch: str = "main") -> None:
    """Initialize a repository with a README committed on ``branch``."""
    git(repo_path, "init", "-b", branch)
    (repo_path / "README.md").write_text("# test repo\n", encoding="utf-8")
    git_commit(repo_path, "init")


def git_commit(repo_path: Path, message: str) -> None:
    git(repo_path, "add", "-A")
    git(repo_path, "commit", "-m", message)


def git_create_worktree(repo_path: Path, worktree_path: Path, branch: str, base_branch: str = "main") -> None:
    git(repo_path, "worktree", "add", "-b", branch, str(worktree_path), base_branch)


def git_list_worktrees(repo_path: Path) -> List[Path]:
    """Worktree paths from ``git worktree list --porcelain`` (main first)."""
    out = git(repo_path, "worktree", "list", "--porcelain")
    return [Path(line.split(" ", 1)[1]) for line in out.splitlines() if line.startswith("worktree ")]


def git_branches(repo_path: Path) -> List[str]:
    out = git(repo_path, "branch", "--format=%(refname:short)")
    return [line.strip() for line in out.splitlines() if line.strip()]


def git_status_ok(path: Path) -> bool:
    result = subprocess.run(["git", "status", "--porcelain"], cwd=path, capture_output=True, text=True)
    return result.returncode == 0
