from __future__ import annotations

from pathlib import Path

import pytest

from helpers.git_helpers import git, git_create_worktree
from proletariat.core.exceptions import GitCommandError, NotAGitRepositoryError
from proletariat.core.git import (
    add_worktree,
    branch_exists,
    current_branch,
    find_worktree,
    git_common_dir,
    linked_worktrees,
    list_branches,
    locate_root,
    probe_worktree,
    remove_worktree,
    run_git,
    working_tree_changes,
)


@pytest.mark.requires_git
class TestRepository:
    def test_locate_root_from_subdirectory(self, git_repo: Path) -> None:
        sub = git_repo / "src" / "pkg"
        sub.mkdir(parents=True)
        assert locate_root(sub) == git_repo

    def test_locate_root_outside_repository(self, tmp_path: Path) -> None:
        outside = tmp_path / "plain"
        outside.mkdir()
        with pytest.raises(NotAGitRepositoryError):
            locate_root(outside)

    def test_locate_root_from_linked_worktree(self, git_repo: Path) -> None:
        wt = git_repo.parent / "linked"
        git_create_worktree(git_repo, wt, "linked-branch")

        assert locate_root(wt, main=True) == git_repo
        assert locate_root(wt, main=False) == wt.resolve()
        assert git_common_dir(wt) == git_repo / ".git"

    def test_working_tree_changes_ignores_untracked(self, git_repo: Path) -> None:
        (git_repo / "scratch.txt").write_text("x", encoding="utf-8")
        assert working_tree_changes(git_repo) == []
        assert working_tree_changes(git_repo, include_untracked=True) == ["?? scratch.txt"]

        (git_repo / "README.md").write_text("changed\n", encoding="utf-8")
        assert working_tree_changes(git_repo) == [" M README.md"]

    def test_current_branch(self, git_repo: Path) -> None:
        assert current_branch(git_repo) == "main"
        git(git_repo, "checkout", "--detach")
        assert current_branch(git_repo) is None

    def test_run_git_failure_carries_context(self, git_repo: Path) -> None:
        with pytest.raises(GitCommandError) as exc_info:
            run_git(["checkout", "no-such-branch"], cwd=git_repo, operation="git checkout")
        ctx = exc_info.value.context
        assert ctx["operation"] == "git checkout"
        assert ctx["returncode"] != 0
        assert ctx["cwd"] == str(git_repo)
        assert "no-such-branch" in ctx["stderr"]


@pytest.mark.requires_git
class TestWorktrees:
    def test_add_list_remove(self, git_repo: Path) -> None:
        wt = git_repo.parent / "agents" / "bezos"
        add_worktree(git_repo, wt, branch="bezos-workspace", start_point="main")

        linked = linked_worktrees(git_repo)
        assert [e.path for e in linked] == [wt.resolve()]
        assert linked[0].branch == "bezos-workspace"
        assert find_worktree(git_repo, wt) is not None
        assert branch_exists(git_repo, "bezos-workspace")
        assert probe_worktree(wt)

        remove_worktree(git_repo, wt)
        assert linked_worktrees(git_repo) == []
        assert not wt.exists()
        # Branches outlive their worktrees.
        assert "bezos-workspace" in list_branches(git_repo)

    def test_add_worktree_on_existing_branch(self, git_repo: Path) -> None:
        git(git_repo, "branch", "gates-workspace")
        wt = git_repo.parent / "gates"
        add_worktree(git_repo, wt, branch="gates-workspace", new_branch=False)
        assert current_branch(wt) == "gates-workspace"

    def test_probe_missing_directory(self, tmp_path: Path) -> None:
        assert not probe_worktree(tmp_path / "nope")
