"""Git utilities for Proletariat.

Every git invocation and every parse of git output or git metadata files
lives in this package:
- runner: subprocess execution and error wrapping
- repository: root discovery and working-tree status
- worktree: ``git worktree`` / ``git branch`` wrappers and porcelain parsing
- backrefs: the ``.git`` file / ``gitdir`` pointer pair of linked worktrees
"""
from __future__ import annotations

from .backrefs import (
    expected_back_reference,
    find_metadata_dir,
    parse_back_reference,
    read_back_reference,
    read_gitdir_pointer,
    write_back_reference,
    write_gitdir_pointer,
)
from .repository import (
    current_branch,
    git_common_dir,
    is_clean_working_tree,
    locate_root,
    probe_worktree,
    working_tree_changes,
)
from .runner import run_git
from .worktree import (
    WorktreeEntry,
    add_worktree,
    branch_exists,
    find_worktree,
    find_worktree_in,
    linked_worktrees,
    list_branches,
    list_worktrees,
    parse_worktree_list,
    remove_worktree,
    resolve_start_point,
)

__all__ = [
    # runner
    "run_git",
    # repository
    "locate_root",
    "git_common_dir",
    "working_tree_changes",
    "is_clean_working_tree",
    "current_branch",
    "probe_worktree",
    # worktree
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
    # backrefs
    "expected_back_reference",
    "parse_back_reference",
    "find_metadata_dir",
    "read_back_reference",
    "write_back_reference",
    "read_gitdir_pointer",
    "write_gitdir_pointer",
]
