"""Linked-worktree back-references.

A linked worktree is bound to its repository by two small files that must
point at each other:

- ``<worktree>/.git`` contains ``gitdir: <common-dir>/worktrees/<id>``
- ``<common-dir>/worktrees/<id>/gitdir`` contains ``<worktree>/.git``

Git creates both at ``git worktree add`` time; they go stale when either
side moves on disk.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

GITDIR_PREFIX = "gitdir:"


def expected_back_reference(metadata_dir: Path) -> str:
    """Return the ``.git`` file content that points at ``metadata_dir``."""
    return f"{GITDIR_PREFIX} {metadata_dir}"


def parse_back_reference(content: str) -> Optional[Path]:
    """Extract the metadata path from ``.git`` file content."""
    text = content.strip()
    if not text.startswith(GITDIR_PREFIX):
        return None
    return Path(text[len(GITDIR_PREFIX):].strip())


def read_back_reference(worktree_path: Path) -> Optional[str]:
    """Return the stripped ``<worktree>/.git`` content, or None when the file is missing."""
    git_file = Path(worktree_path) / ".git"
    if not git_file.is_file():
        return None
    return git_file.read_text(encoding="utf-8").strip()


def write_back_reference(worktree_path: Path, metadata_dir: Path) -> None:
    """Point ``<worktree>/.git`` at ``metadata_dir``."""
    git_file = Path(worktree_path) / ".git"
    with open(git_file, "w", encoding="utf-8", newline="\n") as f:
        f.write(expected_back_reference(metadata_dir) + "\n")
    logger.debug("Wrote back-reference %s -> %s", git_file, metadata_dir)


def read_gitdir_pointer(metadata_dir: Path) -> Optional[Path]:
    """Return the worktree ``.git`` path recorded in ``<metadata_dir>/gitdir``."""
    pointer = Path(metadata_dir) / "gitdir"
    if not pointer.is_file():
        return None
    raw = pointer.read_text(encoding="utf-8").strip()
    if not raw:
        return None
    path = Path(raw)
    if not path.is_absolute():
        path = (Path(metadata_dir) / path).resolve()
    return path


def write_gitdir_pointer(metadata_dir: Path, worktree_path: Path) -> None:
    """Point ``<metadata_dir>/gitdir`` back at ``<worktree>/.git``."""
    pointer = Path(metadata_dir) / "gitdir"
    with open(pointer, "w", encoding="utf-8", newline="\n") as f:
        f.write(f"{Path(worktree_path) / '.git'}\n")
    logger.debug("Wrote gitdir pointer %s -> %s", pointer, worktree_path)


def find_metadata_dir(common_dir: Path, worktree_path: Path) -> Path:
    """Locate ``<common_dir>/worktrees/<id>`` for ``worktree_path``.

    Git names the metadata directory after the worktree's basename, adding a
    numeric suffix on collisions, so the entry whose ``gitdir`` pointer names
    this worktree wins. Falls back to the basename.
    """
    worktrees_dir = Path(common_dir) / "worktrees"
    target = (Path(worktree_path) / ".git").resolve()
    if worktrees_dir.is_dir():
        for candidate in sorted(worktrees_dir.iterdir()):
            pointer = read_gitdir_pointer(candidate)
            if pointer is not None and pointer.resolve() == target:
                return candidate
    return worktrees_dir / Path(worktree_path).name


__all__ = [
    "GITDIR_PREFIX",
    "expected_back_reference",
    "parse_back_reference",
    "read_back_reference",
    "write_back_reference",
    "read_gitdir_pointer",
    "write_gitdir_pointer",
    "find_metadata_dir",
]
