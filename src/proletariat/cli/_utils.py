"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
from pathlib import Path

from proletariat.core.context import ProjectContext
from proletariat.core.git import locate_root


def get_repo_root(args: argparse.Namespace) -> Path:
    """Return the main repository root from ``--repo-root`` or the current directory.

    Raises:
        NotAGitRepositoryError: When the path is not inside a repository.
    """
    explicit = getattr(args, "repo_root", None)
    return locate_root(Path(explicit) if explicit else None, main=True)


def load_context(args: argparse.Namespace) -> ProjectContext:
    """Load the project context for the repository ``args`` points at."""
    return ProjectContext.load(get_repo_root(args))


__all__ = ["get_repo_root", "load_context"]
