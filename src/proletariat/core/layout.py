"""Where a repository's agent worktrees live.

Pure path arithmetic: nothing here touches the filesystem.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from proletariat.core.config.models import LayoutMode, WorkspaceLayout
from proletariat.core.themes import Theme


def agents_dir_name(project_name: str, theme: Theme) -> str:
    """Default agents directory name, e.g. ``myrepo-staff``."""
    return f"{project_name}-{theme.directory}"


def resolve_layout(
    theme: Theme,
    repo_root: Path,
    project_name: Optional[str] = None,
    *,
    workspace: Optional[str] = None,
    workspace_root: Optional[Path] = None,
) -> Tuple[Path, WorkspaceLayout]:
    """Compute ``(workspace_dir, layout)`` for a repository.

    Precedence, highest first:

    - ``workspace_root``: custom mode; agents live exactly there.
    - ``workspace``: workspace mode; base dir is ``<parent>/<workspace>``
      and agents live in ``<base>/<project>-<suffix>``.
    - default: sibling mode; agents live in ``<parent>/<project>-<suffix>``.

    ``workspace_root`` and ``workspace`` are mutually exclusive; callers
    must not pass both.
    """
    repo_root = Path(repo_root)
    project = project_name or repo_root.name
    parent = repo_root.parent

    if workspace_root is not None:
        workspace_dir = Path(workspace_root)
        if not workspace_dir.is_absolute():
            workspace_dir = parent / workspace_dir
        return workspace_dir, WorkspaceLayout(mode=LayoutMode.CUSTOM, base_dir=workspace_dir.parent)

    if workspace:
        base_dir = parent / workspace
        layout = WorkspaceLayout(mode=LayoutMode.WORKSPACE, base_dir=base_dir, workspace_name=workspace)
        return base_dir / agents_dir_name(project, theme), layout

    return parent / agents_dir_name(project, theme), WorkspaceLayout(mode=LayoutMode.SIBLING, base_dir=parent)


__all__ = ["agents_dir_name", "resolve_layout"]
