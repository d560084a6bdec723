"""Multi-repository workspace registry."""
from __future__ import annotations

from .registry import (
    REGISTRY_SCHEMA_VERSION,
    WorkspaceRegistry,
    add_repository,
    create_workspace,
    detect_existing_workspaces,
    find_workspace_root,
    load_workspace,
    registry_path,
    save_workspace,
)

__all__ = [
    "REGISTRY_SCHEMA_VERSION",
    "WorkspaceRegistry",
    "registry_path",
    "load_workspace",
    "save_workspace",
    "create_workspace",
    "add_repository",
    "find_workspace_root",
    "detect_existing_workspaces",
]
