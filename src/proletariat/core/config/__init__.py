"""Per-repository project config: model, store and format upgrade."""
from __future__ import annotations

from .models import (
    CURRENT_FORMAT_VERSION,
    LEGACY_FORMAT_VERSION,
    LayoutMode,
    ProjectConfig,
    WorkspaceLayout,
)
from .store import ConfigStore, is_current_shape
from .upgrade import migrate_config

__all__ = [
    "CURRENT_FORMAT_VERSION",
    "LEGACY_FORMAT_VERSION",
    "LayoutMode",
    "ProjectConfig",
    "WorkspaceLayout",
    "ConfigStore",
    "is_current_shape",
    "migrate_config",
]
