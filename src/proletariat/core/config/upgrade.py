"""One-way upgrade of project configs to the current format.

Steps, each recorded in the returned :class:`MigrationReport`:

1. ``config.json`` (legacy) becomes ``repo.json``; the old file is kept as
   ``config.json.backup``.
2. A ``repo.json`` that still embeds a theme, or has an older format, is
   rewritten in the current shape after saving ``repo.json.backup``.
3. Workspace-mode layouts get their registry created (when confirmed) and
   the repository listed in it.

Re-running on an upgraded repository changes nothing.
"""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from proletariat.core.reports import MigrationReport
from proletariat.core.workspace import add_repository, create_workspace, find_workspace_root, load_workspace

from .models import CURRENT_FORMAT_VERSION, LayoutMode, ProjectConfig

if TYPE_CHECKING:
    from .store import ConfigStore

logger = logging.getLogger(__name__)


def _describe_changes(raw: dict, config: ProjectConfig, label: str) -> list:
    changes = []
    if "theme" in raw:
        changes.append(f"Removed embedded theme data from {label} (themes are looked up by name)")
    old_format = raw.get("formatVersion")
    if old_format != CURRENT_FORMAT_VERSION:
        changes.append(f"Upgraded {label} to format {CURRENT_FORMAT_VERSION} (was {old_format or 1})")
    return changes


def _upgrade_legacy_file(store: "ConfigStore", report: MigrationReport) -> None:
    legacy = store.legacy_path
    raw = store.read_raw()[1]
    config = store.parse(raw, source=str(legacy))
    config.format_version = CURRENT_FORMAT_VERSION
    store.save(config)

    backup = store.backup_path(legacy)
    os.replace(legacy, backup)
    report.backup_path = backup
    report.changes.append(f"Migrated {legacy.name} to {store.canonical_path.name}")
    report.changes.extend(_describe_changes(raw, config, store.canonical_path.name))
    logger.info("Migrated %s -> %s (backup %s)", legacy, store.canonical_path, backup)


def _upgrade_canonical_file(store: "ConfigStore", report: MigrationReport) -> None:
    path, raw = store.read_raw()
    config = store.parse(raw, source=str(path))
    config.format_version = CURRENT_FORMAT_VERSION
    if config.to_dict() == raw:
        return

    backup = store.backup_path(path)
    shutil.copy2(path, backup)
    store.save(config)
    report.backup_path = backup
    changes = _describe_changes(raw, config, path.name)
    report.changes.extend(changes or [f"Normalized {path.name}"])
    logger.info("Rewrote %s in format %s (backup %s)", path, CURRENT_FORMAT_VERSION, backup)


def _retire_stale_legacy(store: "ConfigStore", report: MigrationReport) -> None:
    legacy = store.legacy_path
    if not (legacy.is_file() and store.canonical_path.is_file()):
        return
    backup = store.backup_path(legacy)
    os.replace(legacy, backup)
    report.changes.append(f"Retired stale {legacy.name} (kept as {backup.name})")
    if report.backup_path is None:
        report.backup_path = backup


def _sync_registry(
    store: "ConfigStore",
    config: ProjectConfig,
    report: MigrationReport,
    confirm_create_registry: Optional[Callable[[Path], bool]],
) -> None:
    settings = store.settings
    repo_name = store.repo_root.name

    if config.layout.mode is not LayoutMode.WORKSPACE:
        enclosing = find_workspace_root(store.repo_root.parent, settings)
        registry = load_workspace(enclosing, settings) if enclosing is not None else None
        if registry is not None:
            report.workspace_name = registry.name
            report.notes.append(f"Part of workspace: {registry.name}")
        else:
            report.notes.append("Use `prlt init --workspace` to organize multiple repositories")
        return

    base_dir = config.layout.base_dir
    registry = load_workspace(base_dir, settings)
    if registry is None:
        if confirm_create_registry is None or not confirm_create_registry(base_dir):
            report.notes.append(f"Workspace layout at {base_dir} has no registry")
            return
        registry = create_workspace(base_dir, config.layout.workspace_name, settings)
        add_repository(base_dir, repo_name, settings)
        report.registry_created = True
        report.workspace_name = registry.name
        report.changes.append(f"Created workspace registry '{registry.name}' at {base_dir}")
        return

    report.workspace_name = registry.name
    if registry.has_repository(repo_name):
        report.notes.append(f"Part of workspace: {registry.name}")
        return
    add_repository(base_dir, repo_name, settings)
    report.registry_joined = True
    report.changes.append(f"Added '{repo_name}' to workspace '{registry.name}'")


def migrate_config(
    store: "ConfigStore",
    *,
    confirm_create_registry: Optional[Callable[[Path], bool]] = None,
) -> MigrationReport:
    """Upgrade ``store``'s config in place.

    Args:
        store: Config store of the repository to upgrade.
        confirm_create_registry: Called with the workspace base dir when a
            workspace layout has no registry; returning True creates it.

    Raises:
        NotInitializedError: When the repository has no config.
        ConfigCorruptError: When a document is unreadable or invalid.
    """
    report = MigrationReport()

    if store.legacy_path.is_file() and not store.canonical_path.is_file():
        _upgrade_legacy_file(store, report)
    else:
        _upgrade_canonical_file(store, report)
        _retire_stale_legacy(store, report)

    _sync_registry(store, store.load(), report, confirm_create_registry)

    if report.already_up_to_date:
        logger.info("Config of %s is already up to date", store.repo_root)
    return report


__all__ = ["migrate_config"]
