"""Workspace registry persisted at ``<baseDir>/.proletariat/workspace.json``.

A workspace groups several repositories (and their agent directories) under
one base directory. The registry only records which repositories joined;
each repository still owns its own project config.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from proletariat.core.exceptions import ConfigCorruptError
from proletariat.core.file_io import ensure_directory, read_json, write_json_atomic
from proletariat.core.schemas import validate_payload
from proletariat.core.settings import Settings, load_settings
from proletariat.core.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

REGISTRY_SCHEMA_VERSION = 1


@dataclass
class WorkspaceRegistry:
    name: str
    created_at: str
    repositories: List[str] = field(default_factory=list)
    schema_version: int = REGISTRY_SCHEMA_VERSION

    def has_repository(self, repo_name: str) -> bool:
        return repo_name in self.repositories

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "name": self.name,
            "createdAt": self.created_at,
            "repositories": list(self.repositories),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceRegistry":
        repos: List[str] = []
        for repo in data.get("repositories", []):
            if str(repo) not in repos:
                repos.append(str(repo))
        return cls(
            schema_version=int(data["schemaVersion"]),
            name=str(data["name"]),
            created_at=str(data["createdAt"]),
            repositories=repos,
        )


def _normalize_legacy(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map early registries (``version`` string, ``created``) onto the current keys."""
    if "schemaVersion" in data:
        return data
    normalized = dict(data)
    normalized.pop("version", None)
    normalized["schemaVersion"] = REGISTRY_SCHEMA_VERSION
    if "createdAt" not in normalized:
        normalized["createdAt"] = str(normalized.pop("created", ""))
    else:
        normalized.pop("created", None)
    return normalized


def registry_path(base_dir: Path, settings: Optional[Settings] = None) -> Path:
    s = settings or load_settings()
    return Path(base_dir) / s.config_dir / s.workspace_file


def load_workspace(base_dir: Path, settings: Optional[Settings] = None) -> Optional[WorkspaceRegistry]:
    """Load the registry under ``base_dir``.

    Returns:
        The registry, or None when ``base_dir`` holds none.

    Raises:
        ConfigCorruptError: When the file exists but is unreadable or invalid.
    """
    path = registry_path(base_dir, settings)
    if not path.is_file():
        return None
    data = read_json(path)
    if not isinstance(data, dict):
        raise ConfigCorruptError(
            f"Workspace registry {path} must contain a JSON object",
            context={"path": str(path)},
        )
    data = _normalize_legacy(data)
    validate_payload(data, "workspace", source=str(path))
    return WorkspaceRegistry.from_dict(data)


def save_workspace(base_dir: Path, registry: WorkspaceRegistry, settings: Optional[Settings] = None) -> Path:
    path = registry_path(base_dir, settings)
    write_json_atomic(path, registry.to_dict())
    return path


def create_workspace(
    base_dir: Path,
    name: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> WorkspaceRegistry:
    """Create an empty registry under ``base_dir`` (named after it by default)."""
    base_dir = ensure_directory(Path(base_dir))
    registry = WorkspaceRegistry(name=name or base_dir.name, created_at=utc_timestamp())
    path = save_workspace(base_dir, registry, settings)
    logger.info("Created workspace registry '%s' at %s", registry.name, path)
    return registry


def add_repository(base_dir: Path, repo_name: str, settings: Optional[Settings] = None) -> bool:
    """Add ``repo_name`` to the registry under ``base_dir``.

    Returns:
        True when the registry changed; False when the repository was already
        listed or no registry exists.
    """
    registry = load_workspace(base_dir, settings)
    if registry is None or registry.has_repository(repo_name):
        return False
    registry.repositories.append(repo_name)
    save_workspace(base_dir, registry, settings)
    logger.info("Added '%s' to workspace '%s'", repo_name, registry.name)
    return True


def find_workspace_root(start: Path, settings: Optional[Settings] = None) -> Optional[Path]:
    """Walk up from ``start`` to the nearest directory holding a registry."""
    current = Path(start).resolve()
    for candidate in (current, *current.parents):
        if registry_path(candidate, settings).is_file():
            return candidate
    return None


def detect_existing_workspaces(repo_root: Path, settings: Optional[Settings] = None) -> List[Path]:
    """Return sibling directories of ``repo_root`` that hold a registry."""
    parent = Path(repo_root).resolve().parent
    found: List[Path] = []
    try:
        entries = sorted(parent.iterdir())
    except OSError as exc:
        logger.debug("Cannot scan %s for workspaces: %s", parent, exc)
        return found
    for entry in entries:
        if entry.is_dir() and registry_path(entry, settings).is_file():
            found.append(entry)
    return found


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
