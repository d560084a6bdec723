from __future__ import annotations

import json
from pathlib import Path

import pytest

from proletariat.core.exceptions import ConfigCorruptError
from proletariat.core.workspace import (
    REGISTRY_SCHEMA_VERSION,
    WorkspaceRegistry,
    add_repository,
    create_workspace,
    detect_existing_workspaces,
    find_workspace_root,
    load_workspace,
    registry_path,
)


def test_create_defaults_name_to_directory(tmp_path: Path) -> None:
    base = tmp_path / "acme"
    registry = create_workspace(base)

    assert registry.name == "acme"
    assert registry.repositories == []
    assert registry.created_at.endswith("Z")
    data = json.loads(registry_path(base).read_text(encoding="utf-8"))
    assert data["schemaVersion"] == REGISTRY_SCHEMA_VERSION
    assert data["name"] == "acme"


def test_load_missing_registry_returns_none(tmp_path: Path) -> None:
    assert load_workspace(tmp_path) is None


def test_add_repository_is_idempotent(tmp_path: Path) -> None:
    create_workspace(tmp_path, "acme")

    assert add_repository(tmp_path, "api")
    assert add_repository(tmp_path, "web")
    assert not add_repository(tmp_path, "api")
    assert load_workspace(tmp_path).repositories == ["api", "web"]


def test_add_repository_without_registry(tmp_path: Path) -> None:
    assert not add_repository(tmp_path, "api")
    assert not registry_path(tmp_path).exists()


def test_legacy_registry_keys_are_normalized(tmp_path: Path) -> None:
    path = registry_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text(
        json.dumps({"version": "1.0.0", "name": "old", "created": "2024-01-01", "repositories": ["a", "b"]}),
        encoding="utf-8",
    )

    registry = load_workspace(tmp_path)

    assert registry == WorkspaceRegistry(name="old", created_at="2024-01-01", repositories=["a", "b"])


def test_invalid_registry_is_corrupt(tmp_path: Path) -> None:
    path = registry_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"schemaVersion": 1, "name": ""}), encoding="utf-8")
    with pytest.raises(ConfigCorruptError):
        load_workspace(tmp_path)

    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigCorruptError):
        load_workspace(tmp_path)


def test_find_workspace_root_walks_up(tmp_path: Path) -> None:
    create_workspace(tmp_path / "acme")
    deep = tmp_path / "acme" / "api" / "src"
    deep.mkdir(parents=True)

    assert find_workspace_root(deep) == (tmp_path / "acme").resolve()
    assert find_workspace_root(tmp_path) is None


def test_detect_existing_workspaces_lists_siblings(tmp_path: Path) -> None:
    repo = tmp_path / "myrepo"
    repo.mkdir()
    create_workspace(tmp_path / "acme")
    create_workspace(tmp_path / "zeta")
    (tmp_path / "plain").mkdir()

    found = detect_existing_workspaces(repo)

    assert [p.name for p in found] == ["acme", "zeta"]
