from __future__ import annotations

from pathlib import Path

import pytest

from proletariat.core.exceptions import ConfigCorruptError
from proletariat.core.settings import (
    Settings,
    apply_env_overrides,
    deep_merge,
    load_settings,
    load_settings_mapping,
    user_config_path,
)


def test_defaults_load() -> None:
    s = load_settings()
    assert s.config_dir == ".proletariat"
    assert s.repo_file == "repo.json"
    assert s.legacy_file == "config.json"
    assert s.integration_branch == "main"
    assert s.default_theme == "billionaires"
    assert s.git_timeout_seconds is None
    assert s.agent_branch("bezos") == "bezos-workspace"


def test_deep_merge_does_not_mutate_inputs() -> None:
    base = {"a": 1, "b": {"c": 2}}
    merged = deep_merge(base, {"b": {"d": 3}})
    assert merged == {"a": 1, "b": {"c": 2, "d": 3}}
    assert base == {"a": 1, "b": {"c": 2}}


def test_env_overrides_are_coerced() -> None:
    cfg = apply_env_overrides(
        {"git": {"integration_branch": "main"}},
        environ={
            "PRLT_GIT__INTEGRATION_BRANCH": "develop",
            "PRLT_GIT__TIMEOUT_SECONDS": "30",
            "PRLT_FEATURES__ENABLED": "true",
            "OTHER": "ignored",
        },
    )
    assert cfg["git"] == {"integration_branch": "develop", "timeout_seconds": 30}
    assert cfg["features"] == {"enabled": True}


def test_env_override_with_empty_segment_is_rejected() -> None:
    with pytest.raises(ConfigCorruptError):
        apply_env_overrides({}, environ={"PRLT_GIT____X": "1"})


def test_user_file_and_env_layering(isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    user_file = user_config_path()
    assert user_file == isolated_env / "proletariat" / "config.yaml"
    user_file.parent.mkdir(parents=True)
    user_file.write_text("git:\n  integration_branch: trunk\nthemes:\n  default: toyotas\n", encoding="utf-8")
    monkeypatch.setenv("PRLT_THEMES__DEFAULT", "companies")

    s = Settings.from_mapping(load_settings_mapping())
    assert s.integration_branch == "trunk"
    assert s.default_theme == "companies"
    # Untouched keys keep their bundled defaults.
    assert s.branch_suffix == "-workspace"


def test_env_overrides_do_not_leak_into_cached_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRLT_GIT__BRANCH_SUFFIX", "-agent")
    assert load_settings_mapping()["git"]["branch_suffix"] == "-agent"
    monkeypatch.delenv("PRLT_GIT__BRANCH_SUFFIX")
    assert load_settings_mapping()["git"]["branch_suffix"] == "-workspace"


def test_invalid_user_yaml_fails_closed(isolated_env: Path) -> None:
    user_file = user_config_path()
    user_file.parent.mkdir(parents=True)
    user_file.write_text("git: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigCorruptError):
        load_settings_mapping()
