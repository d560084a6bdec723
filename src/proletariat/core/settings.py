"""Layered settings for the prlt tool itself.

Resolution order (lowest → highest priority):
    1. Bundled defaults: ``proletariat/data/config/defaults.yaml``
    2. User file: ``$XDG_CONFIG_HOME/proletariat/config.yaml``
    3. Environment variables: ``PRLT_<section>__<key>``

These settings describe how the tool behaves (file names, branch naming,
integration branch). They are distinct from the per-repository project
config, which lives in :mod:`proletariat.core.config`.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from proletariat.core.exceptions import ConfigCorruptError
from proletariat.data import read_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "PRLT_"


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries without mutating inputs.

    Example:
        >>> deep_merge({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
        {'a': 1, 'b': {'c': 2, 'd': 3}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _as_bool(v: str) -> Optional[bool]:
    low = v.strip().lower()
    if low in {"true", "false"}:
        return low == "true"
    return None


def _as_int(v: str) -> Optional[int]:
    if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
        return int(v)
    return None


def _as_float(v: str) -> Optional[float]:
    s = v.strip()
    if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
        return float(s)
    return None


def _as_json(v: str) -> Optional[Any]:
    s = v.strip()
    if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
        try:
            return json.loads(s)
        except ValueError:
            return None
    return None


def _coerce_type(value: str) -> Any:
    if value.strip().lower() in {"null", "none"}:
        return None
    for caster in (_as_bool, _as_int, _as_float, _as_json):
        result = caster(value)
        if result is not None:
            return result
    return value.strip()


def _parse_env_key(raw: str) -> List[str]:
    segs = raw.split("__")
    if any(seg == "" for seg in segs):
        raise ConfigCorruptError(
            f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.",
            context={"key": raw},
        )
    return [seg.lower() for seg in segs]


def apply_env_overrides(cfg: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Apply ``PRLT_<section>__<key>`` overrides onto ``cfg`` (in place)."""
    env = os.environ if environ is None else environ
    for key in sorted(env.keys()):
        if not key.startswith(ENV_PREFIX):
            continue
        raw = key[len(ENV_PREFIX):]
        if not raw:
            continue
        path = _parse_env_key(raw)
        cur = cfg
        for part in path[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[path[-1]] = _coerce_type(env[key])
    return cfg


def user_config_path() -> Path:
    """Return the per-user settings file path (may not exist)."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "proletariat" / "config.yaml"


def _load_user_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        # Fail closed: settings must never silently ignore invalid YAML.
        raise ConfigCorruptError(
            f"Invalid YAML in settings file {path}: {exc}",
            context={"path": str(path)},
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigCorruptError(
            f"Settings file {path} must contain a mapping",
            context={"path": str(path)},
        )
    return data


@dataclass(frozen=True)
class Settings:
    """Typed view of the merged settings mapping."""

    config_dir: str
    repo_file: str
    legacy_file: str
    legacy_backup_suffix: str
    workspace_file: str
    git_executable: str
    integration_branch: str
    branch_suffix: str
    git_timeout_seconds: Optional[float]
    default_theme: str
    log_level: str

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "Settings":
        try:
            paths = data["paths"]
            git = data["git"]
            timeout = git.get("timeout_seconds")
            return cls(
                config_dir=str(paths["config_dir"]),
                repo_file=str(paths["repo_file"]),
                legacy_file=str(paths["legacy_file"]),
                legacy_backup_suffix=str(paths["legacy_backup_suffix"]),
                workspace_file=str(paths["workspace_file"]),
                git_executable=str(git.get("executable") or "git"),
                integration_branch=str(git["integration_branch"]),
                branch_suffix=str(git["branch_suffix"]),
                git_timeout_seconds=float(timeout) if timeout is not None else None,
                default_theme=str(data["themes"]["default"]),
                log_level=str(data.get("logging", {}).get("level", "WARNING")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigCorruptError(f"Invalid prlt settings: {exc}") from exc

    def agent_branch(self, agent: str) -> str:
        """Branch name used for an agent's worktree."""
        return f"{agent}{self.branch_suffix}"


def load_settings_mapping(user_file: Optional[Path] = None) -> Dict[str, Any]:
    """Return the merged raw settings mapping."""
    defaults = copy.deepcopy(read_yaml("config", "defaults.yaml") or {})
    merged = deep_merge(defaults, _load_user_file(user_file or user_config_path()))
    return apply_env_overrides(merged)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load settings once per process."""
    settings = Settings.from_mapping(load_settings_mapping())
    logger.debug("Loaded settings: %s", settings)
    return settings


def clear_settings_cache() -> None:
    """Test helper: forget cached settings."""
    load_settings.cache_clear()


__all__ = [
    "Settings",
    "load_settings",
    "load_settings_mapping",
    "clear_settings_cache",
    "apply_env_overrides",
    "deep_merge",
    "user_config_path",
]
