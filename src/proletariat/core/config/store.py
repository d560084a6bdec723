"""Project config persistence (``<repo>/.proletariat/repo.json``).

The store resolves canonical vs legacy paths, validates documents against
the bundled JSON Schemas and re-attaches the live theme on load. It never
trusts a theme blob embedded on disk.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from proletariat.core.exceptions import ConfigCorruptError, NotInitializedError
from proletariat.core.file_io import read_json, write_json_atomic
from proletariat.core.schemas import validate_payload
from proletariat.core.settings import Settings, load_settings
from proletariat.core.themes import get_theme

from .models import ProjectConfig

if TYPE_CHECKING:
    from proletariat.core.reports import MigrationReport

logger = logging.getLogger(__name__)


def is_current_shape(data: Dict[str, Any]) -> bool:
    """True when ``data`` carries ``formatVersion`` (otherwise it is the legacy shape)."""
    return "formatVersion" in data


class ConfigStore:
    """Reads and writes the project config of one repository."""

    def __init__(self, repo_root: Path, settings: Optional[Settings] = None) -> None:
        self.repo_root = Path(repo_root)
        self.settings = settings or load_settings()

    # ---------- Paths ----------

    @property
    def config_dir(self) -> Path:
        return self.repo_root / self.settings.config_dir

    @property
    def canonical_path(self) -> Path:
        return self.config_dir / self.settings.repo_file

    @property
    def legacy_path(self) -> Path:
        return self.config_dir / self.settings.legacy_file

    def backup_path(self, path: Path) -> Path:
        return path.with_name(path.name + self.settings.legacy_backup_suffix)

    def exists(self) -> bool:
        return self.canonical_path.is_file() or self.legacy_path.is_file()

    def source_path(self) -> Optional[Path]:
        """The file ``load()`` would read (canonical wins over legacy)."""
        if self.canonical_path.is_file():
            return self.canonical_path
        if self.legacy_path.is_file():
            return self.legacy_path
        return None

    # ---------- Reading ----------

    def read_raw(self) -> Tuple[Path, Dict[str, Any]]:
        """Return the source path and its parsed JSON object.

        Raises:
            NotInitializedError: When no config file exists.
            ConfigCorruptError: When the file is not a JSON object.
        """
        path = self.source_path()
        if path is None:
            raise NotInitializedError(
                f"Proletariat not initialized in {self.repo_root}. Run `prlt init` first.",
                context={"repoRoot": str(self.repo_root)},
            )
        data = read_json(path)
        if not isinstance(data, dict):
            raise ConfigCorruptError(
                f"Config {path} must contain a JSON object",
                context={"path": str(path)},
            )
        return path, data

    @staticmethod
    def parse(data: Dict[str, Any], *, source: str = "") -> ProjectConfig:
        """Validate and convert a raw document of either shape."""
        if is_current_shape(data):
            validate_payload(data, "repo-config", source=source)
            config = ProjectConfig.from_dict(data)
        else:
            validate_payload(data, "legacy-config", source=source)
            config = ProjectConfig.from_legacy_dict(data)
        # Fails with UnknownThemeError rather than falling back to a default.
        get_theme(config.theme_name)
        return config

    def load(self) -> ProjectConfig:
        path, data = self.read_raw()
        config = self.parse(data, source=str(path))
        logger.debug("Loaded config from %s (format %s)", path, config.format_version)
        return config

    # ---------- Writing ----------

    def save(self, config: ProjectConfig) -> Path:
        """Atomically write ``config`` to the canonical path."""
        write_json_atomic(self.canonical_path, config.to_dict())
        logger.debug("Saved config to %s", self.canonical_path)
        return self.canonical_path

    def migrate(self, *, confirm_create_registry: Optional[Callable[[Path], bool]] = None) -> "MigrationReport":
        """Upgrade the on-disk config to the current format. See :func:`migrate_config`."""
        from .upgrade import migrate_config

        return migrate_config(self, confirm_create_registry=confirm_create_registry)


__all__ = ["ConfigStore", "is_current_shape"]
