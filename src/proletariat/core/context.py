"""Explicit per-command context.

Operations receive the repository root, settings, store and loaded config
through a :class:`ProjectContext` instead of re-deriving them from the
current directory.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from proletariat.core.config import ConfigStore, ProjectConfig
from proletariat.core.git import locate_root
from proletariat.core.settings import Settings, load_settings
from proletariat.core.themes import Theme


@dataclass
class ProjectContext:
    repo_root: Path
    settings: Settings
    store: ConfigStore
    config: ProjectConfig

    @property
    def theme(self) -> Theme:
        return self.config.theme

    @property
    def repo_name(self) -> str:
        return self.repo_root.name

    def save(self) -> Path:
        return self.store.save(self.config)

    @classmethod
    def load(
        cls,
        start: Optional[Path] = None,
        *,
        settings: Optional[Settings] = None,
    ) -> "ProjectContext":
        """Resolve the main repository enclosing ``start`` and load its config.

        Raises:
            NotAGitRepositoryError: ``start`` is not inside a repository.
            NotInitializedError: The repository has no config.
            ConfigCorruptError: The config is unreadable or invalid.
            UnknownThemeError: The config names a theme that does not exist.
        """
        s = settings or load_settings()
        repo_root = locate_root(start, main=True)
        store = ConfigStore(repo_root, s)
        return cls(repo_root=repo_root, settings=s, store=store, config=store.load())


__all__ = ["ProjectContext"]
