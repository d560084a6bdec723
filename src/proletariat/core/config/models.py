"""Project config and workspace layout models."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from proletariat.core.themes import Theme, get_theme

# Current on-disk format of repo.json. Format 1 is the legacy config.json shape.
CURRENT_FORMAT_VERSION = 2
LEGACY_FORMAT_VERSION = 1


class LayoutMode(str, Enum):
    SIBLING = "sibling"
    WORKSPACE = "workspace"
    CUSTOM = "custom"


@dataclass(frozen=True)
class WorkspaceLayout:
    """Where agent worktrees live relative to the repository."""

    mode: LayoutMode
    base_dir: Path
    workspace_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"mode": self.mode.value, "baseDir": str(self.base_dir)}
        if self.workspace_name is not None:
            data["workspaceName"] = self.workspace_name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceLayout":
        name = data.get("workspaceName")
        return cls(
            mode=LayoutMode(data["mode"]),
            base_dir=Path(data["baseDir"]),
            workspace_name=str(name) if name is not None else None,
        )


@dataclass
class ProjectConfig:
    """Per-repository state persisted in ``.proletariat/repo.json``.

    ``active_agents`` is what this tool believes; git's worktree list is the
    truth. Consumers reconcile the two instead of trusting either blindly.
    """

    project_name: str
    theme_name: str
    workspace_dir: Path
    layout: WorkspaceLayout
    created_at: str
    active_agents: List[str] = field(default_factory=list)
    format_version: int = CURRENT_FORMAT_VERSION
    version: Optional[str] = None

    @property
    def theme(self) -> Theme:
        """The live theme for ``theme_name`` (never a persisted copy)."""
        return get_theme(self.theme_name)

    def agent_path(self, agent: str) -> Path:
        return self.workspace_dir / agent

    def has_agent(self, agent: str) -> bool:
        return agent in self.active_agents

    def add_agent(self, agent: str) -> bool:
        """Append ``agent`` unless already present. Returns True when added."""
        if agent in self.active_agents:
            return False
        self.active_agents.append(agent)
        return True

    def remove_agent(self, agent: str) -> bool:
        """Drop ``agent``. Returns True when it was present."""
        if agent not in self.active_agents:
            return False
        self.active_agents = [a for a in self.active_agents if a != agent]
        return True

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"formatVersion": self.format_version}
        if self.version is not None:
            data["version"] = self.version
        data.update(
            {
                "projectName": self.project_name,
                "themeName": self.theme_name,
                "workspaceDir": str(self.workspace_dir),
                "activeAgents": list(self.active_agents),
                "createdAt": self.created_at,
                "layout": self.layout.to_dict(),
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectConfig":
        """Build from a current-format (``formatVersion`` >= 2) document."""
        version = data.get("version")
        return cls(
            format_version=int(data["formatVersion"]),
            version=str(version) if version is not None else None,
            project_name=str(data["projectName"]),
            theme_name=str(data["themeName"]),
            workspace_dir=Path(data["workspaceDir"]),
            active_agents=[str(a) for a in data.get("activeAgents", [])],
            created_at=str(data["createdAt"]),
            layout=WorkspaceLayout.from_dict(data["layout"]),
        )

    @classmethod
    def from_legacy_dict(cls, data: Dict[str, Any]) -> "ProjectConfig":
        """Build from a format-1 document (``config.json`` or pre-versioned ``repo.json``).

        Any embedded ``theme`` blob is ignored. A missing layout is derived as
        a sibling layout rooted at the parent of ``workspaceDir``.
        """
        workspace_dir = Path(data["workspaceDir"])
        raw_layout = data.get("layout")
        if isinstance(raw_layout, dict) and raw_layout.get("mode") and raw_layout.get("baseDir"):
            layout = WorkspaceLayout.from_dict(raw_layout)
        else:
            layout = WorkspaceLayout(mode=LayoutMode.SIBLING, base_dir=workspace_dir.parent)
        version = data.get("version")
        agents: List[str] = []
        for agent in data.get("activeAgents", []):
            if str(agent) not in agents:
                agents.append(str(agent))
        return cls(
            format_version=LEGACY_FORMAT_VERSION,
            version=str(version) if version is not None else None,
            project_name=str(data["projectName"]),
            theme_name=str(data["themeName"]),
            workspace_dir=workspace_dir,
            active_agents=agents,
            created_at=str(data.get("initialized") or data.get("createdAt") or ""),
            layout=layout,
        )


__all__ = [
    "CURRENT_FORMAT_VERSION",
    "LEGACY_FORMAT_VERSION",
    "LayoutMode",
    "WorkspaceLayout",
    "ProjectConfig",
]
