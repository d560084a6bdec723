"""Structured results returned by core operations.

The CLI renders these; core never prints. Every report has ``to_dict()``
for ``--json`` output.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from proletariat.core.config.models import ProjectConfig


def _path(p: Optional[Path]) -> Optional[str]:
    return str(p) if p is not None else None


# ---------------------------------------------------------------------------
# Lifecycle (create / remove)
# ---------------------------------------------------------------------------


class AgentOutcome(str, Enum):
    CREATED = "created"
    ALREADY_ACTIVE = "already_active"
    REMOVED = "removed"
    ALREADY_INACTIVE = "already_inactive"
    UNKNOWN_AGENT = "unknown_agent"
    FAILED = "failed"


@dataclass
class AgentResult:
    agent: str
    outcome: AgentOutcome
    path: Optional[Path] = None
    branch: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent": self.agent,
            "outcome": self.outcome.value,
            "path": _path(self.path),
            "branch": self.branch,
            "error": self.error,
        }


@dataclass
class BatchReport:
    """Per-agent outcomes of a create/remove batch."""

    operation: str
    results: List[AgentResult] = field(default_factory=list)
    config_saved: bool = False

    def add(self, result: AgentResult) -> AgentResult:
        self.results.append(result)
        return result

    def agents_with(self, outcome: AgentOutcome) -> List[str]:
        return [r.agent for r in self.results if r.outcome is outcome]

    @property
    def has_failures(self) -> bool:
        """True when an agent failed, or when no requested name was valid."""
        if any(r.outcome is AgentOutcome.FAILED for r in self.results):
            return True
        return bool(self.results) and all(r.outcome is AgentOutcome.UNKNOWN_AGENT for r in self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "results": [r.to_dict() for r in self.results],
            "configSaved": self.config_saved,
            "ok": not self.has_failures,
        }


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class AgentState(str, Enum):
    UNKNOWN = "unknown"
    ACTIVE = "active"
    STALE = "stale"


@dataclass
class AgentStatus:
    agent: str
    state: AgentState
    path: Path
    in_config: bool
    registered: bool
    branch: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.state is AgentState.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent": self.agent,
            "state": self.state.value,
            "active": self.active,
            "path": str(self.path),
            "inConfig": self.in_config,
            "registered": self.registered,
            "branch": self.branch,
        }


@dataclass
class StatusReport:
    theme_name: str
    workspace_dir: Path
    agents: List[AgentStatus] = field(default_factory=list)
    # Live worktrees under workspace_dir for roster names missing from the config.
    untracked: List[AgentStatus] = field(default_factory=list)

    @property
    def active_agents(self) -> List[str]:
        return [a.agent for a in self.agents if a.active]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "theme": self.theme_name,
            "workspaceDir": str(self.workspace_dir),
            "agents": [a.to_dict() for a in self.agents],
            "untracked": [a.to_dict() for a in self.untracked],
        }


# ---------------------------------------------------------------------------
# Health / repair
# ---------------------------------------------------------------------------


class Health(str, Enum):
    HEALTHY = "healthy"
    BROKEN = "broken"


@dataclass
class WorktreeHealth:
    agent: str
    path: Path
    health: Health

    def to_dict(self) -> Dict[str, Any]:
        return {"agent": self.agent, "path": str(self.path), "health": self.health.value}


@dataclass
class HealthReport:
    worktrees: List[WorktreeHealth] = field(default_factory=list)

    def get(self, agent: str) -> Optional[WorktreeHealth]:
        for item in self.worktrees:
            if item.agent == agent:
                return item
        return None

    @property
    def healthy_count(self) -> int:
        return sum(1 for w in self.worktrees if w.health is Health.HEALTHY)

    @property
    def broken_count(self) -> int:
        return sum(1 for w in self.worktrees if w.health is Health.BROKEN)

    @property
    def ok(self) -> bool:
        return self.broken_count == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "worktrees": [w.to_dict() for w in self.worktrees],
            "healthy": self.healthy_count,
            "broken": self.broken_count,
        }


class RepairOutcome(str, Enum):
    REPAIRED = "repaired"
    ALREADY_CORRECT = "already_correct"
    FAILED = "failed"


@dataclass
class WorktreeRepair:
    agent: str
    path: Path
    outcome: RepairOutcome
    expected: Optional[str] = None
    actual: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent": self.agent,
            "path": str(self.path),
            "outcome": self.outcome.value,
            "expected": self.expected,
            "actual": self.actual,
            "error": self.error,
        }


@dataclass
class RepairReport:
    items: List[WorktreeRepair] = field(default_factory=list)

    def _count(self, outcome: RepairOutcome) -> int:
        return sum(1 for i in self.items if i.outcome is outcome)

    @property
    def repaired(self) -> int:
        return self._count(RepairOutcome.REPAIRED)

    @property
    def already_correct(self) -> int:
        return self._count(RepairOutcome.ALREADY_CORRECT)

    @property
    def failed(self) -> int:
        return self._count(RepairOutcome.FAILED)

    @property
    def counts(self) -> Dict[str, int]:
        return {
            "repaired": self.repaired,
            "alreadyCorrect": self.already_correct,
            "failed": self.failed,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"counts": self.counts, "items": [i.to_dict() for i in self.items]}


# ---------------------------------------------------------------------------
# Config upgrade
# ---------------------------------------------------------------------------


@dataclass
class MigrationReport:
    """Outcome of upgrading a repository config to the current format."""

    changes: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    backup_path: Optional[Path] = None
    registry_created: bool = False
    registry_joined: bool = False
    workspace_name: Optional[str] = None

    @property
    def already_up_to_date(self) -> bool:
        return not self.changes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alreadyUpToDate": self.already_up_to_date,
            "changes": list(self.changes),
            "notes": list(self.notes),
            "backupPath": _path(self.backup_path),
            "registryCreated": self.registry_created,
            "registryJoined": self.registry_joined,
            "workspace": self.workspace_name,
        }


# ---------------------------------------------------------------------------
# Init
# ---------------------------------------------------------------------------


@dataclass
class InitReport:
    config: ProjectConfig
    already_initialized: bool = False
    created_dirs: List[Path] = field(default_factory=list)
    registry_created: bool = False
    registry_joined: bool = False
    moved_to: Optional[Path] = None
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alreadyInitialized": self.already_initialized,
            "config": self.config.to_dict(),
            "createdDirs": [str(p) for p in self.created_dirs],
            "registryCreated": self.registry_created,
            "registryJoined": self.registry_joined,
            "movedTo": _path(self.moved_to),
            "notes": list(self.notes),
        }


# ---------------------------------------------------------------------------
# Relocation
# ---------------------------------------------------------------------------


class RelocationStrategy(str, Enum):
    RELINK = "relink"
    RECREATE = "recreate"


class RelocationState(str, Enum):
    DONE = "done"
    ABORTED = "aborted"
    FAILED = "failed"
    ALREADY_IN_PLACE = "already_in_place"


@dataclass(frozen=True)
class WorktreeSnapshot:
    """A linked worktree as captured before any relocation step mutates state."""

    name: str
    path: Path
    branch: Optional[str]
    metadata_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "branch": self.branch,
            "metadataName": self.metadata_name,
        }


@dataclass
class RelocationReport:
    strategy: RelocationStrategy
    source: Path
    target: Path
    state: RelocationState = RelocationState.ABORTED
    worktrees: List[WorktreeSnapshot] = field(default_factory=list)
    relinked: List[str] = field(default_factory=list)
    recreated: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    restored: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    steps: List[str] = field(default_factory=list)
    manual_steps: List[str] = field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.state in (RelocationState.DONE, RelocationState.ALREADY_IN_PLACE) and not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "source": str(self.source),
            "target": str(self.target),
            "state": self.state.value,
            "worktrees": [w.to_dict() for w in self.worktrees],
            "relinked": list(self.relinked),
            "recreated": list(self.recreated),
            "removed": list(self.removed),
            "restored": list(self.restored),
            "errors": dict(self.errors),
            "steps": list(self.steps),
            "manualSteps": list(self.manual_steps),
            "message": self.message,
        }


__all__ = [
    "AgentOutcome",
    "AgentResult",
    "BatchReport",
    "AgentState",
    "AgentStatus",
    "StatusReport",
    "Health",
    "WorktreeHealth",
    "HealthReport",
    "RepairOutcome",
    "WorktreeRepair",
    "RepairReport",
    "MigrationReport",
    "InitReport",
    "RelocationStrategy",
    "RelocationState",
    "WorktreeSnapshot",
    "RelocationReport",
]
