"""Agent worktree operations: lifecycle, repair/health and relocation."""
from __future__ import annotations

from .lifecycle import agent_state, create_agents, init_project, remove_agents, status
from .relocate import relocate_repository, relocation_target, snapshot_worktrees
from .repair import health, repair, repair_worktree

__all__ = [
    "init_project",
    "create_agents",
    "remove_agents",
    "status",
    "agent_state",
    "health",
    "repair",
    "repair_worktree",
    "relocate_repository",
    "relocation_target",
    "snapshot_worktrees",
]
