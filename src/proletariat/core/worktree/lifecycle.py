"""Agent worktree lifecycle: init, create, remove and status.

The config's ``activeAgents`` is what this tool believes; ``git worktree
list`` is the truth. Every operation checks the live list before acting and
folds what it learns back into the config, saved once per batch.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from proletariat import __version__
from proletariat.core.config import ConfigStore, LayoutMode, ProjectConfig
from proletariat.core.context import ProjectContext
from proletariat.core.exceptions import GitCommandError
from proletariat.core.file_io import ensure_directory
from proletariat.core.git import (
    WorktreeEntry,
    add_worktree,
    branch_exists,
    current_branch,
    find_worktree,
    find_worktree_in,
    is_clean_working_tree,
    list_worktrees,
    locate_root,
    remove_worktree,
    resolve_start_point,
)
from proletariat.core.layout import resolve_layout
from proletariat.core.reports import (
    AgentOutcome,
    AgentResult,
    AgentState,
    AgentStatus,
    BatchReport,
    InitReport,
    StatusReport,
)
from proletariat.core.settings import Settings, load_settings
from proletariat.core.themes import get_theme
from proletariat.core.timestamps import utc_timestamp
from proletariat.core.workspace import add_repository, create_workspace, load_workspace

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


def _join_registry(base_dir: Path, workspace_name: Optional[str], repo_name: str,
                   settings: Settings, report: InitReport) -> None:
    if load_workspace(base_dir, settings) is None:
        create_workspace(base_dir, workspace_name, settings)
        report.registry_created = True
    report.registry_joined = add_repository(base_dir, repo_name, settings)


def _maybe_move_repo(repo_root: Path, destination: Path, report: InitReport,
                     confirm_move: Optional[Callable[[Path], bool]]) -> None:
    if confirm_move is None or not confirm_move(destination):
        report.notes.append(f"Repository can be moved into {destination} later with `prlt migrate`")
        return
    if not is_clean_working_tree(repo_root):
        report.notes.append("Repository not moved: working tree has uncommitted changes")
        return
    if destination.exists():
        report.notes.append(f"Repository not moved: {destination} already exists")
        return
    try:
        ensure_directory(destination.parent)
        os.rename(repo_root, destination)
    except OSError as exc:
        logger.error("Failed to move repository %s -> %s: %s", repo_root, destination, exc)
        report.notes.append(f"Repository not moved: {exc}")
        report.notes.append(f"Config is saved at {repo_root}; retry later with `prlt migrate`")
        return
    report.moved_to = destination
    logger.info("Moved repository %s -> %s", repo_root, destination)


def init_project(
    repo_root: Optional[Path] = None,
    theme_name: Optional[str] = None,
    *,
    workspace: Optional[str] = None,
    workspace_root: Optional[Path] = None,
    confirm_move: Optional[Callable[[Path], bool]] = None,
    settings: Optional[Settings] = None,
) -> InitReport:
    """Write the project config and prepare the agents directory.

    Args:
        repo_root: Any path inside the repository (default: cwd).
        theme_name: Theme key; defaults to ``themes.default`` from settings.
        workspace: Named workspace (workspace layout).
        workspace_root: Explicit agents directory (custom layout).
        confirm_move: Workspace layout only. Called with the suggested
            repository destination inside the workspace; returning True moves
            the repository there when its tree is clean.

    Raises:
        NotAGitRepositoryError: ``repo_root`` is not inside a repository.
        UnknownThemeError: ``theme_name`` is not a known theme.
    """
    s = settings or load_settings()
    root = locate_root(repo_root, main=True)
    store = ConfigStore(root, s)

    if store.exists():
        logger.info("Already initialized: %s", root)
        return InitReport(config=store.load(), already_initialized=True)

    theme = get_theme(theme_name or s.default_theme)
    workspace_dir, layout = resolve_layout(
        theme, root, root.name, workspace=workspace, workspace_root=workspace_root
    )
    config = ProjectConfig(
        project_name=root.name,
        theme_name=theme.name,
        workspace_dir=workspace_dir,
        layout=layout,
        created_at=utc_timestamp(),
        version=__version__,
    )
    store.save(config)
    report = InitReport(config=config)

    for directory in (layout.base_dir, workspace_dir):
        if not directory.exists():
            ensure_directory(directory)
            report.created_dirs.append(directory)

    if layout.mode is LayoutMode.WORKSPACE:
        _join_registry(layout.base_dir, layout.workspace_name, root.name, s, report)
        destination = layout.base_dir / root.name
        if destination.resolve() != root.resolve():
            _maybe_move_repo(root, destination, report, confirm_move)

    logger.info("Initialized %s with theme %s (agents in %s)", root.name, theme.name, workspace_dir)
    return report


# ---------------------------------------------------------------------------
# create / remove
# ---------------------------------------------------------------------------


def create_agents(ctx: ProjectContext, names: Iterable[str]) -> BatchReport:
    """Create a linked worktree for each requested agent.

    Names outside the theme roster are reported ``UNKNOWN_AGENT`` and the
    batch continues. Agents that already have a worktree are reported
    ``ALREADY_ACTIVE``. New agents get branch ``<agent><suffix>`` from the
    integration branch, or the existing branch when it survived an earlier
    removal.
    """
    theme = ctx.theme
    config = ctx.config
    report = BatchReport(operation="create")
    changed = False

    for name in names:
        if not theme.has_agent(name):
            logger.warning("Agent '%s' not available in %s theme", name, theme.name)
            report.add(AgentResult(agent=name, outcome=AgentOutcome.UNKNOWN_AGENT))
            continue

        path = config.agent_path(name)
        branch = ctx.settings.agent_branch(name)
        try:
            entry = find_worktree(ctx.repo_root, path)
            if entry is not None:
                changed |= config.add_agent(name)
                report.add(AgentResult(name, AgentOutcome.ALREADY_ACTIVE, path=path, branch=entry.branch))
                continue

            if branch_exists(ctx.repo_root, branch):
                add_worktree(ctx.repo_root, path, branch=branch, new_branch=False)
            else:
                add_worktree(
                    ctx.repo_root,
                    path,
                    branch=branch,
                    new_branch=True,
                    start_point=resolve_start_point(ctx.repo_root, ctx.settings.integration_branch),
                )
        except GitCommandError as exc:
            logger.error("Failed to create worktree for %s: %s", name, exc)
            report.add(AgentResult(name, AgentOutcome.FAILED, path=path, branch=branch, error=str(exc)))
            continue

        changed |= config.add_agent(name)
        report.add(AgentResult(name, AgentOutcome.CREATED, path=path, branch=branch))

    if changed:
        ctx.save()
        report.config_saved = True
    return report


def remove_agents(ctx: ProjectContext, names: Iterable[str], *, force: bool = False) -> BatchReport:
    """Remove each requested agent's worktree.

    Names without a live worktree are reported ``ALREADY_INACTIVE`` and any
    stale config entry for them is dropped. Agent branches are kept.
    """
    config = ctx.config
    report = BatchReport(operation="remove")
    changed = False

    for name in names:
        path = config.agent_path(name)
        try:
            entry = find_worktree(ctx.repo_root, path)
            if entry is None:
                changed |= config.remove_agent(name)
                logger.warning("Agent '%s' is not active", name)
                report.add(AgentResult(name, AgentOutcome.ALREADY_INACTIVE, path=path))
                continue
            remove_worktree(ctx.repo_root, entry.path, force=force)
        except GitCommandError as exc:
            logger.error("Failed to remove worktree for %s: %s", name, exc)
            report.add(AgentResult(name, AgentOutcome.FAILED, path=path, error=str(exc)))
            continue

        changed |= config.remove_agent(name)
        report.add(AgentResult(name, AgentOutcome.REMOVED, path=path, branch=entry.branch))

    if changed:
        ctx.save()
        report.config_saved = True
    return report


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


def _best_effort_branch(entry: WorktreeEntry, path: Path) -> Optional[str]:
    if entry.branch:
        return entry.branch
    try:
        return current_branch(path)
    except GitCommandError as exc:
        logger.debug("Cannot read branch of %s: %s", path, exc)
        return None


def agent_state(config: ProjectConfig, entries: List[WorktreeEntry], agent: str) -> AgentState:
    """Classify ``agent`` against the config and the live worktree list."""
    path = config.agent_path(agent)
    registered = find_worktree_in(entries, path) is not None
    if registered and path.is_dir():
        return AgentState.ACTIVE
    if config.has_agent(agent) or registered or path.exists():
        return AgentState.STALE
    return AgentState.UNKNOWN


def status(ctx: ProjectContext) -> StatusReport:
    """Report every configured agent, plus live roster worktrees missing from the config."""
    config = ctx.config
    entries = list_worktrees(ctx.repo_root)
    report = StatusReport(theme_name=config.theme_name, workspace_dir=config.workspace_dir)

    for agent in config.active_agents:
        path = config.agent_path(agent)
        entry = find_worktree_in(entries, path)
        state = agent_state(config, entries, agent)
        branch = _best_effort_branch(entry, path) if entry is not None and state is AgentState.ACTIVE else None
        report.agents.append(
            AgentStatus(
                agent=agent,
                state=state,
                path=path,
                in_config=True,
                registered=entry is not None,
                branch=branch,
            )
        )

    for agent in ctx.theme.agents:
        if config.has_agent(agent):
            continue
        path = config.agent_path(agent)
        entry = find_worktree_in(entries, path)
        if entry is None:
            continue
        state = agent_state(config, entries, agent)
        report.untracked.append(
            AgentStatus(
                agent=agent,
                state=state,
                path=path,
                in_config=False,
                registered=True,
                branch=_best_effort_branch(entry, path) if state is AgentState.ACTIVE else None,
            )
        )

    return report


__all__ = ["init_project", "create_agents", "remove_agents", "status", "agent_state"]
