"""Move the main repository and keep every linked worktree attached.

Flow::

    resolve target -> verify clean -> snapshot worktrees -> confirm
        -> relink | recreate -> update config and registry -> done

Nothing is mutated before the directory rename except, for ``recreate``,
the worktree teardown; a failed rename in that mode restores the removed
worktrees from the original location.

Strategies:

- ``relink`` (default): one ``os.rename`` of the repository, then both
  halves of each worktree's back-reference are rewritten. Worktrees,
  branches and uncommitted work inside worktrees are untouched.
- ``recreate``: every worktree is removed through git, the repository is
  renamed, then each worktree is added again on its branch. Uncommitted
  changes inside worktrees are lost.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

from proletariat.core.config import ConfigStore, LayoutMode, WorkspaceLayout
from proletariat.core.context import ProjectContext
from proletariat.core.exceptions import (
    DirtyWorkingTreeError,
    GitCommandError,
    ProletariatError,
    RelocationError,
    TargetPathExistsError,
)
from proletariat.core.file_io import ensure_directory
from proletariat.core.git import (
    add_worktree,
    branch_exists,
    find_metadata_dir,
    git_common_dir,
    linked_worktrees,
    remove_worktree,
    resolve_start_point,
    working_tree_changes,
    write_back_reference,
    write_gitdir_pointer,
)
from proletariat.core.reports import (
    RelocationReport,
    RelocationState,
    RelocationStrategy,
    WorktreeSnapshot,
)
from proletariat.core.workspace import add_repository, create_workspace, load_workspace

logger = logging.getLogger(__name__)

AllowDirty = Callable[[List[str]], bool]
ConfirmPlan = Callable[[RelocationReport], bool]


def relocation_target(ctx: ProjectContext) -> Path:
    """Default destination of the repository.

    ``<baseDir>/<repo>`` in workspace layout, otherwise a new workspace next
    to the repository: ``<parent>/<repo>-workspace/<repo>``.
    """
    layout = ctx.config.layout
    name = ctx.repo_root.name
    if layout.mode is LayoutMode.WORKSPACE:
        return layout.base_dir / name
    return ctx.repo_root.parent / f"{name}-workspace" / name


def _moved(path: Path, source: Path, target: Path) -> Path:
    """Where ``path`` ends up after ``source`` is renamed to ``target``."""
    try:
        return target / Path(path).relative_to(source)
    except ValueError:
        return Path(path)


def _step(report: RelocationReport, text: str) -> None:
    report.steps.append(text)
    logger.info("relocate: %s", text)


# ---------------------------------------------------------------------------
# Pre-flight
# ---------------------------------------------------------------------------


def _verify_clean(source: Path, strategy: RelocationStrategy, allow_dirty: Optional[AllowDirty]) -> None:
    changes = working_tree_changes(source)
    if not changes:
        return
    context = {"path": str(source), "changes": changes}
    if strategy is RelocationStrategy.RECREATE:
        raise DirtyWorkingTreeError(
            f"Cannot relocate {source}: uncommitted changes. Commit or stash them first.",
            context=context,
        )
    if allow_dirty is None or not allow_dirty(changes):
        raise DirtyWorkingTreeError(
            f"Relocation of {source} cancelled: uncommitted changes.",
            context=context,
        )
    logger.warning("Relocating %s with %d uncommitted change(s)", source, len(changes))


def snapshot_worktrees(repo_root: Path) -> List[WorktreeSnapshot]:
    """Capture every linked worktree before anything is mutated."""
    common_dir = git_common_dir(repo_root)
    return [
        WorktreeSnapshot(
            name=entry.name,
            path=entry.path,
            branch=entry.branch,
            metadata_name=find_metadata_dir(common_dir, entry.path).name,
        )
        for entry in linked_worktrees(repo_root)
    ]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _rename(source: Path, target: Path, report: RelocationReport) -> bool:
    created_parent = not target.parent.exists()
    try:
        ensure_directory(target.parent)
        os.rename(source, target)
    except OSError as exc:
        if created_parent and target.parent.is_dir() and not any(target.parent.iterdir()):
            target.parent.rmdir()
        report.state = RelocationState.FAILED
        report.errors["rename"] = str(exc)
        report.message = f"Failed to move {source} to {target}: {exc}"
        logger.error(report.message)
        return False
    _step(report, f"Moved {source} -> {target}")
    return True


def _relink(report: RelocationReport, common_dir: Path) -> bool:
    source, target = report.source, report.target
    if not _rename(source, target, report):
        report.manual_steps.append("Nothing was changed; fix the cause and re-run `prlt migrate`")
        return False

    new_common = _moved(common_dir, source, target)
    vanished = []
    for snap in report.worktrees:
        wt_path = _moved(snap.path, source, target)
        if not wt_path.is_dir():
            report.errors[snap.name] = f"Worktree directory {wt_path} no longer exists"
            logger.warning("Worktree %s vanished; not relinked", wt_path)
            vanished.append(snap.name)
            continue
        metadata_dir = new_common / "worktrees" / snap.metadata_name
        try:
            write_back_reference(wt_path, metadata_dir)
            write_gitdir_pointer(metadata_dir, wt_path)
        except OSError as exc:
            report.errors[snap.name] = str(exc)
            logger.error("Failed to relink %s: %s", wt_path, exc)
            continue
        report.relinked.append(snap.name)
    if report.relinked:
        _step(report, f"Relinked {len(report.relinked)} worktree(s)")
    if vanished:
        report.manual_steps.append(
            f"Run `git worktree prune` from {target} to drop missing worktree(s): {', '.join(vanished)}"
        )
    if any(s.name in report.errors and s.name not in vanished for s in report.worktrees):
        report.manual_steps.append(f"Run `prlt repair` from {target}")
    return True


def _add_back(repo_root: Path, snap: WorktreeSnapshot, path: Path, ctx: ProjectContext) -> None:
    branch = snap.branch or ctx.settings.agent_branch(snap.name)
    if branch_exists(repo_root, branch):
        add_worktree(repo_root, path, branch=branch, new_branch=False)
    else:
        start = resolve_start_point(repo_root, ctx.settings.integration_branch)
        add_worktree(repo_root, path, branch=branch, new_branch=True, start_point=start)


def _restore(report: RelocationReport, ctx: ProjectContext) -> None:
    """Best effort: re-add removed worktrees from the original location."""
    for snap in report.worktrees:
        if snap.name not in report.removed:
            continue
        try:
            _add_back(report.source, snap, snap.path, ctx)
        except GitCommandError as exc:
            report.errors[snap.name] = str(exc)
            report.manual_steps.append(
                f"Recreate {snap.name}: git worktree add {snap.path} {snap.branch or ctx.settings.agent_branch(snap.name)}"
            )
            logger.error("Could not restore worktree %s: %s", snap.path, exc)
            continue
        report.restored.append(snap.name)
    if report.restored:
        _step(report, f"Restored {len(report.restored)} worktree(s) at their original location")


def _recreate(report: RelocationReport, ctx: ProjectContext) -> bool:
    source, target = report.source, report.target

    for snap in report.worktrees:
        try:
            remove_worktree(source, snap.path, force=True)
        except GitCommandError as exc:
            report.errors[snap.name] = str(exc)
            report.state = RelocationState.FAILED
            report.message = f"Failed to remove worktree {snap.path}: {exc}"
            logger.error(report.message)
            _restore(report, ctx)
            return False
        report.removed.append(snap.name)
    _step(report, f"Removed {len(report.removed)} worktree(s)")

    if not _rename(source, target, report):
        _restore(report, ctx)
        return False

    for snap in report.worktrees:
        wt_path = _moved(snap.path, source, target)
        try:
            _add_back(target, snap, wt_path, ctx)
        except GitCommandError as exc:
            report.errors[snap.name] = str(exc)
            report.manual_steps.append(f"Recreate {snap.name} from {target}: prlt create {snap.name}")
            logger.error("Failed to recreate worktree %s: %s", wt_path, exc)
            continue
        report.recreated.append(snap.name)
    _step(report, f"Recreated {len(report.recreated)} worktree(s)")
    return True


# ---------------------------------------------------------------------------
# Config and registry
# ---------------------------------------------------------------------------


def _update_config(report: RelocationReport, ctx: ProjectContext) -> None:
    source, target = report.source, report.target
    base_dir = target.parent
    config = ctx.config

    if not (config.layout.mode is LayoutMode.WORKSPACE and config.layout.base_dir == base_dir):
        config.layout = WorkspaceLayout(mode=LayoutMode.WORKSPACE, base_dir=base_dir, workspace_name=base_dir.name)
    config.workspace_dir = _moved(config.workspace_dir, source, target)

    store = ConfigStore(target, ctx.settings)
    store.save(config)
    ctx.repo_root, ctx.store = target, store
    _step(report, f"Saved config at {store.canonical_path}")

    if load_workspace(base_dir, ctx.settings) is None:
        create_workspace(base_dir, config.layout.workspace_name, ctx.settings)
        _step(report, f"Created workspace registry at {base_dir}")
    if add_repository(base_dir, target.name, ctx.settings):
        _step(report, f"Added {target.name} to workspace registry")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def relocate_repository(
    ctx: ProjectContext,
    *,
    strategy: RelocationStrategy = RelocationStrategy.RELINK,
    target: Optional[Path] = None,
    allow_dirty: Optional[AllowDirty] = None,
    confirm: Optional[ConfirmPlan] = None,
) -> RelocationReport:
    """Move ``ctx``'s repository to ``target`` (default: :func:`relocation_target`).

    Args:
        strategy: ``relink`` keeps worktrees in place; ``recreate`` tears
            them down and adds them again.
        allow_dirty: ``relink`` only. Called with ``git status`` lines when
            the main tree has uncommitted changes; True proceeds.
        confirm: Called with the planned report (worktrees captured, no
            mutation yet); False aborts.

    On success ``ctx`` is updated to the new repository root.

    Raises:
        TargetPathExistsError: ``target`` already exists.
        DirtyWorkingTreeError: Uncommitted changes block the move.
        RelocationError: ``target`` lies inside the repository.
        GitCommandError: A pre-flight git query failed.
    """
    source = ctx.repo_root.resolve()
    dest = Path(target).resolve() if target is not None else relocation_target(ctx).resolve()
    report = RelocationReport(strategy=strategy, source=source, target=dest)

    if dest == source:
        report.state = RelocationState.ALREADY_IN_PLACE
        report.message = f"Repository is already at {dest}"
        return report
    if dest.exists():
        raise TargetPathExistsError(
            f"Target path already exists: {dest}. Remove or rename it first.",
            context={"target": str(dest)},
        )
    if dest.is_relative_to(source):
        raise RelocationError(
            f"Cannot move {source} into itself ({dest})",
            context={"source": str(source), "target": str(dest)},
        )

    _verify_clean(source, strategy, allow_dirty)
    report.worktrees = snapshot_worktrees(source)
    common_dir = git_common_dir(source)
    _step(report, f"Captured {len(report.worktrees)} worktree(s)")

    if confirm is not None and not confirm(report):
        report.state = RelocationState.ABORTED
        report.message = "Relocation cancelled; nothing was changed"
        return report

    if strategy is RelocationStrategy.RECREATE:
        moved = _recreate(report, ctx)
    else:
        moved = _relink(report, common_dir)
    if not moved:
        return report

    try:
        _update_config(report, ctx)
    except (OSError, ProletariatError) as exc:
        report.errors["config"] = str(exc)
        report.manual_steps.append(f"Run `prlt upgrade` from {dest} to rewrite the config")
        logger.error("Repository moved but config update failed: %s", exc)

    report.state = RelocationState.DONE
    report.message = f"Repository moved to {dest}"
    report.manual_steps.append(f"cd {dest}")
    return report


__all__ = ["relocate_repository", "relocation_target", "snapshot_worktrees"]
