"""Worktree health checks and back-reference repair."""
from __future__ import annotations

import logging
from pathlib import Path

from proletariat.core.context import ProjectContext
from proletariat.core.exceptions import RepairUnfixableError
from proletariat.core.git import (
    expected_back_reference,
    find_metadata_dir,
    git_common_dir,
    linked_worktrees,
    parse_back_reference,
    probe_worktree,
    read_back_reference,
    write_back_reference,
)
from proletariat.core.reports import (
    Health,
    HealthReport,
    RepairOutcome,
    RepairReport,
    WorktreeHealth,
    WorktreeRepair,
)

logger = logging.getLogger(__name__)


def health(ctx: ProjectContext) -> HealthReport:
    """Probe every linked worktree with a read-only git command. Never mutates."""
    report = HealthReport()
    for entry in linked_worktrees(ctx.repo_root):
        ok = probe_worktree(entry.path)
        report.worktrees.append(
            WorktreeHealth(agent=entry.name, path=entry.path, health=Health.HEALTHY if ok else Health.BROKEN)
        )
        if not ok:
            logger.warning("Worktree %s is broken", entry.path)
    return report


def _points_at(content: str, metadata_dir: Path) -> bool:
    target = parse_back_reference(content)
    if target is None:
        return False
    try:
        return target.resolve() == metadata_dir.resolve()
    except OSError:
        return target == metadata_dir


def repair_worktree(common_dir: Path, worktree_path: Path) -> WorktreeRepair:
    """Rewrite ``<worktree>/.git`` when it does not point at its metadata dir.

    Raises:
        RepairUnfixableError: The ``.git`` file is missing, or the matching
            metadata directory does not exist.
    """
    worktree_path = Path(worktree_path)
    metadata_dir = find_metadata_dir(common_dir, worktree_path)
    expected = expected_back_reference(metadata_dir)
    actual = read_back_reference(worktree_path)

    if actual is None:
        raise RepairUnfixableError(
            f"Missing .git file in {worktree_path}",
            context={"path": str(worktree_path), "expected": expected},
        )
    if actual == expected or _points_at(actual, metadata_dir):
        return WorktreeRepair(worktree_path.name, worktree_path, RepairOutcome.ALREADY_CORRECT,
                              expected=expected, actual=actual)
    if not metadata_dir.is_dir():
        raise RepairUnfixableError(
            f"Metadata directory {metadata_dir} for {worktree_path} does not exist",
            context={"path": str(worktree_path), "expected": expected, "actual": actual},
        )

    write_back_reference(worktree_path, metadata_dir)
    logger.info("Repaired back-reference of %s", worktree_path)
    return WorktreeRepair(worktree_path.name, worktree_path, RepairOutcome.REPAIRED,
                          expected=expected, actual=actual)


def repair(ctx: ProjectContext) -> RepairReport:
    """Fix every linked worktree's back-reference; idempotent."""
    common_dir = git_common_dir(ctx.repo_root)
    report = RepairReport()
    for entry in linked_worktrees(ctx.repo_root):
        try:
            report.items.append(repair_worktree(common_dir, entry.path))
        except RepairUnfixableError as exc:
            logger.warning("Cannot repair %s: %s", entry.path, exc)
            report.items.append(
                WorktreeRepair(
                    entry.name,
                    entry.path,
                    RepairOutcome.FAILED,
                    expected=exc.context.get("expected"),
                    actual=exc.context.get("actual"),
                    error=str(exc),
                )
            )
    return report


__all__ = ["health", "repair", "repair_worktree"]
