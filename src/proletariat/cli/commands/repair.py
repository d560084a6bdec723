"""
prlt repair command.

SUMMARY: Rewrite stale worktree back-references
"""

from __future__ import annotations

import argparse

from proletariat.cli import OutputFormatter, add_standard_flags, load_context
from proletariat.core.reports import RepairOutcome
from proletariat.core.worktree import repair

SUMMARY = "Rewrite stale worktree back-references"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    ctx = load_context(args)
    report = repair(ctx)

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 1 if report.failed else 0

    for item in report.items:
        if item.outcome is RepairOutcome.REPAIRED:
            formatter.text(f"  Repaired: {item.agent}")
        elif item.outcome is RepairOutcome.ALREADY_CORRECT:
            formatter.text(f"  Already correct: {item.agent}")
        else:
            formatter.warning(f"{item.agent}: {item.error}")

    if report.repaired:
        formatter.text(f"Repaired {report.repaired} worktree reference(s)")
    if report.failed:
        formatter.warning(f"{report.failed} worktree(s) could not be repaired")
        return 1
    if not report.repaired:
        formatter.text("All worktrees are already correctly configured")
    return 0
