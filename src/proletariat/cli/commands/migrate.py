"""
prlt migrate command.

SUMMARY: Move the repository into its workspace and keep worktrees attached
"""

from __future__ import annotations

import argparse
from pathlib import Path

from proletariat.cli import OutputFormatter, add_standard_flags, add_yes_flag, load_context
from proletariat.cli._prompts import confirm, dirty_confirmer
from proletariat.core.reports import RelocationReport, RelocationState, RelocationStrategy
from proletariat.core.worktree import relocate_repository

SUMMARY = "Move the repository into its workspace and keep worktrees attached"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in RelocationStrategy],
        default=RelocationStrategy.RELINK.value,
        help=(
            "relink: move the repo and rewrite worktree links (keeps all work). "
            "recreate: remove and re-add worktrees (loses uncommitted worktree changes)."
        ),
    )
    parser.add_argument(
        "--target",
        type=str,
        default=None,
        help="Destination path (default: <workspace>/<repo>)",
    )
    add_yes_flag(parser)
    add_standard_flags(parser)


def _plan_confirmer(formatter: OutputFormatter, assume_yes: bool):
    def _confirm(plan: RelocationReport) -> bool:
        formatter.text("Migration plan:")
        formatter.text_kv("Move repository from", plan.source)
        formatter.text_kv("Move repository to", plan.target)
        formatter.text_kv("Strategy", plan.strategy.value)
        formatter.text_kv("Worktrees to update", len(plan.worktrees))
        if plan.strategy is RelocationStrategy.RECREATE:
            formatter.warning("recreate removes every worktree; uncommitted changes inside them are lost")
        return confirm("Proceed with migration?", default=True, assume_yes=assume_yes)

    return _confirm


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    ctx = load_context(args)

    report = relocate_repository(
        ctx,
        strategy=RelocationStrategy(args.strategy),
        target=Path(args.target) if args.target else None,
        allow_dirty=dirty_confirmer(assume_yes=args.yes),
        confirm=_plan_confirmer(formatter, args.yes),
    )

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 0 if report.ok or report.state is RelocationState.ABORTED else 1

    for step in report.steps:
        formatter.text(f"  {step}")
    for name, error in report.errors.items():
        formatter.warning(f"{name}: {error}")
    formatter.text(report.message)
    if report.manual_steps:
        formatter.text("Next steps:")
        for step in report.manual_steps:
            formatter.text(f"  {step}")
    return 0 if report.ok or report.state is RelocationState.ABORTED else 1
