"""
prlt remove command (theme verbs: fire, park, sell).

SUMMARY: Remove agent worktrees
"""

from __future__ import annotations

import argparse

from proletariat.cli import OutputFormatter, add_standard_flags, load_context
from proletariat.core.reports import AgentOutcome
from proletariat.core.worktree import remove_agents

SUMMARY = "Remove agent worktrees (theme verbs: fire, park, sell)"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("agents", nargs="+", help="Agent names to remove")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Remove worktrees even when they contain uncommitted changes",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    ctx = load_context(args)
    theme = ctx.theme

    formatter.text(f"{theme.emoji} {theme.messages.remove}")
    report = remove_agents(ctx, args.agents, force=args.force)

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 1 if report.has_failures else 0

    for result in report.results:
        if result.outcome is AgentOutcome.REMOVED:
            formatter.text(f"  {result.agent}: worktree removed")
        elif result.outcome is AgentOutcome.ALREADY_INACTIVE:
            formatter.warning(f"Agent '{result.agent}' is not active")
        else:
            formatter.warning(f"Failed to remove worktree for {result.agent}: {result.error}")
    return 1 if report.has_failures else 0
