"""
prlt create command (theme verbs: hire, drive, buy).

SUMMARY: Create agent worktrees
"""

from __future__ import annotations

import argparse

from proletariat.cli import OutputFormatter, add_standard_flags, load_context
from proletariat.core.reports import AgentOutcome
from proletariat.core.worktree import create_agents

SUMMARY = "Create agent worktrees (theme verbs: hire, drive, buy)"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("agents", nargs="*", help="Agent names from the project's theme")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    ctx = load_context(args)
    theme = ctx.theme

    if not args.agents:
        formatter.error(
            ValueError("no agents given"),
            f"Usage: prlt {theme.commands.create} <agent1> [agent2] ... "
            f"(available: {', '.join(theme.agents)})",
            error_code="usage",
        )
        return 1

    formatter.text(f"{theme.emoji} {theme.messages.create}")
    report = create_agents(ctx, args.agents)

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 1 if report.has_failures else 0

    for result in report.results:
        if result.outcome is AgentOutcome.CREATED:
            formatter.text(f"  {result.agent}: ready at {result.path} (branch {result.branch})")
        elif result.outcome is AgentOutcome.ALREADY_ACTIVE:
            formatter.text(f"  {result.agent}: already active at {result.path}")
        elif result.outcome is AgentOutcome.UNKNOWN_AGENT:
            formatter.warning(f"Agent '{result.agent}' not available in {theme.name} theme")
        else:
            formatter.warning(f"Failed to create worktree for {result.agent}: {result.error}")

    if report.has_failures:
        return 1
    formatter.text(f"Use 'prlt {theme.commands.list}' to see all active agents")
    return 0
