"""
prlt status command (theme verbs: staff, garage, portfolio).

SUMMARY: Show agent worktree status
"""

from __future__ import annotations

import argparse

from proletariat.cli import OutputFormatter, add_standard_flags, load_context
from proletariat.core.reports import AgentState
from proletariat.core.worktree import status

SUMMARY = "Show agent worktree status (theme verbs: staff, garage, portfolio)"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    ctx = load_context(args)
    theme = ctx.theme
    report = status(ctx)

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 0

    formatter.text(f"{theme.emoji} {theme.messages.list}")
    formatter.text(f"{theme.display_name} ({report.workspace_dir}):")
    if not report.agents:
        formatter.text("  No active agents")
    for agent in report.agents:
        if agent.state is AgentState.ACTIVE:
            formatter.text(f"  {agent.agent}: ACTIVE - {agent.path}")
            if agent.branch:
                formatter.text(f"    Branch: {agent.branch}")
        else:
            formatter.text(f"  {agent.agent}: INACTIVE - worktree missing")
    for agent in report.untracked:
        formatter.text(f"  {agent.agent}: not in config but has a worktree at {agent.path}")

    formatter.text(f"Tip: use 'prlt {theme.commands.create} <agent>' to add more agents")
    formatter.text(theme.messages.slogan)
    return 0
