"""
prlt health command.

SUMMARY: Check that every linked worktree is usable
"""

from __future__ import annotations

import argparse

from proletariat.cli import OutputFormatter, add_standard_flags, load_context
from proletariat.core.reports import Health
from proletariat.core.worktree import health

SUMMARY = "Check that every linked worktree is usable"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Exit 1 when any worktree is broken."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    ctx = load_context(args)
    report = health(ctx)

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 0 if report.ok else 1

    for item in report.worktrees:
        mark = "Healthy" if item.health is Health.HEALTHY else "Broken - needs repair"
        formatter.text(f"  {item.agent}: {mark}")
    formatter.text(f"Summary: {report.healthy_count} healthy, {report.broken_count} broken")
    if not report.ok:
        formatter.text("Run `prlt repair` to fix broken worktrees")
        return 1
    return 0
