"""
prlt list command.

SUMMARY: List the agents available in a theme
"""

from __future__ import annotations

import argparse

from proletariat.cli import OutputFormatter, add_standard_flags, load_context
from proletariat.core.exceptions import NotAGitRepositoryError, NotInitializedError
from proletariat.core.settings import load_settings
from proletariat.core.themes import get_theme

SUMMARY = "List the agents available in a theme"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--theme",
        "-t",
        type=str,
        default=None,
        help="Theme to list (default: the project's theme, else the default theme)",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    active: list[str] = []
    if args.theme:
        theme = get_theme(args.theme)
    else:
        try:
            ctx = load_context(args)
        except (NotAGitRepositoryError, NotInitializedError):
            theme = get_theme(load_settings().default_theme)
        else:
            theme = ctx.theme
            active = list(ctx.config.active_agents)

    if formatter.json_mode:
        formatter.json_output({"theme": theme.name, "agents": list(theme.agents), "active": active})
        return 0

    formatter.text(f"{theme.emoji} {theme.display_name} agents:")
    for agent in theme.agents:
        marker = " (active)" if agent in active else ""
        formatter.text(f"  {agent}{marker}")
    return 0
