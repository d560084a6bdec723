"""
prlt themes command.

SUMMARY: List available themes
"""

from __future__ import annotations

import argparse

from proletariat.cli import OutputFormatter, add_json_flag
from proletariat.core.themes import all_themes

SUMMARY = "List available themes"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    themes = list(all_themes().values())

    if formatter.json_mode:
        formatter.json_output({"themes": [t.to_dict() for t in themes]})
        return 0

    for theme in themes:
        formatter.text(f"{theme.emoji} {theme.name}: {theme.display_name}")
        formatter.text(f"    {theme.description}")
        formatter.text(
            f"    verbs: {theme.commands.create} / {theme.commands.remove} / {theme.commands.list}"
            f"  ({len(theme.agents)} agents)"
        )
    return 0
