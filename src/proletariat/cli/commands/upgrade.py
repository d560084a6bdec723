"""
prlt upgrade command.

SUMMARY: Upgrade the project config to the current format
"""

from __future__ import annotations

import argparse

from proletariat.cli import OutputFormatter, add_standard_flags, add_yes_flag, get_repo_root
from proletariat.cli._prompts import path_confirmer
from proletariat.core.config import ConfigStore

SUMMARY = "Upgrade the project config to the current format"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_yes_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    store = ConfigStore(get_repo_root(args))

    report = store.migrate(
        confirm_create_registry=path_confirmer(
            "Create a workspace registry at {path} to track all repositories?",
            default=True,
            assume_yes=args.yes,
        )
    )

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 0

    for change in report.changes:
        formatter.text(f"  {change}")
    for note in report.notes:
        formatter.text(f"  {note}")
    if report.backup_path is not None:
        formatter.text(f"Backup kept at {report.backup_path} (delete it once everything works)")
    formatter.text("Configuration is up to date" if report.already_up_to_date else "Configuration upgrade complete")
    return 0
