"""
prlt init command.

SUMMARY: Initialize Proletariat in the current repository
"""

from __future__ import annotations

import argparse
from pathlib import Path

from proletariat.cli import OutputFormatter, add_standard_flags, add_yes_flag, get_repo_root
from proletariat.cli._prompts import ask, choose, is_interactive, path_confirmer
from proletariat.core.settings import load_settings
from proletariat.core.themes import all_themes
from proletariat.core.workspace import detect_existing_workspaces
from proletariat.core.worktree import init_project

SUMMARY = "Initialize Proletariat in the current repository"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--theme",
        "-t",
        type=str,
        default=None,
        help="Theme to use (see `prlt themes`)",
    )
    layout = parser.add_mutually_exclusive_group()
    layout.add_argument(
        "--workspace",
        "-w",
        type=str,
        default=None,
        help="Named workspace directory next to the repo that holds the repo and its agents",
    )
    layout.add_argument(
        "--workspace-root",
        type=str,
        default=None,
        help="Custom directory for agent worktrees (relative paths are resolved from the repo's parent)",
    )
    add_yes_flag(parser)
    add_standard_flags(parser)


def _pick_theme(args: argparse.Namespace) -> str:
    if args.theme:
        return args.theme
    default = load_settings().default_theme
    if args.yes:
        return default
    options = [(t.name, f"{t.emoji} {t.display_name} - {t.description}") for t in all_themes().values()]
    return choose("Choose your worktree theme:", options, default=default)


def _pick_layout(args: argparse.Namespace, repo_root: Path) -> None:
    if args.workspace or args.workspace_root or args.yes or not is_interactive():
        return
    repo_name = repo_root.name
    existing = [
        (f"join:{ws.name}", f"Join existing workspace '{ws.name}'")
        for ws in detect_existing_workspaces(repo_root)
    ]
    choice = choose(
        "Where should agent worktrees live?",
        existing
        + [
            ("sibling", "Keep them alongside this repo"),
            ("workspace", "Create a workspace directory to hold everything"),
            ("custom", "Use a custom path"),
        ],
        default=existing[0][0] if existing else "sibling",
    )
    if choice.startswith("join:"):
        args.workspace = choice.split(":", 1)[1]
    elif choice == "workspace":
        args.workspace = ask("Workspace directory name:", default=f"{repo_name}-workspace")
    elif choice == "custom":
        args.workspace_root = ask("Path for agent worktrees:", default=f"../{repo_name}-staff")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    repo_root = get_repo_root(args)

    theme_name = _pick_theme(args)
    _pick_layout(args, repo_root)

    report = init_project(
        repo_root,
        theme_name,
        workspace=args.workspace,
        workspace_root=Path(args.workspace_root) if args.workspace_root else None,
        confirm_move=path_confirmer(
            "Move the current repository into {path}?", default=False, assume_yes=args.yes
        ),
    )
    config = report.config
    theme = config.theme

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 0

    if report.already_initialized:
        formatter.text(f"Proletariat already initialized for {config.project_name}!")
        formatter.text_kv("Theme", f"{theme.emoji} {theme.display_name}")
        formatter.text_kv("Agents dir", config.workspace_dir)
        return 0

    formatter.text(f"{theme.emoji} Initialized {config.project_name} with {theme.display_name} theme")
    formatter.text_kv("Layout", config.layout.mode.value)
    formatter.text_kv("Agents dir", config.workspace_dir)
    for directory in report.created_dirs:
        formatter.text_kv("Created", directory)
    if report.registry_created:
        formatter.text_kv("Workspace", f"created registry at {config.layout.base_dir}")
    elif report.registry_joined:
        formatter.text_kv("Workspace", f"joined {config.layout.base_dir}")
    if report.moved_to is not None:
        formatter.text_kv("Moved to", report.moved_to)
        formatter.text(f"Open a new shell: cd {report.moved_to}")
    for note in report.notes:
        formatter.text(f"  {note}")
    formatter.text(f"Available agents: {', '.join(theme.agents)}")
    formatter.text(f"Next: prlt {theme.commands.create} {' '.join(theme.agents[:2])}")
    formatter.text(theme.messages.slogan)
    return 0
