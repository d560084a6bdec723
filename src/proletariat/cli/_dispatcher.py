"""
Auto-discovery CLI dispatcher for prlt.

Every module in ``cli/commands`` exposing ``SUMMARY``, ``register_args`` and
``main`` becomes a subcommand. Theme verbs (``hire``, ``park``, ``portfolio``
...) are registered as aliases of ``create``, ``remove`` and ``status``.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

from proletariat import __version__
from proletariat.cli._output import OutputFormatter
from proletariat.core.exceptions import ProletariatError
from proletariat.core.settings import load_settings
from proletariat.core.stdlib_logging import configure_logging, suppress_lastresort_in_json_mode
from proletariat.core.themes import verb_aliases

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def discover_commands() -> dict[str, dict[str, Any]]:
    """Discover top-level commands under cli/commands."""
    commands_dir = Path(__file__).parent / "commands"
    commands: dict[str, dict[str, Any]] = {}

    for item in sorted(commands_dir.glob("*.py")):
        if item.name.startswith("_"):
            continue
        cmd_name = item.stem
        module = importlib.import_module(f"proletariat.cli.commands.{cmd_name}")
        commands[cmd_name] = {
            "module": module,
            "summary": getattr(module, "SUMMARY", cmd_name),
            "register_args": getattr(module, "register_args", None),
            "main": getattr(module, "main", None),
        }
    return commands


def _aliases_for(cmd_name: str, taken: set[str]) -> list[str]:
    aliases = []
    for verb in verb_aliases().get(cmd_name, []):
        if verb not in taken and verb not in aliases:
            aliases.append(verb)
    return aliases


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prlt",
        description="Proletariat - themed git worktree management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output (every git invocation) to stderr",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Write logs to this file instead of stderr",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    commands = discover_commands()
    taken = set(commands)
    for cmd_name, cmd_info in commands.items():
        aliases = _aliases_for(cmd_name, taken)
        taken.update(aliases)
        cmd_parser = subparsers.add_parser(
            cmd_name,
            aliases=aliases,
            help=cmd_info["summary"],
        )
        if cmd_info["register_args"]:
            cmd_info["register_args"](cmd_parser)
        if cmd_info["main"]:
            cmd_parser.set_defaults(_func=cmd_info["main"])

    return parser


def _configure_logging(args: argparse.Namespace, json_mode: bool) -> None:
    log_file = getattr(args, "log_file", None)
    verbose = bool(getattr(args, "verbose", False))
    if log_file or verbose:
        level = "DEBUG" if verbose else load_settings().log_level
        configure_logging(level=level, log_path=Path(log_file) if log_file else None)
        return
    if json_mode:
        # Keep stderr free of logging's lastResort output.
        suppress_lastresort_in_json_mode()
        return
    configure_logging(level=load_settings().log_level)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the prlt CLI.

    Returns:
        Exit code (0 for success or idempotent no-op, 1 for failures)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(list(argv))

    if not args.command:
        parser.print_help()
        return 0

    json_mode = bool(getattr(args, "json", False))
    formatter = OutputFormatter(json_mode=json_mode)

    func: Callable[[argparse.Namespace], int] | None = getattr(args, "_func", None)
    if func is None:
        parser.print_help()
        return 1

    try:
        _configure_logging(args, json_mode)
        return func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except ProletariatError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        formatter.error(e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
