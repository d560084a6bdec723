"""Interactive prompts turned into the confirmation callbacks core expects.

Without a terminal (pipes, CI, tests) prompts return their default, so
nothing blocks waiting for input.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Sequence, Tuple


def is_interactive() -> bool:
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


def confirm(message: str, *, default: bool = False, assume_yes: bool = False) -> bool:
    """Ask a yes/no question on stderr and return the answer."""
    if assume_yes:
        return True
    if not is_interactive():
        return default

    suffix = "[Y/n]" if default else "[y/N]"
    sys.stderr.write(f"{message} {suffix} ")
    sys.stderr.flush()
    try:
        resp = input().strip().lower()
    except EOFError:
        resp = ""
    if resp in ("y", "yes"):
        return True
    if resp in ("n", "no"):
        return False
    return default


def choose(message: str, options: Sequence[Tuple[str, str]], *, default: str) -> str:
    """Pick one of ``options`` (value, label) by number; returns the value."""
    if not is_interactive():
        return default

    sys.stderr.write(f"{message}\n")
    for idx, (_, label) in enumerate(options, start=1):
        sys.stderr.write(f"  {idx}) {label}\n")
    values = [value for value, _ in options]
    default_idx = values.index(default) + 1 if default in values else 1
    sys.stderr.write(f"Choice [{default_idx}]: ")
    sys.stderr.flush()
    try:
        raw = input().strip()
    except EOFError:
        raw = ""
    if raw.isdigit() and 1 <= int(raw) <= len(values):
        return values[int(raw) - 1]
    if raw in values:
        return raw
    return default


def ask(message: str, *, default: str) -> str:
    if not is_interactive():
        return default
    sys.stderr.write(f"{message} [{default}]: ")
    sys.stderr.flush()
    try:
        raw = input().strip()
    except EOFError:
        raw = ""
    return raw or default


def path_confirmer(template: str, *, default: bool, assume_yes: bool) -> Callable[[Path], bool]:
    """Build a ``(path) -> bool`` callback from a message template with ``{path}``."""

    def _confirm(path: Path) -> bool:
        return confirm(template.format(path=path), default=default, assume_yes=assume_yes)

    return _confirm


def dirty_confirmer(*, assume_yes: bool) -> Callable[[List[str]], bool]:
    """Callback asking whether to relocate despite uncommitted changes."""

    def _confirm(changes: List[str]) -> bool:
        sys.stderr.write("Main repository has uncommitted changes:\n")
        for line in changes[:20]:
            sys.stderr.write(f"  {line}\n")
        return confirm("Continue with uncommitted changes?", default=False, assume_yes=assume_yes)

    return _confirm


__all__ = ["is_interactive", "confirm", "choose", "ask", "path_confirmer", "dirty_confirmer"]
