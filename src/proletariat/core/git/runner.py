"""Subprocess wrapper for git.

Runs git without a shell and converts failures into :class:`GitCommandError`
carrying the failing operation's context.
"""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from proletariat.core.exceptions import GitCommandError
from proletariat.core.settings import load_settings

logger = logging.getLogger(__name__)


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | str,
    check: bool = True,
    operation: Optional[str] = None,
) -> subprocess.CompletedProcess:
    """Run ``git <args>`` in ``cwd`` and capture text output.

    Args:
        args: Arguments after the ``git`` executable.
        cwd: Working directory for the command.
        check: Raise on non-zero exit when True.
        operation: Human-readable label used in error messages.

    Raises:
        GitCommandError: When git cannot be executed, times out, or (with
            ``check``) exits non-zero.
    """
    settings = load_settings()
    argv = [settings.git_executable, *[str(a) for a in args]]
    label = operation or " ".join(argv[:3])
    logger.debug("git: %s (cwd=%s)", " ".join(argv), cwd)

    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=settings.git_timeout_seconds,
        )
    except FileNotFoundError as exc:
        # Either git is missing or cwd does not exist.
        raise GitCommandError(
            f"{label} failed: {exc}",
            context={"argv": argv, "cwd": str(cwd), "operation": label},
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise GitCommandError(
            f"{label} timed out after {exc.timeout}s",
            context={"argv": argv, "cwd": str(cwd), "operation": label, "timeout": exc.timeout},
        ) from exc

    if check and result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise GitCommandError(
            f"{label} failed (exit {result.returncode}): {stderr}",
            context={
                "argv": argv,
                "cwd": str(cwd),
                "operation": label,
                "returncode": result.returncode,
                "stderr": stderr,
            },
        )
    return result


__all__ = ["run_git"]
