from __future__ import annotations

import logging
import sys
from pathlib import Path

_CONFIGURED_KEY: str | None = None
_PRLT_HANDLER: logging.Handler | None = None
_JSON_MODE_NULL_HANDLER_INSTALLED: bool = False

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    value = getattr(logging, str(name).upper(), None)
    return value if isinstance(value, int) else logging.WARNING


def configure_logging(*, level: str = "WARNING", log_path: Path | None = None) -> None:
    """Configure stdlib logging for a prlt invocation.

    With ``log_path`` records go to that file only (stdout/stderr stay clean for
    ``--json`` output); otherwise a single stderr handler is installed.

    Idempotent per-process: reconfiguring with the same target is a no-op.
    """
    global _CONFIGURED_KEY, _PRLT_HANDLER

    key = f"{Path(log_path).resolve() if log_path else '<stderr>'}:{level.upper()}"
    if _CONFIGURED_KEY == key and _PRLT_HANDLER is not None:
        return

    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    if log_path is not None:
        # FileHandler is also a StreamHandler, so only drop stdout/stderr handlers.
        for h in list(root.handlers):
            if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) in (sys.stdout, sys.stderr):
                root.removeHandler(h)
                h.close()

    if _PRLT_HANDLER is not None:
        root.removeHandler(_PRLT_HANDLER)
        _PRLT_HANDLER.close()
        _PRLT_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        resolved = Path(log_path).resolve()
        resolved.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(resolved), encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)

    _PRLT_HANDLER = handler
    _CONFIGURED_KEY = key


def reset_logging_for_tests() -> None:
    """Test-only: clear configured handlers."""
    global _CONFIGURED_KEY, _PRLT_HANDLER, _JSON_MODE_NULL_HANDLER_INSTALLED
    root = logging.getLogger()
    for h in list(root.handlers):
        if h is _PRLT_HANDLER or isinstance(h, logging.NullHandler):
            root.removeHandler(h)
            h.close()
    _CONFIGURED_KEY = None
    _PRLT_HANDLER = None
    _JSON_MODE_NULL_HANDLER_INSTALLED = False


def suppress_lastresort_in_json_mode() -> None:
    """Keep logging's implicit ``lastResort`` handler off stderr in ``--json`` mode.

    Ensures the root logger has at least one handler (a NullHandler) when it
    otherwise has none.
    """
    global _JSON_MODE_NULL_HANDLER_INSTALLED

    root = logging.getLogger()
    if root.handlers or _JSON_MODE_NULL_HANDLER_INSTALLED:
        return
    root.addHandler(logging.NullHandler())
    _JSON_MODE_NULL_HANDLER_INSTALLED = True


__all__ = ["configure_logging", "reset_logging_for_tests", "suppress_lastresort_in_json_mode"]
