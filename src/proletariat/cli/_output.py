"""Unified CLI output formatting.

Every command renders through :class:`OutputFormatter` so ``--json`` output
stays machine-readable and text output stays consistent.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from proletariat.core.exceptions import ProletariatError


class OutputFormatter:
    """Output formatter for CLI commands (JSON or text)."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        """Print ``data`` in JSON mode, ``message`` otherwise."""
        if self.json_mode:
            output = {"status": status, **data}
            print(json.dumps(output, indent=self.indent, default=str, ensure_ascii=False))
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None, *, error_code: str = "error") -> None:
        """Print an error to stderr.

        Proletariat errors carry their own code and context into JSON output.
        """
        msg = message or str(error)
        if self.json_mode:
            if isinstance(error, ProletariatError):
                output = {"error": error.__class__.__name__, **error.to_json_error(), "message": msg}
            else:
                output = {"error": error_code, "message": msg}
            print(json.dumps(output, indent=self.indent, default=str, ensure_ascii=False), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str, ensure_ascii=False))

    def text(self, message: str = "") -> None:
        """Print a text line (suppressed in JSON mode)."""
        if not self.json_mode:
            print(message)

    def warning(self, message: str) -> None:
        if not self.json_mode:
            print(f"Warning: {message}", file=sys.stderr)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


__all__ = ["OutputFormatter"]
