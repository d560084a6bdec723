"""File I/O helpers for persisted JSON documents.

- Atomic writes with fsync and advisory locks (temp file + ``os.replace``)
- Reads that fail fast on missing files and wrap parse errors
- Deterministic serialization: 2-space indent, insertion key order,
  non-ASCII preserved, trailing newline
"""
from __future__ import annotations

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

from proletariat.core.exceptions import ConfigCorruptError

JSON_INDENT = 2


def ensure_directory(path: Path) -> Path:
    """Create ``path`` (and parents) if missing and return it."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _atomic_write(path: Path, write_fn: Callable[[TextIO], None], *, encoding: str = "utf-8") -> None:
    """Write to ``path`` atomically using a temp file + fsync + rename.

    - Parent directory is created if missing
    - Data is written to a temporary file in the same directory
    - File is fsync'd, unlocked, then atomically replaced
    - Any leftover temp file is cleaned up on failure
    """
    path = Path(path)
    ensure_directory(path.parent)

    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        os.replace(str(tmp_path), str(path))
        tmp_path = None
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


def dumps_json(data: Any) -> str:
    """Serialize ``data`` exactly as it is written to disk."""
    return json.dumps(data, indent=JSON_INDENT, ensure_ascii=False) + "\n"


def write_json_atomic(file_path: Path | str, data: Any) -> None:
    """Atomically write ``data`` as JSON to ``file_path``."""
    text = dumps_json(data)
    _atomic_write(Path(file_path), lambda f: f.write(text))


def read_json(file_path: Path | str) -> Any:
    """Read JSON with a shared lock.

    Raises:
        FileNotFoundError: when the file is missing.
        ConfigCorruptError: when the content is not valid JSON.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigCorruptError(
                f"Invalid JSON in {path}: {exc}",
                context={"path": str(path)},
            ) from exc
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


__all__ = ["ensure_directory", "dumps_json", "write_json_atomic", "read_json"]
