from __future__ import annotations

from typing import Any, Dict, Mapping


class ProletariatError(Exception):
    """Base exception for Proletariat."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class NotAGitRepositoryError(ProletariatError, FileNotFoundError):
    """Raised when the working directory is not inside a git repository."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class NotInitializedError(ProletariatError, FileNotFoundError):
    """Raised when a repository has no Proletariat config yet."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class UnknownThemeError(ProletariatError, KeyError):
    """Raised when a theme name is not in the theme table."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        KeyError.__init__(self, message)

    def __str__(self) -> str:
        # KeyError would otherwise quote the message.
        return str(self.args[0]) if self.args else ""


class ConfigCorruptError(ProletariatError, ValueError):
    """Raised when a persisted config or registry cannot be parsed or validated."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class GitCommandError(ProletariatError, RuntimeError):
    """Raised when a git invocation fails. Context carries argv, cwd, returncode and stderr."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class DirtyWorkingTreeError(ProletariatError, RuntimeError):
    """Raised when relocation is blocked by uncommitted changes."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class TargetPathExistsError(ProletariatError, FileExistsError):
    """Raised when a relocation destination is already occupied."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        FileExistsError.__init__(self, message)


class RepairUnfixableError(ProletariatError, FileNotFoundError):
    """Raised when a worktree's ``.git`` back-reference file is missing entirely."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class RelocationError(ProletariatError, RuntimeError):
    """Raised when moving the main repository fails after the plan was executed."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ProletariatError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


__all__ = [
    "ProletariatError",
    "NotAGitRepositoryError",
    "NotInitializedError",
    "UnknownThemeError",
    "ConfigCorruptError",
    "GitCommandError",
    "DirtyWorkingTreeError",
    "TargetPathExistsError",
    "RepairUnfixableError",
    "RelocationError",
]
