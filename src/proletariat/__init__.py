"""
Proletariat - themed git worktree management

Proletariat gives every linked git worktree of a repository a themed agent
name, keeps a per-repository config in sync with git's own worktree list,
and repairs or relocates worktree metadata when repositories move.
"""

__version__ = "2.0.0"
__all__ = ["__version__"]
