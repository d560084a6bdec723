"""Core worktree/workspace engine for Proletariat.

Nothing in this package prints or prompts; operations return report objects
from :mod:`proletariat.core.reports` and raise :mod:`proletariat.core.exceptions`.
"""
