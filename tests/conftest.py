"""Shared pytest configuration and fixtures.

Tests that need git create real repositories under ``tmp_path`` and are
marked ``requires_git``.
"""
from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

import pytest

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'proletariat' and tests/ as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from helpers.cache_utils import reset_proletariat_caches  # noqa: E402
from helpers.git_helpers import git_init_repo  # noqa: E402


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "requires_git: marks tests that require git operations"
    )
    config.addinivalue_line(
        "markers", "integration: marks integration tests (multiple components)"
    )


def pytest_collection_modifyitems(config, items):
    if shutil.which("git") is not None:
        return
    skip_marker = pytest.mark.skip(reason="git executable not available")
    for item in items:
        if "requires_git" in item.keywords:
            item.add_marker(skip_marker)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch):
    """Isolate settings and git from the developer's machine.

    - ``XDG_CONFIG_HOME`` points at an empty directory
    - ``PRLT_*`` overrides are removed
    - git ignores global/system config and gets a fixed identity
    - settings, theme and data caches are cleared before and after
    """
    xdg = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    for key in list(os.environ):
        if key.startswith("PRLT_"):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(xdg / "gitconfig"))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")

    reset_proletariat_caches()
    yield xdg
    reset_proletariat_caches()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A real repository ``<tmp>/work/myrepo`` with one commit on ``main``."""
    repo = tmp_path / "work" / "myrepo"
    repo.mkdir(parents=True)
    git_init_repo(repo)
    return repo.resolve()


@pytest.fixture
def initialized_repo(git_repo: Path) -> Path:
    """``git_repo`` initialized with the billionaires theme and default layout."""
    from proletariat.core.worktree import init_project

    init_project(git_repo, "billionaires")
    return git_repo


@pytest.fixture
def project_ctx(initialized_repo: Path):
    from proletariat.core.context import ProjectContext

    return ProjectContext.load(initialized_repo)
