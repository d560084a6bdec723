from __future__ import annotations

import errno
import json
from pathlib import Path

import pytest

from helpers.git_helpers import (
    git,
    git_branches,
    git_commit,
    git_create_worktree,
    git_init_repo,
    git_list_worktrees,
)
from proletariat.core.config import ConfigStore, LayoutMode
from proletariat.core.context import ProjectContext
from proletariat.core.exceptions import NotAGitRepositoryError, UnknownThemeError
from proletariat.core.reports import AgentOutcome, AgentState
from proletariat.core.workspace import load_workspace
from proletariat.core.worktree import create_agents, init_project, remove_agents, status


@pytest.mark.requires_git
class TestInit:
    def test_init_writes_config_and_agents_dir(self, git_repo: Path) -> None:
        report = init_project(git_repo, "billionaires")

        staff = git_repo.parent / "myrepo-staff"
        assert not report.already_initialized
        assert report.created_dirs == [staff]
        assert staff.is_dir()

        data = json.loads((git_repo / ".proletariat" / "repo.json").read_text(encoding="utf-8"))
        assert data["themeName"] == "billionaires"
        assert data["workspaceDir"] == str(staff)
        assert data["activeAgents"] == []
        assert data["layout"] == {"mode": "sibling", "baseDir": str(git_repo.parent)}
        assert "theme" not in data

    def test_init_from_subdirectory_uses_default_theme(self, git_repo: Path) -> None:
        sub = git_repo / "docs"
        sub.mkdir()
        report = init_project(sub)
        assert report.config.theme_name == "billionaires"
        assert ConfigStore(git_repo).exists()

    def test_init_twice_is_a_no_op(self, git_repo: Path) -> None:
        init_project(git_repo, "toyotas")
        again = init_project(git_repo, "billionaires")

        assert again.already_initialized
        assert again.config.theme_name == "toyotas"

    def test_unknown_theme(self, git_repo: Path) -> None:
        with pytest.raises(UnknownThemeError):
            init_project(git_repo, "pirates")
        assert not ConfigStore(git_repo).exists()

    def test_outside_repository(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(NotAGitRepositoryError):
            init_project(plain)

    def test_workspace_mode_creates_registry(self, git_repo: Path) -> None:
        report = init_project(git_repo, "companies", workspace="acme")

        base = git_repo.parent / "acme"
        assert report.config.layout.mode is LayoutMode.WORKSPACE
        assert report.config.workspace_dir == base / "myrepo-portfolio"
        assert report.registry_created and report.registry_joined
        assert load_workspace(base).repositories == ["myrepo"]
        assert report.moved_to is None
        assert git_repo.is_dir()
        assert any("prlt migrate" in n for n in report.notes)

    def test_workspace_mode_moves_repo_when_confirmed(self, git_repo: Path) -> None:
        report = init_project(git_repo, "billionaires", workspace="acme", confirm_move=lambda dest: True)

        dest = git_repo.parent / "acme" / "myrepo"
        assert report.moved_to == dest
        assert not git_repo.exists()
        assert ConfigStore(dest).load().workspace_dir == git_repo.parent / "acme" / "myrepo-staff"

    def test_failed_move_is_reported_and_repo_stays(self, git_repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from proletariat.core.worktree import lifecycle

        def cross_device(src, dst):
            raise OSError(errno.EXDEV, "Invalid cross-device link")

        monkeypatch.setattr(lifecycle.os, "rename", cross_device)

        report = init_project(git_repo, "billionaires", workspace="acme", confirm_move=lambda dest: True)

        assert report.moved_to is None
        assert any("Repository not moved" in n and "cross-device" in n for n in report.notes)
        assert git_repo.is_dir()
        assert ConfigStore(git_repo).exists()
        assert load_workspace(git_repo.parent / "acme").repositories == ["myrepo"]

    def test_custom_root(self, git_repo: Path, tmp_path: Path) -> None:
        report = init_project(git_repo, "toyotas", workspace_root=tmp_path / "agents")
        assert report.config.layout.mode is LayoutMode.CUSTOM
        assert (tmp_path / "agents").is_dir()


@pytest.mark.requires_git
class TestCreateRemove:
    def test_create_skips_unknown_agents(self, project_ctx: ProjectContext) -> None:
        report = create_agents(project_ctx, ["bezos", "nobody"])

        assert report.agents_with(AgentOutcome.CREATED) == ["bezos"]
        assert report.agents_with(AgentOutcome.UNKNOWN_AGENT) == ["nobody"]
        assert not report.has_failures
        assert report.config_saved

        repo = project_ctx.repo_root
        wt = project_ctx.config.workspace_dir / "bezos"
        assert wt in git_list_worktrees(repo)
        assert "bezos-workspace" in git_branches(repo)
        assert ProjectContext.load(repo).config.active_agents == ["bezos"]

    def test_only_unknown_agents_is_a_failure(self, project_ctx: ProjectContext) -> None:
        report = create_agents(project_ctx, ["nobody", "somebody"])
        assert report.has_failures
        assert not report.config_saved

    def test_create_falls_back_to_checked_out_branch(self, tmp_path: Path) -> None:
        repo = tmp_path / "legacy" / "oldrepo"
        repo.mkdir(parents=True)
        git_init_repo(repo, branch="master")
        repo = repo.resolve()
        init_project(repo, "billionaires")
        ctx = ProjectContext.load(repo)

        report = create_agents(ctx, ["bezos"])

        assert report.agents_with(AgentOutcome.CREATED) == ["bezos"]
        assert git(repo, "rev-parse", "bezos-workspace") == git(repo, "rev-parse", "master")

    def test_create_is_idempotent(self, project_ctx: ProjectContext) -> None:
        create_agents(project_ctx, ["bezos"])
        again = create_agents(project_ctx, ["bezos"])

        assert again.agents_with(AgentOutcome.ALREADY_ACTIVE) == ["bezos"]
        assert not again.config_saved
        assert project_ctx.config.active_agents == ["bezos"]

    def test_create_adopts_worktree_missing_from_config(self, project_ctx: ProjectContext) -> None:
        repo = project_ctx.repo_root
        git_create_worktree(repo, project_ctx.config.workspace_dir / "gates", "gates-workspace")

        report = create_agents(project_ctx, ["gates"])

        assert report.agents_with(AgentOutcome.ALREADY_ACTIVE) == ["gates"]
        assert report.config_saved
        assert project_ctx.config.active_agents == ["gates"]

    def test_remove_then_recreate_reuses_branch(self, project_ctx: ProjectContext) -> None:
        create_agents(project_ctx, ["bezos"])
        wt = project_ctx.config.workspace_dir / "bezos"
        (wt / "plan.txt").write_text("ship it\n", encoding="utf-8")
        git_commit(wt, "work in progress")

        removed = remove_agents(project_ctx, ["bezos"])
        assert removed.agents_with(AgentOutcome.REMOVED) == ["bezos"]
        assert not wt.exists()
        assert project_ctx.config.active_agents == []
        assert "bezos-workspace" in git_branches(project_ctx.repo_root)

        recreated = create_agents(project_ctx, ["bezos"])
        assert recreated.agents_with(AgentOutcome.CREATED) == ["bezos"]
        assert (wt / "plan.txt").read_text(encoding="utf-8") == "ship it\n"

    def test_remove_inactive_agent_drops_stale_entry(self, project_ctx: ProjectContext) -> None:
        create_agents(project_ctx, ["bezos"])
        git(project_ctx.repo_root, "worktree", "remove", str(project_ctx.config.workspace_dir / "bezos"))

        report = remove_agents(project_ctx, ["bezos", "gates"])

        assert report.agents_with(AgentOutcome.ALREADY_INACTIVE) == ["bezos", "gates"]
        assert report.config_saved
        assert ProjectContext.load(project_ctx.repo_root).config.active_agents == []

    def test_remove_dirty_worktree_needs_force(self, project_ctx: ProjectContext) -> None:
        create_agents(project_ctx, ["bezos"])
        wt = project_ctx.config.workspace_dir / "bezos"
        (wt / "README.md").write_text("edited\n", encoding="utf-8")

        refused = remove_agents(project_ctx, ["bezos"])
        assert refused.agents_with(AgentOutcome.FAILED) == ["bezos"]
        assert refused.has_failures
        assert wt.exists()

        forced = remove_agents(project_ctx, ["bezos"], force=True)
        assert forced.agents_with(AgentOutcome.REMOVED) == ["bezos"]


@pytest.mark.requires_git
class TestStatus:
    def test_status_reconciles_config_with_git(self, project_ctx: ProjectContext) -> None:
        create_agents(project_ctx, ["bezos"])
        project_ctx.config.add_agent("musk")
        project_ctx.save()
        git_create_worktree(project_ctx.repo_root, project_ctx.config.workspace_dir / "gates", "gates-workspace")

        report = status(project_ctx)

        by_agent = {a.agent: a for a in report.agents}
        assert by_agent["bezos"].state is AgentState.ACTIVE
        assert by_agent["bezos"].branch == "bezos-workspace"
        assert by_agent["musk"].state is AgentState.STALE
        assert by_agent["musk"].branch is None
        assert report.active_agents == ["bezos"]
        assert [a.agent for a in report.untracked] == ["gates"]
        assert not report.untracked[0].in_config

    def test_status_empty(self, project_ctx: ProjectContext) -> None:
        report = status(project_ctx)
        assert report.agents == []
        assert report.untracked == []
        assert report.to_dict()["theme"] == "billionaires"


@pytest.mark.requires_git
def test_create_then_remove_leaves_no_trace(project_ctx: ProjectContext) -> None:
    from proletariat.core.worktree import health

    create_agents(project_ctx, ["bezos"])
    remove_agents(project_ctx, ["bezos"])

    assert project_ctx.config.agent_path("bezos") not in git_list_worktrees(project_ctx.repo_root)
    assert project_ctx.config.active_agents == []
    assert health(project_ctx).get("bezos") is None
