from __future__ import annotations

import json
from pathlib import Path

import pytest

from helpers.git_helpers import git_list_worktrees
from proletariat.cli._dispatcher import build_parser, main


def _run(capsys, argv):
    code = main(argv)
    out, err = capsys.readouterr()
    return code, out, err


def test_parser_registers_theme_verbs() -> None:
    parser = build_parser()
    for verb in ("hire", "drive", "buy", "fire", "park", "sell"):
        args = parser.parse_args([verb, "bezos"])
        assert args.command == verb
        assert args.agents == ["bezos"]
    for verb in ("staff", "garage", "portfolio"):
        args = parser.parse_args([verb, "--json"])
        assert args.json
        assert callable(args._func)


def test_no_command_prints_help(capsys) -> None:
    code, out, _ = _run(capsys, [])
    assert code == 0
    assert "prlt" in out


def test_themes_json(capsys) -> None:
    code, out, _ = _run(capsys, ["themes", "--json"])
    assert code == 0
    assert [t["name"] for t in json.loads(out)["themes"]] == ["billionaires", "toyotas", "companies"]


def test_list_outside_repository_uses_default_theme(capsys, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    code, out, _ = _run(capsys, ["list", "--json"])
    assert code == 0
    payload = json.loads(out)
    assert payload["theme"] == "billionaires"
    assert payload["active"] == []


@pytest.mark.requires_git
class TestWorkflow:
    def test_init_hire_staff_fire(self, capsys, git_repo: Path) -> None:
        root = ["--repo-root", str(git_repo)]

        code, out, _ = _run(capsys, ["init", "--theme", "billionaires", "--yes", *root])
        assert code == 0
        assert "Initialized myrepo" in out

        code, out, _ = _run(capsys, ["hire", "bezos", "gates", *root])
        assert code == 0
        assert "bezos: ready at" in out
        staff = git_repo.parent / "myrepo-staff"
        assert staff / "bezos" in git_list_worktrees(git_repo)

        code, out, _ = _run(capsys, ["staff", "--json", *root])
        assert code == 0
        agents = {a["agent"]: a for a in json.loads(out)["agents"]}
        assert agents["gates"]["state"] == "active"
        assert agents["gates"]["branch"] == "gates-workspace"

        code, out, _ = _run(capsys, ["fire", "gates", "--json", *root])
        assert code == 0
        assert json.loads(out)["results"][0]["outcome"] == "removed"

        code, out, _ = _run(capsys, ["list", *root])
        assert "bezos (active)" in out
        assert "gates (active)" not in out

    def test_create_without_agents_is_a_usage_error(self, capsys, initialized_repo: Path) -> None:
        code, _, err = _run(capsys, ["hire", "--repo-root", str(initialized_repo)])
        assert code == 1
        assert "Usage: prlt hire" in err

    def test_unknown_agents_only_fails(self, capsys, initialized_repo: Path) -> None:
        code, out, _ = _run(capsys, ["create", "nobody", "--json", "--repo-root", str(initialized_repo)])
        assert code == 1
        payload = json.loads(out)
        assert payload["ok"] is False
        assert payload["results"][0]["outcome"] == "unknown_agent"

    def test_not_initialized_json_error(self, capsys, git_repo: Path) -> None:
        code, out, err = _run(capsys, ["status", "--json", "--repo-root", str(git_repo)])
        assert code == 1
        assert out == ""
        payload = json.loads(err)
        assert payload["code"] == "NotInitializedError"
        assert payload["context"]["repoRoot"] == str(git_repo)

    def test_health_repair_cycle(self, capsys, initialized_repo: Path) -> None:
        root = ["--repo-root", str(initialized_repo)]
        _run(capsys, ["hire", "bezos", *root])
        bezos = initialized_repo.parent / "myrepo-staff" / "bezos"
        (bezos / ".git").write_text("gitdir: /nowhere\n", encoding="utf-8")

        code, out, _ = _run(capsys, ["health", *root])
        assert code == 1
        assert "bezos: Broken" in out

        code, out, _ = _run(capsys, ["repair", "--json", *root])
        assert code == 0
        assert json.loads(out)["counts"] == {"repaired": 1, "alreadyCorrect": 0, "failed": 0}

        code, out, _ = _run(capsys, ["health", "--json", *root])
        assert code == 0

    def test_migrate_moves_repository(self, capsys, initialized_repo: Path) -> None:
        root = ["--repo-root", str(initialized_repo)]
        _run(capsys, ["hire", "bezos", *root])

        code, out, _ = _run(capsys, ["migrate", "--yes", "--json", *root])

        assert code == 0
        payload = json.loads(out)
        target = initialized_repo.parent / "myrepo-workspace" / "myrepo"
        assert payload["state"] == "done"
        assert payload["target"] == str(target)
        assert payload["relinked"] == ["bezos"]

        code, out, _ = _run(capsys, ["health", "--json", "--repo-root", str(target)])
        assert code == 0

    def test_upgrade_legacy_config(self, capsys, git_repo: Path) -> None:
        legacy = git_repo / ".proletariat" / "config.json"
        legacy.parent.mkdir()
        legacy.write_text(
            json.dumps(
                {
                    "projectName": "myrepo",
                    "themeName": "toyotas",
                    "workspaceDir": str(git_repo.parent / "myrepo-garage"),
                    "activeAgents": [],
                    "theme": {"name": "toyotas"},
                }
            ),
            encoding="utf-8",
        )
        root = ["--repo-root", str(git_repo)]

        code, out, _ = _run(capsys, ["upgrade", "--json", *root])
        assert code == 0
        assert json.loads(out)["alreadyUpToDate"] is False
        assert (git_repo / ".proletariat" / "repo.json").is_file()

        code, out, _ = _run(capsys, ["upgrade", *root])
        assert code == 0
        assert "Configuration is up to date" in out
