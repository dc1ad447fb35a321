"""CLI tests against synthetic git repositories."""

from __future__ import annotations

import json
from pathlib import Path

import click
from typer.testing import CliRunner

from git_ruler import __version__
from git_ruler.cli import app
from git_ruler.output import SKIPPED_NOTICE
from git_ruler.workspace import SETUP_MARKER
from tests.helpers_git import build_history_repo

runner = CliRunner()

RULES = {
    "rules": [
        {"rule": "text", "heading": "Basics", "width": 20},
        {"rule": "head-exists", "score-if-correct": 1},
        {"rule": "file-tracked-in-head", "path": "file1.txt", "score-if-correct": 2},
        {
            "rule": "branch-exists",
            "branch": "feature",
            "score-if-correct": 3,
            "failure-message": "create the feature branch",
        },
        {"rule": "any-commit-message-contains", "contents": "add readme", "score-if-correct": 4},
    ],
    "setup-files": {"notes.txt": "remember to commit\n"},
}


def _repo_with_rules(tmp_path: Path, rules: object = RULES) -> Path:
    repo = build_history_repo(tmp_path).path
    (repo / "gitrules.json").write_text(json.dumps(rules), encoding="utf-8")
    return repo


def test_root_help_works() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "check" in result.stdout
    assert "rules" in result.stdout
    assert "config-validate" in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_check_human_output(tmp_path: Path) -> None:
    repo = _repo_with_rules(tmp_path)
    result = runner.invoke(app, ["check", "--repo", str(repo)])

    assert result.exit_code == 0
    output = click.unstyle(result.stdout)
    lines = output.splitlines()
    assert lines[0] == "------ Basics ------"
    assert lines[1] == "[✓] There is a valid repository"
    assert lines[2] == "[✓] The file is tracked: file1.txt"
    assert lines[3] == "[✘] The branch exists: feature: create the feature branch"
    assert lines[4] == "[✓] A commit has a message containing 'add readme'"
    assert lines[5] == "Score: 7/10"

    assert (repo / "notes.txt").read_text(encoding="utf-8") == "remember to commit\n"
    assert (repo / SETUP_MARKER).exists()


def test_check_strict_exits_nonzero_on_failure(tmp_path: Path) -> None:
    repo = _repo_with_rules(tmp_path)
    result = runner.invoke(app, ["check", "--repo", str(repo), "--strict"])
    assert result.exit_code == 1


def test_check_json_output_with_cascade(tmp_path: Path) -> None:
    rules = [
        {"rule": "branch-exists", "branch": "feature", "stop-on-fail": True, "score-if-correct": 1},
        {"rule": "head-exists", "score-if-correct": 2},
    ]
    repo = _repo_with_rules(tmp_path, rules)
    result = runner.invoke(app, ["check", "--repo", str(repo), "--format", "json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [item["status"] for item in payload["outcomes"]] == ["failed", "skipped"]
    assert payload["skipped"] is True
    assert payload["score"] == {"awarded": 0.0, "available": 3.0}
    assert payload["meta"]["config_source"].endswith("gitrules.json")


def test_check_reports_skip_notice(tmp_path: Path) -> None:
    rules = [
        {"rule": "file-tracked-in-branch", "branch": "feature", "path": "x", "stop-on-fail": True},
        {"rule": "head-exists"},
    ]
    repo = _repo_with_rules(tmp_path, rules)
    result = runner.invoke(app, ["check", "--repo", str(repo)])

    output = click.unstyle(result.stdout)
    assert "The branch with that name doesn't exist" in output
    assert "[-] There is a valid repository" in output
    assert SKIPPED_NOTICE in output


def test_check_with_explicit_config(tmp_path: Path) -> None:
    repo = build_history_repo(tmp_path).path
    config = tmp_path / "elsewhere.toml"
    config.write_text('[[rules]]\nrule = "branch-exists"\nbranch = "branch-1"\n', encoding="utf-8")

    result = runner.invoke(app, ["check", "--repo", str(repo), "--config", str(config)])
    assert result.exit_code == 0
    assert "[✓] The branch exists: branch-1" in click.unstyle(result.stdout)


def test_check_rejects_invalid_inputs(tmp_path: Path) -> None:
    plain = tmp_path / "plain"
    plain.mkdir()
    (plain / "gitrules.json").write_text("[]", encoding="utf-8")
    assert runner.invoke(app, ["check", "--repo", str(plain)]).exit_code == 2

    repo = _repo_with_rules(tmp_path, "not rules")
    assert runner.invoke(app, ["check", "--repo", str(repo)]).exit_code == 2
    assert runner.invoke(app, ["check", "--repo", str(repo), "--format", "xml"]).exit_code == 2


def test_rules_command_lists_vocabulary() -> None:
    human = runner.invoke(app, ["rules"])
    assert human.exit_code == 0
    assert "Available rules:" in human.stdout
    assert "- ignored (path)" in human.stdout
    assert "- head-exists (no parameters)" in human.stdout

    as_json = runner.invoke(app, ["rules", "--format", "json"])
    payload = json.loads(as_json.stdout)
    assert len(payload["rules"]) == 17
    assert payload["rules"][0]["rule"] == "head-exists"


def test_config_validate(tmp_path: Path) -> None:
    repo = _repo_with_rules(tmp_path)
    result = runner.invoke(app, ["config-validate", "--repo", str(repo), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["ok"] is True
    assert payload["rule_count"] == 5
    assert payload["total_available_score"] == 10.0
    assert payload["setup_files"] == ["notes.txt"]

    human = runner.invoke(app, ["config-validate", "--repo", str(repo)])
    assert "Config is valid." in human.stdout
    assert "- available score: 10" in human.stdout


def test_config_validate_flags_unknown_rules(tmp_path: Path) -> None:
    repo = _repo_with_rules(tmp_path, [{"rule": "mystery"}])
    result = runner.invoke(app, ["config-validate", "--repo", str(repo)])
    assert result.exit_code == 0
    assert "Config loaded with unknown rules." in result.stdout
    assert "mystery" in result.stdout


def test_relative_config_resolves_against_repo(tmp_path: Path) -> None:
    repo = build_history_repo(tmp_path).path
    (repo / "checks").mkdir()
    (repo / "checks" / "rules.json").write_text(
        json.dumps([{"rule": "branch-exists", "branch": "main"}]), encoding="utf-8"
    )

    result = runner.invoke(app, ["check", "-r", str(repo), "-c", "checks/rules.json"])
    assert result.exit_code == 0
    assert "[✓] The branch exists: main" in click.unstyle(result.stdout)

    help_result = runner.invoke(app, ["check", "--help"])
    assert "Relative" in click.unstyle(help_result.stdout)
