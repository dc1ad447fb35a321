"""Tests for rules-file loading and first-run setup files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from git_ruler.config import load_config
from git_ruler.rules import UnknownRule
from git_ruler.rules.banner import TextBanner
from git_ruler.rules.branches import BranchExistsRule
from git_ruler.rules.head import FileTrackedInHeadRule
from git_ruler.workspace import SETUP_MARKER, SETUP_MARKER_CONTENT, ensure_setup, is_setup_done


def _write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_loads_json_array_of_rules(tmp_path: Path) -> None:
    _write_json(
        tmp_path / "gitrules.json",
        [
            {"rule": "text", "heading": "Part 1"},
            {"rule": "file-tracked-in-head", "path": "a.txt", "score-if-correct": 10},
            {"rule": "branch-exists", "branch": "main", "score-if-correct": 12.5},
        ],
    )
    config = load_config(tmp_path)

    assert [type(rule) for rule in config.rules] == [
        TextBanner,
        FileTrackedInHeadRule,
        BranchExistsRule,
    ]
    assert config.setup_files == {}
    assert config.total_available_score() == 22.5
    assert config.source == str((tmp_path / "gitrules.json").resolve())


def test_loads_json_object_with_setup_files(tmp_path: Path) -> None:
    _write_json(
        tmp_path / "gitrules.json",
        {
            "rules": [{"rule": "head-exists"}, {"rule": "mystery"}],
            "setup-files": {"notes/todo.txt": "write tests\n"},
        },
    )
    config = load_config(tmp_path)

    assert isinstance(config.rules[1], UnknownRule)
    assert config.setup_files == {"notes/todo.txt": "write tests\n"}
    assert config.to_dict()["rule_kinds"] == ["head-exists", "unknown"]


def test_loads_toml_rules(tmp_path: Path) -> None:
    (tmp_path / "gitrules.toml").write_text(
        "\n".join(
            [
                "[[rules]]",
                'rule = "file-contains-in-head"',
                'path = "README.md"',
                'contents = "hello"',
                "ignore-case = true",
                "score-if-correct = 5",
                "stop-on-fail = true",
                "",
                '[setup-files]',
                '"hello.txt" = "hi"',
            ]
        ),
        encoding="utf-8",
    )
    config = load_config(tmp_path)

    rule = config.rules[0]
    assert rule.kind == "file-contains-in-head"
    assert rule.options.stop_on_fail
    assert config.total_available_score() == 5.0
    assert config.setup_files == {"hello.txt": "hi"}


def test_json_default_wins_over_toml(tmp_path: Path) -> None:
    _write_json(tmp_path / "gitrules.json", [{"rule": "head-exists"}])
    (tmp_path / "gitrules.toml").write_text('[[rules]]\nrule = "branch-exists"\n', encoding="utf-8")
    assert load_config(tmp_path).rules[0].kind == "head-exists"


def test_explicit_relative_path_resolves_against_repo(tmp_path: Path) -> None:
    (tmp_path / "checks").mkdir()
    _write_json(tmp_path / "checks" / "rules.json", [{"rule": "head-exists"}])
    config = load_config(tmp_path, Path("checks/rules.json"))
    assert len(config.rules) == 1


@pytest.mark.parametrize(
    ("filename", "content", "message"),
    [
        ("gitrules.json", "[{", "JSON formatting error"),
        ("gitrules.toml", "rules = [", "Invalid TOML"),
        ("gitrules.json", '{"rules": {"rule": "head-exists"}}', "rules must be a list of tables"),
        ("gitrules.json", '"just a string"', "Config must be a list of rules"),
        ("gitrules.json", '{"setup-files": {"a.txt": 1}}', "setup-files.a.txt must be a string"),
        ("gitrules.json", '[{"rule": "branch-exists"}]', "missing required parameter 'branch'"),
    ],
)
def test_invalid_rules_files_raise_value_error(
    tmp_path: Path, filename: str, content: str, message: str
) -> None:
    (tmp_path / filename).write_text(content, encoding="utf-8")
    with pytest.raises(ValueError, match=message):
        load_config(tmp_path)


def test_missing_rules_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No rules file found"):
        load_config(tmp_path)
    with pytest.raises(ValueError, match="Config file does not exist"):
        load_config(tmp_path, Path("nope.json"))


def test_setup_files_are_written_once(tmp_path: Path) -> None:
    created = ensure_setup(tmp_path, {"notes/todo.txt": "first\n", "hello.txt": "hi"})

    assert sorted(path.name for path in created) == ["hello.txt", "todo.txt"]
    assert (tmp_path / "notes" / "todo.txt").read_text(encoding="utf-8") == "first\n"
    assert (tmp_path / SETUP_MARKER).read_text(encoding="utf-8") == SETUP_MARKER_CONTENT
    assert is_setup_done(tmp_path)

    (tmp_path / "hello.txt").unlink()
    assert ensure_setup(tmp_path, {"hello.txt": "again"}) == []
    assert not (tmp_path / "hello.txt").exists()


def test_setup_keeps_existing_files(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    (tmp_path / "hello.txt").write_text("mine", encoding="utf-8")

    with caplog.at_level("WARNING", logger="git_ruler.workspace"):
        created = ensure_setup(tmp_path, {"hello.txt": "theirs"})

    assert created == []
    assert (tmp_path / "hello.txt").read_text(encoding="utf-8") == "mine"
    assert "already exists" in caplog.text
    assert is_setup_done(tmp_path)
