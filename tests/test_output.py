"""Output rendering tests."""

from __future__ import annotations

import json

import click

from git_ruler.engine import ERROR_MESSAGE
from git_ruler.output import (
    CORRECT_TICK,
    SKIP_MARK,
    SKIPPED_NOTICE,
    WRONG_CROSS,
    format_score,
    render_human,
    render_json,
    render_outcome,
)
from git_ruler.rules.banner import TextBanner
from git_ruler.rules.base import RuleOptions, RuleResult
from git_ruler.rules.head import FileTrackedInHeadRule
from git_ruler.scoring import RuleOutcome, RunReport


def _tracked(path: str = "a.txt", **options: object) -> FileTrackedInHeadRule:
    return FileTrackedInHeadRule(path=path, options=RuleOptions(**options))


def test_render_outcome_marks_and_decorations() -> None:
    passed = RuleOutcome(
        rule=_tracked(pre_text="Task 1:", post_text="!"),
        status="passed",
        result=RuleResult(passed=True),
        awarded=1.0,
    )
    failed = RuleOutcome(
        rule=_tracked(failure_message="run git add a.txt"),
        status="failed",
        result=RuleResult(passed=False),
    )

    assert click.unstyle(render_outcome(passed)) == f"{CORRECT_TICK} Task 1: The file is tracked: a.txt!"
    assert click.unstyle(render_outcome(failed)) == (
        f"{WRONG_CROSS} The file is tracked: a.txt: run git add a.txt"
    )


def test_render_outcome_includes_result_message() -> None:
    outcome = RuleOutcome(
        rule=_tracked(),
        status="failed",
        result=RuleResult.fail("The repository has no commits yet."),
    )
    assert click.unstyle(render_outcome(outcome)) == (
        f"{WRONG_CROSS} The file is tracked: a.txt The repository has no commits yet."
    )


def test_error_details_only_in_verbose_mode() -> None:
    outcome = RuleOutcome(
        rule=_tracked(),
        status="failed",
        result=RuleResult(
            passed=False, message=ERROR_MESSAGE, error_occurred=True, error_detail="boom\n"
        ),
    )
    assert "Exception" not in render_outcome(outcome)
    assert click.unstyle(render_outcome(outcome, verbose=True)).endswith("\nException: boom")


def test_render_human_banner_skip_notice_and_score() -> None:
    report = RunReport(
        outcomes=[
            RuleOutcome(rule=TextBanner(heading="Part 1", width=20), status="banner"),
            RuleOutcome(
                rule=_tracked(score=2, stop_on_fail=True),
                status="failed",
                result=RuleResult(passed=False),
            ),
            RuleOutcome(rule=_tracked("b.txt", score=3), status="skipped"),
        ],
        total_awarded=0.0,
        total_available=5.0,
    )

    lines = click.unstyle(render_human(report)).splitlines()
    assert lines[0] == "------ Part 1 ------"
    assert lines[1].startswith(WRONG_CROSS)
    assert lines[2] == f"{SKIP_MARK} The file is tracked: b.txt"
    assert lines[3] == SKIPPED_NOTICE
    assert lines[4] == "Score: 0/5"


def test_render_human_omits_score_when_nothing_is_scored() -> None:
    report = RunReport(
        outcomes=[RuleOutcome(rule=_tracked(), status="passed", result=RuleResult(passed=True))]
    )
    output = click.unstyle(render_human(report))
    assert "Score" not in output
    assert SKIPPED_NOTICE not in output


def test_render_json_has_stable_schema_keys() -> None:
    report = RunReport(
        outcomes=[
            RuleOutcome(rule=TextBanner(heading="h"), status="banner"),
            RuleOutcome(
                rule=_tracked(score=1.5),
                status="passed",
                result=RuleResult(passed=True),
                awarded=1.5,
            ),
            RuleOutcome(
                rule=_tracked("b.txt", score=1),
                status="failed",
                result=RuleResult(
                    passed=False, message=ERROR_MESSAGE, error_occurred=True, error_detail="x"
                ),
            ),
        ],
        total_awarded=1.5,
        total_available=2.5,
    )

    payload = json.loads(render_json(report, repo="/tmp/repo", config_source="gitrules.json"))
    assert set(payload.keys()) == {"outcomes", "score", "skipped", "meta"}
    assert payload["score"] == {"awarded": 1.5, "available": 2.5}
    assert payload["skipped"] is False
    assert [item["status"] for item in payload["outcomes"]] == ["banner", "passed", "failed"]
    assert payload["outcomes"][1] == {
        "rule": "file-tracked-in-head",
        "title": "The file is tracked: a.txt",
        "status": "passed",
        "message": "",
        "score": 1.5,
        "awarded": 1.5,
    }
    assert "error" not in payload["outcomes"][2]
    assert set(payload["meta"].keys()) == {"generated_at", "repo", "config_source", "version"}
    assert payload["meta"]["generated_at"].endswith("Z")

    verbose = json.loads(
        render_json(report, repo="/tmp/repo", config_source=None, verbose=True)
    )
    assert verbose["outcomes"][2]["error"] == "x"


def test_format_score() -> None:
    assert format_score(10.0) == "10"
    assert format_score(22.5) == "22.5"
    assert format_score(0) == "0"
