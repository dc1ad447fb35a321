"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from git_ruler import __version__
from git_ruler.scoring import RuleOutcome, RunReport

CORRECT_TICK = "[✓]"
WRONG_CROSS = "[✘]"
SKIP_MARK = "[-]"
SKIPPED_NOTICE = "Skipped rules because a critical rule didn't pass"


def render_human(report: RunReport, *, verbose: bool = False) -> str:
    """Render one line per rule, then the skip notice and score summary."""
    lines = [render_outcome(outcome, verbose=verbose) for outcome in report.outcomes]

    if report.skipped:
        lines.append(click.style(SKIPPED_NOTICE, fg="cyan"))

    if report.total_available > 0:
        lines.append(
            click.style(
                f"Score: {format_score(report.total_awarded)}/"
                f"{format_score(report.total_available)}",
                bold=True,
            )
        )
    return "\n".join(lines)


def render_outcome(outcome: RuleOutcome, *, verbose: bool = False) -> str:
    rule = outcome.rule
    if outcome.status == "banner":
        return rule.title
    if outcome.status == "skipped":
        return f"{click.style(SKIP_MARK, fg='yellow')} {rule.title}"

    result = outcome.result
    passed = outcome.status == "passed"
    mark = click.style(CORRECT_TICK, fg="green") if passed else click.style(WRONG_CROSS, fg="red")

    parts = [mark]
    if rule.options.pre_text:
        parts.append(rule.options.pre_text)
    parts.append(rule.title)
    if result is not None and result.message:
        parts.append(result.message)
    line = " ".join(parts)

    if rule.options.post_text:
        line += rule.options.post_text
    if not passed and rule.options.failure_message:
        line += f": {rule.options.failure_message}"
    if verbose and result is not None and result.error_occurred:
        line += f"\nException: {result.error_detail.rstrip()}"
    return line


def render_json(
    report: RunReport,
    *,
    repo: str,
    config_source: str | None,
    verbose: bool = False,
) -> str:
    """Render stable JSON output for CI and automation."""
    payload = build_json_payload(
        report,
        repo=repo,
        config_source=config_source,
        verbose=verbose,
    )
    return json.dumps(payload, sort_keys=True)


def build_json_payload(
    report: RunReport,
    *,
    repo: str,
    config_source: str | None,
    verbose: bool = False,
) -> dict[str, Any]:
    """Build stable JSON payload for CI and automation."""
    meta: dict[str, Any] = {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "repo": repo,
        "config_source": config_source,
        "version": __version__,
    }
    return {
        "outcomes": [_serialize_outcome(item, verbose=verbose) for item in report.outcomes],
        "score": {
            "awarded": report.total_awarded,
            "available": report.total_available,
        },
        "skipped": report.skipped,
        "meta": meta,
    }


def _serialize_outcome(outcome: RuleOutcome, *, verbose: bool) -> dict[str, Any]:
    result = outcome.result
    payload: dict[str, Any] = {
        "rule": outcome.rule.kind,
        "title": outcome.rule.title,
        "status": outcome.status,
        "message": result.message if result is not None else "",
        "score": 0.0 if outcome.status == "banner" else outcome.rule.options.score,
        "awarded": outcome.awarded,
    }
    if verbose and result is not None and result.error_occurred:
        payload["error"] = result.error_detail
    return payload


def format_score(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
