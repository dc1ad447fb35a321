"""Run orchestration: ordered evaluation, stop-on-fail cascade and scoring."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from git_ruler.engine import evaluate_rule
from git_ruler.git import GitRepository
from git_ruler.rules import is_banner
from git_ruler.rules.base import Rule, RuleResult

logger = logging.getLogger(__name__)

OutcomeStatus = Literal["passed", "failed", "skipped", "banner"]
RunState = Literal["running", "skipping"]


@dataclass(slots=True)
class RuleOutcome:
    """What happened to one rule during a run."""

    rule: Rule
    status: OutcomeStatus
    result: RuleResult | None = None
    awarded: float = 0.0


@dataclass(slots=True)
class RunReport:
    """Top-level run output."""

    outcomes: list[RuleOutcome] = field(default_factory=list)
    total_awarded: float = 0.0
    total_available: float = 0.0

    @property
    def skipped(self) -> bool:
        return any(outcome.status == "skipped" for outcome in self.outcomes)

    @property
    def failed(self) -> bool:
        return any(outcome.status == "failed" for outcome in self.outcomes)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)


def total_available_score(rules: Sequence[Rule]) -> float:
    """Sum of ``score-if-correct`` over all checkable rules."""
    return sum((rule.options.score for rule in rules if not is_banner(rule)), 0.0)


def run_rules(rules: Sequence[Rule], repo: GitRepository) -> RunReport:
    """Evaluate rules in declaration order.

    Once a failing rule marked ``stop-on-fail`` has been reported, every later
    rule is reported as skipped without touching the repository. Skipped
    rules still count toward the available score. Banners are always
    rendered and take no part in the cascade or the score.
    """
    report = RunReport(total_available=total_available_score(rules))
    state: RunState = "running"

    for rule in rules:
        if is_banner(rule):
            report.outcomes.append(RuleOutcome(rule=rule, status="banner"))
            continue

        if state == "skipping":
            report.outcomes.append(RuleOutcome(rule=rule, status="skipped"))
            continue

        result = evaluate_rule(rule, repo)
        if result.passed:
            outcome = RuleOutcome(
                rule=rule, status="passed", result=result, awarded=rule.options.score
            )
            report.total_awarded += rule.options.score
        else:
            outcome = RuleOutcome(rule=rule, status="failed", result=result)
            if rule.options.stop_on_fail:
                logger.info("critical rule failed, skipping the rest: %s", rule.title)
                state = "skipping"
        report.outcomes.append(outcome)

    return report
