"""Rule evaluation: the one place rule faults become failing results."""

from __future__ import annotations

import logging
import traceback

from git_ruler.git import BranchNotFoundError, GitRepository
from git_ruler.rules.base import Rule, RuleResult

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "An error occurred when running this rule."
BRANCH_NOT_FOUND_MESSAGE = "The branch with that name doesn't exist"


def evaluate_rule(rule: Rule, repo: GitRepository) -> RuleResult:
    """Evaluate one rule; never raises.

    A missing branch becomes a branch-specific failure. Anything else that
    goes wrong (git failures, I/O errors, undecodable objects) becomes a
    generic failure carrying the error text and traceback.
    """
    logger.debug("evaluating %s: %s", rule.kind, rule.title)
    try:
        result = rule.evaluate(repo)
    except BranchNotFoundError as exc:
        logger.debug("branch lookup failed for %s: %s", rule.kind, exc)
        return RuleResult.fail(BRANCH_NOT_FOUND_MESSAGE)
    except Exception as exc:  # noqa: BLE001 - rule faults must not abort the run
        logger.debug("rule %s raised", rule.kind, exc_info=True)
        return _result_from_exception(exc)

    logger.debug("%s -> %s", rule.kind, "passed" if result.passed else "failed")
    return result


def _result_from_exception(exc: Exception) -> RuleResult:
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return RuleResult(
        passed=False,
        message=ERROR_MESSAGE,
        error_occurred=True,
        error_detail=f"{exc}\n{trace}",
    )
