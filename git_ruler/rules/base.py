"""Base rule protocol, result model and shared rule helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol

from git_ruler.git import Commit, GitRepository


@dataclass(frozen=True, slots=True)
class RuleResult:
    """Outcome of evaluating one rule."""

    passed: bool
    message: str = ""
    error_occurred: bool = False
    error_detail: str = ""

    @classmethod
    def fail(cls, message: str) -> RuleResult:
        return cls(passed=False, message=message)


@dataclass(frozen=True, slots=True)
class RuleOptions:
    """Presentation and scoring options every rule kind accepts."""

    score: float = 0.0
    stop_on_fail: bool = False
    pre_text: str | None = None
    post_text: str | None = None
    failure_message: str | None = None
    alternative_title: str | None = None


class Rule(Protocol):
    """Protocol for a declarative repository check."""

    kind: ClassVar[str]
    options: RuleOptions

    @property
    def title(self) -> str:
        """Human-readable description of what the rule checks."""

    def evaluate(self, repo: GitRepository) -> RuleResult:
        """Check the rule against a repository."""


@dataclass(frozen=True, slots=True)
class RuleParameters:
    """Typed access to one raw rule mapping, used while constructing rules.

    Every accessor raises ``ValueError`` naming the rule and the key, so a
    malformed rule file is rejected before anything is evaluated.
    """

    raw: Mapping[str, Any]
    label: str

    def string(self, key: str) -> str:
        value = self._get(key)
        if not isinstance(value, str):
            raise ValueError(f"{self.label}: '{key}' must be a string")
        return value

    def optional_string(self, key: str) -> str | None:
        if key not in self.raw:
            return None
        return self.string(key)

    def boolean(self, key: str, default: bool = False) -> bool:
        if key not in self.raw:
            return default
        value = self._get(key)
        if not isinstance(value, bool):
            raise ValueError(f"{self.label}: '{key}' must be a boolean")
        return value

    def integer(self, key: str, default: int) -> int:
        if key not in self.raw:
            return default
        value = self._get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{self.label}: '{key}' must be an integer")
        return value

    def number(self, key: str, default: float = 0.0) -> float:
        if key not in self.raw:
            return default
        value = self._get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{self.label}: '{key}' must be a number")
        return float(value)

    def options(self) -> RuleOptions:
        return RuleOptions(
            score=self.number("score-if-correct"),
            stop_on_fail=self.boolean("stop-on-fail"),
            pre_text=self.optional_string("pre-text"),
            post_text=self.optional_string("post-text"),
            failure_message=self.optional_string("failure-message"),
            alternative_title=self.optional_string("alternative-title"),
        )

    def _get(self, key: str) -> Any:
        if key not in self.raw:
            raise ValueError(f"{self.label}: missing required parameter '{key}'")
        return self.raw[key]


def titled(options: RuleOptions, default: str) -> str:
    """Return the alternative title when configured, else ``default``."""
    if options.alternative_title is not None:
        return options.alternative_title
    return default


def text_contains(text: str, contents: str, ignore_case: bool) -> bool:
    if ignore_case:
        return contents.lower() in text.lower()
    return contents in text


def decode_blob(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def find_commit_with_message(
    repo: GitRepository, contents: str, ignore_case: bool
) -> Commit | None:
    """Return the first commit, across all refs, whose message contains ``contents``.

    Commits are scanned in ``git log --all --topo-order`` order, so the newest
    matching commit reachable from any ref wins.
    """
    return first_matching_commit(repo.log_all_refs(), contents, ignore_case)


def first_matching_commit(
    commits: Iterable[Commit], contents: str, ignore_case: bool
) -> Commit | None:
    for commit in commits:
        if text_contains(commit.message, contents, ignore_case):
            return commit
    return None


def is_path_updated_in_commit(repo: GitRepository, commit: Commit, path: str) -> bool:
    """Check whether a commit introduced or changed ``path``.

    An orphan commit updated every path it contains. Any other commit is
    diffed against its first parent only, merges included.
    """
    if commit.is_orphan:
        return repo.find_path_in_tree(commit.id, path) is not None
    parent_tree = repo.commit_tree(commit.parents[0])
    commit_tree = repo.commit_tree(commit.id)
    return repo.diff_path_between(parent_tree, commit_tree, path)
