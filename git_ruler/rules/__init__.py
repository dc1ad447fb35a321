"""Rules package: the closed vocabulary of rule kinds and rule construction."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from git_ruler.git import GitRepository
from git_ruler.rules.banner import TextBanner
from git_ruler.rules.base import Rule, RuleOptions, RuleParameters, RuleResult, titled
from git_ruler.rules.branches import (
    BranchExistsRule,
    CommitWithMessageWasMadeOnBranchRule,
    CommitWithMessageWasMergedIntoBranchRule,
    FileContainsInBranchRule,
    FileTrackedInBranchRule,
)
from git_ruler.rules.commit_messages import (
    AnyCommitMessageContainsRule,
    AnyCommitMessageForFileContainsRule,
    CommitWithMessageDoesntUpdateFileRule,
    CommitWithMessageUpdatedFileRule,
    LastCommitMessageForFileContainsRule,
)
from git_ruler.rules.head import (
    FileContainsInHeadRule,
    FileHasHashInHeadRule,
    FileTrackedInHeadRule,
    FileUntrackedInHeadRule,
    HeadExistsRule,
)
from git_ruler.rules.ignored import IgnoredRule

RULE_KEY = "rule"
UNKNOWN_RULE_MESSAGE = "Could not run this rule."


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule kind metadata for listing."""

    kind: str
    name: str
    description: str
    parameters: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class _RuleSpec:
    kind: str
    factory: Callable[[RuleParameters], Rule]
    name: str
    description: str
    parameters: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class UnknownRule:
    """Stands in for a rule whose kind is not recognised; always fails."""

    kind: ClassVar[str] = "unknown"
    name: str
    options: RuleOptions = RuleOptions()

    @property
    def title(self) -> str:
        return titled(self.options, "Unknown rule")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        return RuleResult.fail(UNKNOWN_RULE_MESSAGE)


def _spec(rule_cls: Any, *, parameters: tuple[str, ...]) -> _RuleSpec:
    return _RuleSpec(
        kind=rule_cls.kind,
        factory=rule_cls.from_parameters,
        name=rule_cls.__name__,
        description=(rule_cls.__doc__ or "").strip().partition("\n")[0],
        parameters=parameters,
    )


_RULE_SPECS: tuple[_RuleSpec, ...] = (
    _spec(HeadExistsRule, parameters=()),
    _spec(FileTrackedInHeadRule, parameters=("path",)),
    _spec(FileUntrackedInHeadRule, parameters=("path",)),
    _spec(FileHasHashInHeadRule, parameters=("path", "hash")),
    _spec(FileContainsInHeadRule, parameters=("path", "contents", "ignore-case")),
    _spec(LastCommitMessageForFileContainsRule, parameters=("path", "contents", "ignore-case")),
    _spec(AnyCommitMessageForFileContainsRule, parameters=("path", "contents", "ignore-case")),
    _spec(AnyCommitMessageContainsRule, parameters=("contents", "ignore-case")),
    _spec(CommitWithMessageUpdatedFileRule, parameters=("contents", "path", "ignore-case")),
    _spec(CommitWithMessageDoesntUpdateFileRule, parameters=("contents", "path", "ignore-case")),
    _spec(IgnoredRule, parameters=("path",)),
    _spec(FileTrackedInBranchRule, parameters=("branch", "path")),
    _spec(FileContainsInBranchRule, parameters=("branch", "path", "contents")),
    _spec(BranchExistsRule, parameters=("branch",)),
    _spec(CommitWithMessageWasMergedIntoBranchRule, parameters=("branch", "contents", "ignore-case")),
    _spec(CommitWithMessageWasMadeOnBranchRule, parameters=("branch", "contents", "ignore-case")),
    _spec(TextBanner, parameters=("heading", "separator", "width", "double-space")),
)

RULE_TYPES: dict[str, _RuleSpec] = {spec.kind: spec for spec in _RULE_SPECS}


def build_rule(mapping: Mapping[str, Any], *, index: int = 0) -> Rule:
    """Build one rule from its raw mapping.

    Unknown kinds build an ``UnknownRule`` so the run can report them; missing
    or mistyped parameters raise ``ValueError``.
    """
    label = f"rules[{index}]"
    raw_kind = mapping.get(RULE_KEY)
    if not isinstance(raw_kind, str) or not raw_kind:
        raise ValueError(f"{label}: '{RULE_KEY}' must be a non-empty string")

    params = RuleParameters(raw=mapping, label=f"{label} ({raw_kind})")
    spec = RULE_TYPES.get(raw_kind)
    if spec is None:
        return UnknownRule(name=raw_kind, options=params.options())
    return spec.factory(params)


def build_rules(mappings: list[Mapping[str, Any]]) -> list[Rule]:
    """Build rules in declaration order."""
    return [build_rule(mapping, index=index) for index, mapping in enumerate(mappings)]


def is_banner(rule: Rule) -> bool:
    return isinstance(rule, TextBanner)


def known_kinds() -> list[str]:
    return [spec.kind for spec in _RULE_SPECS]


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for every known rule kind, in vocabulary order."""
    return [
        RuleInfo(
            kind=spec.kind,
            name=spec.name,
            description=spec.description,
            parameters=spec.parameters,
        )
        for spec in _RULE_SPECS
    ]
