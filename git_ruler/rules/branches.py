"""Rules that inspect branches and the commits reachable from them.

Branch names match by substring against full ref names (``refs/heads/...``),
so ``feature`` also finds ``refs/heads/my-feature``. Lookups that cannot find
a branch raise ``BranchNotFoundError``; the engine turns that into a
branch-specific message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from git_ruler.git import GitRepository
from git_ruler.rules.base import (
    RuleOptions,
    RuleParameters,
    RuleResult,
    decode_blob,
    find_commit_with_message,
    text_contains,
    titled,
)
from git_ruler.rules.commit_messages import NO_COMMIT_MESSAGE


@dataclass(frozen=True, slots=True)
class FileTrackedInBranchRule:
    """Passes when a path exists in the tip tree of a branch."""

    kind: ClassVar[str] = "file-tracked-in-branch"
    branch: str
    path: str
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> FileTrackedInBranchRule:
        return cls(branch=params.string("branch"), path=params.string("path"), options=params.options())

    @property
    def title(self) -> str:
        return titled(self.options, f"The file: {self.path} is tracked on the branch {self.branch}")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        tip = repo.resolve_branch(self.branch)
        return RuleResult(passed=repo.find_path_in_tree(tip, self.path) is not None)


@dataclass(frozen=True, slots=True)
class FileContainsInBranchRule:
    """Passes when a file at a branch tip contains the given text, ignoring case."""

    kind: ClassVar[str] = "file-contains-in-branch"
    branch: str
    path: str
    contents: str
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> FileContainsInBranchRule:
        return cls(
            branch=params.string("branch"),
            path=params.string("path"),
            contents=params.string("contents"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(
            self.options,
            f"The file: {self.path} on the branch {self.branch} contains the text "
            f"'{self.contents}'",
        )

    def evaluate(self, repo: GitRepository) -> RuleResult:
        tip = repo.resolve_branch(self.branch)
        object_id = repo.find_path_in_tree(tip, self.path)
        if object_id is None:
            return RuleResult(passed=False)
        text = decode_blob(repo.read_blob(object_id))
        return RuleResult(passed=text_contains(text, self.contents, ignore_case=True))


@dataclass(frozen=True, slots=True)
class BranchExistsRule:
    """Passes when a branch with a matching name exists."""

    kind: ClassVar[str] = "branch-exists"
    branch: str
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> BranchExistsRule:
        return cls(branch=params.string("branch"), options=params.options())

    @property
    def title(self) -> str:
        return titled(self.options, f"The branch exists: {self.branch}")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        return RuleResult(passed=repo.branch_exists(self.branch))


@dataclass(frozen=True, slots=True)
class CommitWithMessageWasMergedIntoBranchRule:
    """Passes when a commit on the branch has the matching commit as a direct parent.

    This detects a merge (or a commit made directly on top) one hop away; it
    is not a general reachability test.
    """

    kind: ClassVar[str] = "commit-with-message-was-merged-into-branch"
    branch: str
    contents: str
    ignore_case: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> CommitWithMessageWasMergedIntoBranchRule:
        return cls(
            branch=params.string("branch"),
            contents=params.string("contents"),
            ignore_case=params.boolean("ignore-case"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(
            self.options,
            f"The commit with the message '{self.contents}' was merged into the branch "
            f"{self.branch}",
        )

    def evaluate(self, repo: GitRepository) -> RuleResult:
        target = find_commit_with_message(repo, self.contents, self.ignore_case)
        if target is None:
            return RuleResult.fail(NO_COMMIT_MESSAGE)
        tip = repo.resolve_branch(self.branch)
        merged = any(target.id in commit.parents for commit in repo.ancestors_of(tip))
        return RuleResult(passed=merged)


@dataclass(frozen=True, slots=True)
class CommitWithMessageWasMadeOnBranchRule:
    """Passes when the matching commit is reachable from the branch tip."""

    kind: ClassVar[str] = "commit-with-message-was-made-on-branch"
    branch: str
    contents: str
    ignore_case: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> CommitWithMessageWasMadeOnBranchRule:
        return cls(
            branch=params.string("branch"),
            contents=params.string("contents"),
            ignore_case=params.boolean("ignore-case"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(
            self.options,
            f"The commit with the message '{self.contents}' was made on the branch "
            f"{self.branch}",
        )

    def evaluate(self, repo: GitRepository) -> RuleResult:
        target = find_commit_with_message(repo, self.contents, self.ignore_case)
        if target is None:
            return RuleResult.fail(NO_COMMIT_MESSAGE)
        tip = repo.resolve_branch(self.branch)
        ancestor_ids = {commit.id for commit in repo.ancestors_of(tip)}
        return RuleResult(passed=target.id in ancestor_ids)
