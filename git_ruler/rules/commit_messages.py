"""Rules that look for commit messages, optionally tied to a file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from git_ruler.git import GitRepository
from git_ruler.rules.base import (
    RuleOptions,
    RuleParameters,
    RuleResult,
    find_commit_with_message,
    first_matching_commit,
    is_path_updated_in_commit,
    text_contains,
    titled,
)

NO_COMMIT_MESSAGE = "No commit with that message was found."
NO_COMMIT_FOR_FILE_MESSAGE = "No commit for that file was found."
FILE_NOT_UPDATED_MESSAGE = "That file was not updated in that commit"


@dataclass(frozen=True, slots=True)
class LastCommitMessageForFileContainsRule:
    """Passes when the most recent commit touching a file has a matching message."""

    kind: ClassVar[str] = "last-commit-message-for-file-contains"
    path: str
    contents: str
    ignore_case: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> LastCommitMessageForFileContainsRule:
        return cls(
            path=params.string("path"),
            contents=params.string("contents"),
            ignore_case=params.boolean("ignore-case"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(
            self.options,
            f"The last commit to {self.path} has a message containing '{self.contents}'",
        )

    def evaluate(self, repo: GitRepository) -> RuleResult:
        commits = repo.log_for_path(self.path)
        if not commits:
            return RuleResult.fail(NO_COMMIT_FOR_FILE_MESSAGE)
        # max() keeps the first of equal timestamps, i.e. the topologically newest
        latest = max(commits, key=lambda commit: commit.commit_time)
        return RuleResult(passed=text_contains(latest.message, self.contents, self.ignore_case))


@dataclass(frozen=True, slots=True)
class AnyCommitMessageForFileContainsRule:
    """Passes when any commit touching a file has a matching message."""

    kind: ClassVar[str] = "any-commit-message-for-file-contains"
    path: str
    contents: str
    ignore_case: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> AnyCommitMessageForFileContainsRule:
        return cls(
            path=params.string("path"),
            contents=params.string("contents"),
            ignore_case=params.boolean("ignore-case"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(
            self.options,
            f"A commit to {self.path} has a message containing '{self.contents}'",
        )

    def evaluate(self, repo: GitRepository) -> RuleResult:
        match = first_matching_commit(repo.log_for_path(self.path), self.contents, self.ignore_case)
        return RuleResult(passed=match is not None)


@dataclass(frozen=True, slots=True)
class AnyCommitMessageContainsRule:
    """Passes when any commit reachable from any ref has a matching message."""

    kind: ClassVar[str] = "any-commit-message-contains"
    contents: str
    ignore_case: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> AnyCommitMessageContainsRule:
        return cls(
            contents=params.string("contents"),
            ignore_case=params.boolean("ignore-case"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(self.options, f"A commit has a message containing '{self.contents}'")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        match = find_commit_with_message(repo, self.contents, self.ignore_case)
        return RuleResult(passed=match is not None)


@dataclass(frozen=True, slots=True)
class CommitWithMessageUpdatedFileRule:
    """Passes when the commit with a matching message changed a file."""

    kind: ClassVar[str] = "commit-with-message-updated-file"
    contents: str
    path: str
    ignore_case: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> CommitWithMessageUpdatedFileRule:
        return cls(
            contents=params.string("contents"),
            path=params.string("path"),
            ignore_case=params.boolean("ignore-case"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(
            self.options,
            f"The commit with the message '{self.contents}' updated the file: {self.path}",
        )

    def evaluate(self, repo: GitRepository) -> RuleResult:
        commit = find_commit_with_message(repo, self.contents, self.ignore_case)
        if commit is None:
            return RuleResult.fail(NO_COMMIT_MESSAGE)
        if is_path_updated_in_commit(repo, commit, self.path):
            return RuleResult(passed=True)
        return RuleResult.fail(FILE_NOT_UPDATED_MESSAGE)


@dataclass(frozen=True, slots=True)
class CommitWithMessageDoesntUpdateFileRule:
    """Passes when the commit with a matching message left a file untouched."""

    kind: ClassVar[str] = "commit-with-message-doesnt-update-file"
    contents: str
    path: str
    ignore_case: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> CommitWithMessageDoesntUpdateFileRule:
        return cls(
            contents=params.string("contents"),
            path=params.string("path"),
            ignore_case=params.boolean("ignore-case"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(
            self.options,
            f"The commit with the message '{self.contents}' did not update the file: {self.path}",
        )

    def evaluate(self, repo: GitRepository) -> RuleResult:
        commit = find_commit_with_message(repo, self.contents, self.ignore_case)
        if commit is None:
            return RuleResult.fail(NO_COMMIT_MESSAGE)
        if is_path_updated_in_commit(repo, commit, self.path):
            # rule files in the wild match on this exact wording
            return RuleResult.fail(FILE_NOT_UPDATED_MESSAGE)
        return RuleResult(passed=True)
