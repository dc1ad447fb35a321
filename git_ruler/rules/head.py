"""Rules that inspect the tree of the commit HEAD points at."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from git_ruler.git import GitRepository
from git_ruler.rules.base import (
    RuleOptions,
    RuleParameters,
    RuleResult,
    decode_blob,
    text_contains,
    titled,
)

NO_HEAD_MESSAGE = "The repository has no commits yet."


@dataclass(frozen=True, slots=True)
class HeadExistsRule:
    """Passes when HEAD resolves to a commit."""

    kind: ClassVar[str] = "head-exists"
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> HeadExistsRule:
        return cls(options=params.options())

    @property
    def title(self) -> str:
        return titled(self.options, "There is a valid repository")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        return RuleResult(passed=repo.resolve_head() is not None)


@dataclass(frozen=True, slots=True)
class FileTrackedInHeadRule:
    """Passes when a path exists in HEAD's tree."""

    kind: ClassVar[str] = "file-tracked-in-head"
    path: str
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> FileTrackedInHeadRule:
        return cls(path=params.string("path"), options=params.options())

    @property
    def title(self) -> str:
        return titled(self.options, f"The file is tracked: {self.path}")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        head = repo.resolve_head()
        if head is None:
            return RuleResult.fail(NO_HEAD_MESSAGE)
        return RuleResult(passed=repo.find_path_in_tree(head, self.path) is not None)


@dataclass(frozen=True, slots=True)
class FileUntrackedInHeadRule:
    """Passes when a path is absent from HEAD's tree."""

    kind: ClassVar[str] = "file-untracked-in-head"
    path: str
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> FileUntrackedInHeadRule:
        return cls(path=params.string("path"), options=params.options())

    @property
    def title(self) -> str:
        return titled(self.options, f"The file should not be tracked: {self.path}")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        head = repo.resolve_head()
        if head is None:
            return RuleResult.fail(NO_HEAD_MESSAGE)
        return RuleResult(passed=repo.find_path_in_tree(head, self.path) is None)


@dataclass(frozen=True, slots=True)
class FileHasHashInHeadRule:
    """Passes when a path exists in HEAD with exactly the given blob id."""

    kind: ClassVar[str] = "file-has-hash-in-head"
    path: str
    hash: str
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> FileHasHashInHeadRule:
        return cls(path=params.string("path"), hash=params.string("hash"), options=params.options())

    @property
    def title(self) -> str:
        return titled(self.options, f"An existing file should now be at: {self.path}")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        head = repo.resolve_head()
        if head is None:
            return RuleResult.fail(NO_HEAD_MESSAGE)
        object_id = repo.find_path_in_tree(head, self.path)
        return RuleResult(passed=object_id is not None and object_id == self.hash)


@dataclass(frozen=True, slots=True)
class FileContainsInHeadRule:
    """Passes when a file in HEAD contains the given text."""

    kind: ClassVar[str] = "file-contains-in-head"
    path: str
    contents: str
    ignore_case: bool = False
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> FileContainsInHeadRule:
        return cls(
            path=params.string("path"),
            contents=params.string("contents"),
            ignore_case=params.boolean("ignore-case"),
            options=params.options(),
        )

    @property
    def title(self) -> str:
        return titled(
            self.options, f"The file: {self.path} contains the text '{self.contents}'"
        )

    def evaluate(self, repo: GitRepository) -> RuleResult:
        head = repo.resolve_head()
        if head is None:
            return RuleResult.fail(NO_HEAD_MESSAGE)
        object_id = repo.find_path_in_tree(head, self.path)
        if object_id is None:
            return RuleResult(passed=False)
        text = decode_blob(repo.read_blob(object_id))
        return RuleResult(passed=text_contains(text, self.contents, self.ignore_case))
