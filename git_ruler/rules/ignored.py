"""Ignore-probe rule: would git's ignore rules exclude a path?

The probe temporarily replaces ``path`` with a dummy file, asks ``git status``
whether it shows up, then puts everything back. An existing file is moved
into a scratch directory under the git directory and renamed back
afterwards. Restoration runs in a ``finally`` block, so the working tree is
restored on every exit path, faults from the status call included.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from git_ruler.git import GitRepository, normalize_path
from git_ruler.rules.base import RuleOptions, RuleParameters, RuleResult, titled

logger = logging.getLogger(__name__)

DUMMY_CONTENT = b"DUMMY CONTENT"
BACKUP_DIR_PREFIX = "git-ruler-ignore-"
BACKUP_NAME = "original"

BACKUP_FAILED_MESSAGE = "Tried to test ignoring a file that could not be backed up for the test"
CREATE_FAILED_MESSAGE = "Tried to test ignoring a file that could not be created"
RESTORE_FAILED_MESSAGE = (
    "Failed to check if a file is ignored because I couldn't restore the original file"
)
REMOVE_FAILED_MESSAGE = (
    "Failed to check if a file is ignored because I couldn't remove the temporary file"
)


class ProbeError(Exception):
    """Raised when the probe cannot set up or tear down its dummy file."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True, slots=True)
class IgnoredRule:
    """Passes when git would not report a new file at ``path``."""

    kind: ClassVar[str] = "ignored"
    path: str
    options: RuleOptions = RuleOptions()

    @classmethod
    def from_parameters(cls, params: RuleParameters) -> IgnoredRule:
        return cls(path=params.string("path"), options=params.options())

    @property
    def title(self) -> str:
        return titled(self.options, f"The file is ignored: {self.path}")

    def evaluate(self, repo: GitRepository) -> RuleResult:
        try:
            with ignore_probe(repo, self.path):
                status = repo.working_tree_status()
        except ProbeError as exc:
            return RuleResult.fail(exc.message)
        return RuleResult(passed=not status.contains(self.path))


@contextmanager
def ignore_probe(repo: GitRepository, path: str) -> Iterator[None]:
    """Hold a dummy file at ``path`` for the duration of the block."""
    path = normalize_path(path)
    backup = _take_backup(repo, path)
    created_dirs: list[Path] = []
    try:
        try:
            for directory in _missing_parents(repo.worktree, path):
                directory.mkdir()
                created_dirs.append(directory)
            repo.write_file(path, DUMMY_CONTENT, exclusive=True)
        except OSError as exc:
            logger.debug("could not create probe file %s: %s", path, exc)
            raise ProbeError(CREATE_FAILED_MESSAGE) from exc
        yield
    finally:
        _restore(repo, path, backup, created_dirs)


def _take_backup(repo: GitRepository, path: str) -> Path | None:
    """Move an existing entry at ``path`` aside, inside the git directory.

    Renaming rather than copying keeps the file mode, symlinks and hard links.
    """
    if not repo.path_exists(path):
        return None
    target = repo.worktree / path
    if target.is_dir() and not target.is_symlink():
        raise ProbeError(BACKUP_FAILED_MESSAGE)

    backup_dir = Path(tempfile.mkdtemp(prefix=BACKUP_DIR_PREFIX, dir=repo.git_dir()))
    backup = backup_dir / BACKUP_NAME
    try:
        repo.move_file(path, backup)
    except OSError as exc:
        logger.debug("could not back up %s: %s", path, exc)
        backup_dir.rmdir()
        raise ProbeError(BACKUP_FAILED_MESSAGE) from exc
    return backup


def _restore(
    repo: GitRepository, path: str, backup: Path | None, created_dirs: list[Path]
) -> None:
    if backup is not None:
        try:
            repo.move_file(backup, path)
        except OSError as exc:
            logger.warning("could not restore %s; the original is kept at %s", path, backup)
            raise ProbeError(RESTORE_FAILED_MESSAGE) from exc
        backup.parent.rmdir()
        return

    try:
        if repo.path_exists(path):
            repo.delete_file(path)
        for directory in reversed(created_dirs):
            directory.rmdir()
    except OSError as exc:
        logger.warning("could not remove probe file %s", path)
        raise ProbeError(REMOVE_FAILED_MESSAGE) from exc


def _missing_parents(worktree: Path, path: str) -> list[Path]:
    missing: list[Path] = []
    parent = (worktree / path).parent
    while parent != worktree and not parent.exists():
        missing.append(parent)
        parent = parent.parent
    return list(reversed(missing))
