"""Git subprocess helpers and the repository query interface used by rules."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from subprocess import CalledProcessError, run

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"

# unit/record separators keep commit messages intact when parsing log output
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"--format=%H{_FIELD_SEP}%P{_FIELD_SEP}%ct{_FIELD_SEP}%B{_RECORD_SEP}"


class GitError(RuntimeError):
    """Raised when git command execution fails."""


class BranchNotFoundError(GitError):
    """Raised when no local branch matches a requested name."""


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as read from git log output."""

    id: str
    parents: tuple[str, ...]
    commit_time: int
    message: str

    @property
    def is_orphan(self) -> bool:
        return not self.parents


@dataclass(frozen=True, slots=True)
class WorkingTreeStatus:
    """Paths reported by ``git status``, grouped the way rules inspect them.

    ``added`` and ``changed`` describe the index relative to HEAD,
    ``modified`` the working tree relative to the index.
    """

    added: frozenset[str] = frozenset()
    modified: frozenset[str] = frozenset()
    changed: frozenset[str] = frozenset()
    untracked: frozenset[str] = frozenset()

    def contains(self, path: str) -> bool:
        normalized = normalize_path(path)
        return any(
            normalized in group
            for group in (self.added, self.modified, self.changed, self.untracked)
        )


class GitRepository:
    """Read-only query interface over one repository, plus the file operations
    the ignore probe needs.

    The handle is explicit: every rule receives the repository it should
    inspect, nothing is looked up globally.
    """

    def __init__(self, path: Path | str) -> None:
        candidate = Path(path).expanduser()
        if candidate.name == GIT_DIR_NAME:
            candidate = candidate.parent
        if not candidate.is_dir():
            raise GitError(f"{candidate} is not a directory")
        try:
            toplevel = _run_git(candidate, ["rev-parse", "--show-toplevel"]).strip()
        except GitError as exc:
            raise GitError(
                f"{candidate / GIT_DIR_NAME} is not a valid git repository"
            ) from exc
        self.worktree = Path(toplevel)

    def __repr__(self) -> str:
        return f"GitRepository({str(self.worktree)!r})"

    # refs

    def resolve_head(self) -> str | None:
        """Return the commit HEAD points at, or None for an unborn/invalid HEAD."""
        return self._resolve_commit("HEAD")

    def branch_names(self) -> list[str]:
        """Return full ref names of local branches, sorted by name."""
        output = self._git(["for-each-ref", "--format=%(refname)", "refs/heads"])
        return [line for line in output.splitlines() if line]

    def branch_exists(self, name: str) -> bool:
        return self._match_branch(name) is not None

    def resolve_branch(self, name: str) -> str:
        """Return the tip commit of the first branch whose ref name contains ``name``."""
        ref = self._match_branch(name)
        if ref is None:
            raise BranchNotFoundError(f"Branch {name} was not found")
        commit = self._resolve_commit(ref)
        if commit is None:
            raise BranchNotFoundError(
                f"A branch called {name} with a valid commit was not found"
            )
        return commit

    def resolve_tag(self, name: str) -> str | None:
        """Return the object a tag ref points at (a tag object for annotated tags)."""
        return self._resolve(_tag_ref(name))

    def is_commit_tagged(self, commit: str, tag: str) -> bool:
        """Check whether ``tag`` (peeled to a commit) points at ``commit``."""
        tagged = self._resolve_commit(_tag_ref(tag))
        return tagged is not None and tagged == commit

    # objects

    def commit_tree(self, commit: str) -> str:
        return self._git(["rev-parse", "--verify", f"{commit}^{{tree}}"]).strip()

    def commit_parents(self, commit: str) -> list[str]:
        output = self._git(["rev-list", "--parents", "-n", "1", commit]).split()
        return output[1:]

    def find_path_in_tree(self, commit: str, path: str) -> str | None:
        """Return the object id stored at ``path`` in a commit's tree.

        When ``path`` names a directory, the first file below it is returned.
        """
        output = self._git(
            ["ls-tree", "-r", "-z", "--full-tree", commit, "--", normalize_path(path)]
        )
        for entry in output.split("\0"):
            if not entry:
                continue
            meta, _, _name = entry.partition("\t")
            fields = meta.split()
            if len(fields) == 3:
                return fields[2]
        return None

    def read_blob(self, object_id: str) -> bytes:
        return _run_git_bytes(self.worktree, ["cat-file", "blob", object_id])

    def diff_path_between(self, old_tree: str, new_tree: str, path: str) -> bool:
        """Return True when ``path`` differs between two trees."""
        output = self._git(
            [
                "diff-tree",
                "-r",
                "--no-renames",
                "--name-only",
                old_tree,
                new_tree,
                "--",
                normalize_path(path),
            ]
        )
        return bool(output.strip())

    # history

    def log_all_refs(self) -> list[Commit]:
        """Return commits reachable from any ref, children before parents."""
        if self.resolve_head() is None and not self._git(["for-each-ref", "--count=1"]).strip():
            # nothing committed yet; git log would fall back to the unborn HEAD
            return []
        return self._log(["--all", "--topo-order"])

    def log_for_path(self, path: str) -> list[Commit]:
        """Return commits reachable from HEAD that touched ``path``."""
        if self.resolve_head() is None:
            return []
        return self._log(["--topo-order", "HEAD", "--", normalize_path(path)])

    def ancestors_of(self, commit: str) -> list[Commit]:
        """Return ``commit`` and every commit reachable through its parents."""
        return self._log(["--topo-order", commit])

    # working tree

    def working_tree_status(self) -> WorkingTreeStatus:
        output = self._git(["status", "--porcelain=v1", "-z", "--untracked-files=all"])
        return _parse_status(output)

    def git_dir(self) -> Path:
        return Path(self._git(["rev-parse", "--absolute-git-dir"]).strip())

    def path_exists(self, path: str) -> bool:
        """Check for an entry at ``path``, counting dangling symlinks."""
        return os.path.lexists(self._resolve_path(path))

    def write_file(self, path: str | Path, data: bytes, *, exclusive: bool = True) -> None:
        target = self._resolve_path(path)
        with target.open("xb" if exclusive else "wb") as file_obj:
            file_obj.write(data)

    def delete_file(self, path: str | Path) -> None:
        self._resolve_path(path).unlink()

    def move_file(self, source: str | Path, destination: str | Path) -> None:
        """Rename ``source`` over ``destination``, keeping mode and symlinks intact."""
        os.replace(self._resolve_path(source), self._resolve_path(destination))

    def _resolve_path(self, path: str | Path) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.worktree / normalize_path(str(path))

    def _match_branch(self, name: str) -> str | None:
        for ref in self.branch_names():
            if name in ref:
                return ref
        return None

    def _resolve_commit(self, revision: str) -> str | None:
        return self._resolve(f"{revision}^{{commit}}")

    def _resolve(self, revision: str) -> str | None:
        try:
            return self._git(["rev-parse", "--verify", "-q", revision]).strip() or None
        except GitError:
            return None

    def _log(self, args: list[str]) -> list[Commit]:
        return _parse_log(self._git(["log", _LOG_FORMAT, *args]))

    def _git(self, args: list[str]) -> str:
        return _run_git(self.worktree, args)


def normalize_path(path: str) -> str:
    """Return a repository-relative POSIX path as git reports it."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


def _tag_ref(name: str) -> str:
    return name if name.startswith("refs/") else f"refs/tags/{name}"


def _parse_log(output: str) -> list[Commit]:
    commits: list[Commit] = []
    for record in output.split(_RECORD_SEP):
        record = record.lstrip("\n")
        if not record:
            continue
        commit_id, parents, commit_time, message = record.split(_FIELD_SEP, 3)
        commits.append(
            Commit(
                id=commit_id,
                parents=tuple(parents.split()),
                commit_time=int(commit_time),
                message=message,
            )
        )
    return commits


def _parse_status(output: str) -> WorkingTreeStatus:
    added: set[str] = set()
    modified: set[str] = set()
    changed: set[str] = set()
    untracked: set[str] = set()

    entries = iter(output.split("\0"))
    for entry in entries:
        if len(entry) < 4:
            continue
        index_state, worktree_state, path = entry[0], entry[1], entry[3:]
        if index_state in {"R", "C"}:
            # the source path follows as its own field
            next(entries, None)

        if index_state == "?" and worktree_state == "?":
            untracked.add(path)
            continue
        if index_state in {"A", "R", "C"}:
            added.add(path)
        elif index_state in {"M", "T"}:
            changed.add(path)
        if worktree_state in {"M", "T"}:
            modified.add(path)

    return WorkingTreeStatus(
        added=frozenset(added),
        modified=frozenset(modified),
        changed=frozenset(changed),
        untracked=frozenset(untracked),
    )


def _run_git(repo: Path, args: list[str]) -> str:
    return _run_git_bytes(repo, args).decode("utf-8", errors="replace")


def _run_git_bytes(repo: Path, args: list[str]) -> bytes:
    logger.debug("git %s (in %s)", " ".join(args), repo)
    try:
        completed = run(
            ["git", "--literal-pathspecs", *args],
            cwd=repo,
            check=True,
            capture_output=True,
        )
    except CalledProcessError as exc:
        stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed") from exc

    return completed.stdout
