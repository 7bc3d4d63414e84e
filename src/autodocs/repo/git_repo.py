"""Git repository wrapper using GitPython."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from git import Repo
from git.exc import BadName, GitCommandError, InvalidGitRepositoryError, NoSuchPathError


class GitError(Exception):
    """Error while querying the git repository."""

    def __init__(self, message: str, original_error: str | None = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)


@dataclass(frozen=True)
class NameStatusEntry:
    """One line of `git diff --name-status` output."""

    status: str
    path: str
    old_path: str | None = None


@dataclass(frozen=True)
class NumstatEntry:
    """One line of `git diff --numstat` output. Binary files count as 0/0."""

    path: str
    additions: int
    deletions: int


@dataclass(frozen=True)
class CommitEntry:
    """Commit metadata as returned by `log`."""

    hash: str
    message: str
    author: str
    email: str
    date: str


class GitRepo:
    """Wrapper for the git queries the documentation pipeline needs."""

    def __init__(self, path: Path):
        """Initialize git repository wrapper.

        Args:
            path: Path to git repository root.

        Raises:
            GitError: If path is not a git repository.
        """
        self.path = path
        try:
            self._repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitError(
                f"`{path}` is not a git repository. Run autodocs from the project root.",
                original_error=str(e),
            ) from e

    def _diff(self, *args: str) -> str:
        try:
            return str(self._repo.git.diff(*args))
        except GitCommandError as e:
            raise GitError(
                f"git diff {' '.join(args)} failed",
                original_error=str(e.stderr).strip() if e.stderr else str(e),
            ) from e

    def get_head_commit(self) -> str:
        """Get current HEAD commit hash.

        Returns:
            Full commit SHA.
        """
        try:
            return self._repo.head.commit.hexsha
        except ValueError as e:
            raise GitError("Repository has no commits yet", original_error=str(e)) from e

    def get_current_branch(self) -> str:
        """Get current branch name.

        Returns:
            Branch name or 'HEAD' if detached.
        """
        if self._repo.head.is_detached:
            return "HEAD"
        return self._repo.active_branch.name

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Check whether `ancestor` is reachable from `descendant` (or equal to it)."""
        try:
            return self._repo.is_ancestor(ancestor, descendant)
        except GitCommandError as e:
            raise GitError(
                f"Could not compare `{ancestor}` with `{descendant}`",
                original_error=str(e),
            ) from e

    def diff_name_status(self, range_spec: str) -> list[NameStatusEntry]:
        """List changed paths with their status letter.

        Args:
            range_spec: Revision range such as `abc123..HEAD`.

        Returns:
            Entries in the order git reports them.
        """
        # -z keeps non-ASCII paths unquoted: status\0path\0, or
        # status\0old\0new\0 for renames and copies.
        fields = [f for f in self._diff("-z", "--name-status", range_spec).split("\0") if f]
        entries = []
        i = 0
        while i < len(fields):
            status = fields[i]
            if status[:1] in ("R", "C") and i + 2 < len(fields):
                entries.append(
                    NameStatusEntry(status=status, path=fields[i + 2], old_path=fields[i + 1])
                )
                i += 3
            elif i + 1 < len(fields):
                entries.append(NameStatusEntry(status=status, path=fields[i + 1]))
                i += 2
            else:
                break
        return entries

    def diff_path(self, range_spec: str, path: str) -> str:
        """Get the unified diff of one path for a revision range."""
        return self._diff(range_spec, "--", path)

    def diff_numstat(self, range_spec: str) -> list[NumstatEntry]:
        """Get per-file addition and deletion counts for a revision range.

        Renames are reported as a deletion plus an addition.
        """
        output = self._diff("-z", "--no-renames", "--numstat", range_spec)
        entries = []
        for record in output.split("\0"):
            parts = record.strip("\n").split("\t", 2)
            if len(parts) < 3:
                continue
            added, deleted, path = parts[0], parts[1], parts[-1]
            entries.append(
                NumstatEntry(
                    path=path,
                    additions=int(added) if added.isdigit() else 0,
                    deletions=int(deleted) if deleted.isdigit() else 0,
                )
            )
        return entries

    def log(self, from_rev: str, to_rev: str) -> list[CommitEntry]:
        """List commits reachable from `to_rev` but not from `from_rev`, newest first."""
        try:
            commits = list(self._repo.iter_commits(f"{from_rev}..{to_rev}"))
        except (GitCommandError, BadName, ValueError) as e:
            raise GitError(
                f"Could not read commit log for {from_rev}..{to_rev}",
                original_error=str(e),
            ) from e

        return [
            CommitEntry(
                hash=commit.hexsha,
                message=str(commit.message).strip(),
                author=str(commit.author.name),
                email=str(commit.author.email),
                date=commit.committed_datetime.isoformat(),
            )
            for commit in commits
        ]
