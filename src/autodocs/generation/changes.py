"""Change-set collection from git.

Two collection paths exist:

1. `collect` feeds page generation: every non-excluded changed path with its
   diff capped to a fixed number of characters.
2. `collect_range` feeds the commit-range update path: the commit log,
   per-file line statistics and full diffs for the first few files only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from autodocs.constants.generation import MAX_DIFF_CHARS, MAX_RANGE_DIFF_FILES
from autodocs.generation.models import (
    ChangeRecord,
    ChangeStatus,
    CommitInfo,
    FileDiff,
    FileStat,
    RevisionRange,
)
from autodocs.repo.file_filter import is_excluded
from autodocs.repo.git_repo import GitError, GitRepo

logger = logging.getLogger(__name__)


@dataclass
class RangeChanges:
    """Everything the commit-range path collects from git."""

    commits: list[CommitInfo] = field(default_factory=list)
    changed_files: list[FileStat] = field(default_factory=list)
    diffs: list[FileDiff] = field(default_factory=list)


def truncate_diff(diff: str, max_chars: int) -> tuple[str, bool]:
    """Cap a diff to max_chars characters.

    Returns:
        Tuple of (possibly shortened diff, whether it was cut).
    """
    if max_chars <= 0 or len(diff) <= max_chars:
        return diff, False
    return diff[:max_chars], True


class ChangeSetCollector:
    """Collects changed paths and diffs for a revision range."""

    def __init__(
        self,
        repo: GitRepo,
        max_diff_chars: int = MAX_DIFF_CHARS,
        max_range_diff_files: int = MAX_RANGE_DIFF_FILES,
    ):
        """Initialize the collector.

        Args:
            repo: Git repository to query.
            max_diff_chars: Per-file diff cap for `collect`.
            max_range_diff_files: How many files get a diff in `collect_range`.
        """
        self.repo = repo
        self.max_diff_chars = max_diff_chars
        self.max_range_diff_files = max_range_diff_files

    def collect(
        self, revision_range: RevisionRange, exclude_patterns: Iterable[str]
    ) -> list[ChangeRecord]:
        """Collect change records for a range.

        Args:
            revision_range: Range to diff.
            exclude_patterns: Paths matching any pattern are dropped.

        Returns:
            Change records in git's order. Empty when nothing changed.

        Raises:
            GitError: If the range cannot be diffed.
        """
        patterns = list(exclude_patterns)
        range_spec = revision_range.spec()
        entries = self.repo.diff_name_status(range_spec)

        records: list[ChangeRecord] = []
        for entry in entries:
            if is_excluded(entry.path, patterns):
                logger.debug(f"Excluded {entry.path}")
                continue

            diff, truncated = truncate_diff(
                self.repo.diff_path(range_spec, entry.path), self.max_diff_chars
            )
            records.append(
                ChangeRecord(
                    path=entry.path,
                    status=ChangeStatus.from_letter(entry.status),
                    diff=diff,
                    old_path=entry.old_path,
                    truncated=truncated,
                )
            )

        logger.info(
            f"Collected {len(records)} changed file(s) in {range_spec} "
            f"({len(entries) - len(records)} excluded)"
        )
        return records

    def collect_range(
        self, from_rev: str, to_rev: str, exclude_patterns: Iterable[str]
    ) -> RangeChanges:
        """Collect commits, file statistics and diffs for a commit range.

        Diffs are fetched one file at a time for the first
        `max_range_diff_files` files; a failure on one file is logged and the
        file skipped.

        Raises:
            GitError: If the log or the range statistics cannot be read.
        """
        patterns = list(exclude_patterns)
        commits = [
            CommitInfo(
                hash=entry.hash,
                message=entry.message,
                author=entry.author,
                email=entry.email,
                date=entry.date,
            )
            for entry in self.repo.log(from_rev, to_rev)
        ]

        range_spec = f"{from_rev}...{to_rev}"
        changed_files = [
            FileStat(path=entry.path, additions=entry.additions, deletions=entry.deletions)
            for entry in self.repo.diff_numstat(range_spec)
            if not is_excluded(entry.path, patterns)
        ]

        diffs: list[FileDiff] = []
        for stat in changed_files[: self.max_range_diff_files]:
            try:
                content = self.repo.diff_path(range_spec, stat.path)
            except GitError as e:
                logger.warning(f"Could not get diff for {stat.path}: {e.original_error or e}")
                continue
            if content:
                diffs.append(FileDiff(file=stat.path, content=content))

        logger.info(
            f"Range {from_rev}..{to_rev}: {len(commits)} commit(s), "
            f"{len(changed_files)} file(s), {len(diffs)} diff(s)"
        )
        return RangeChanges(commits=commits, changed_files=changed_files, diffs=diffs)
