"""Prompt context assembly.

Merges commit metadata, changed-file statistics, diffs and a small sample of
existing documentation pages into one DocContext. The sample is bounded so
prompts stay within the model's context window.
"""

import logging
import os
from pathlib import Path
from typing import Sequence

from autodocs.constants.files import DOC_EXTENSIONS
from autodocs.constants.generation import (
    FEATURE_PREFIXES,
    MAX_EXISTING_DOCS,
    USER_FACING_DIRS,
)
from autodocs.generation.frontmatter import parse_frontmatter
from autodocs.generation.models import (
    ChangeRecord,
    CommitInfo,
    DocContext,
    ExistingDoc,
    FileDiff,
    FileStat,
)

logger = logging.getLogger(__name__)


def generate_change_summary(commits: Sequence[CommitInfo], files: Sequence[FileStat]) -> str:
    """Summarize a change set as a plain statistics string.

    Example: "3 commits, 5 files changed, +120/-40 lines"
    """
    additions = sum(f.additions for f in files)
    deletions = sum(f.deletions for f in files)
    return (
        f"{len(commits)} commits, {len(files)} files changed, "
        f"+{additions}/-{deletions} lines"
    )


def identify_features(commits: Sequence[CommitInfo]) -> list[str]:
    """Return messages of commits that announce user-facing features.

    A commit qualifies when its message contains any feature marker
    (`feat:`, `feature:`, `add:`, `new:`, `ui:`, `ux:`), case-insensitively.
    """
    return [
        commit.message
        for commit in commits
        if any(prefix in commit.message.lower() for prefix in FEATURE_PREFIXES)
    ]


def identify_user_facing_changes(files: Sequence[FileStat]) -> str:
    """List changed paths under UI directories, comma separated."""
    return ", ".join(f.path for f in files if any(d in f.path for d in USER_FACING_DIRS))


def find_doc_files(docs_root: Path) -> list[Path]:
    """Walk docs_root and return documentation pages in a stable order.

    Raises:
        OSError: If the docs root cannot be listed.
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(docs_root, onerror=_raise):
        dirnames.sort()
        for name in sorted(filenames):
            if name.endswith(DOC_EXTENSIONS):
                found.append(Path(dirpath) / name)
    return found


def _raise(error: OSError) -> None:
    raise error


class ContextAssembler:
    """Builds the bounded DocContext consumed by prompt templates."""

    def __init__(
        self,
        docs_root: Path,
        workspace_path: Path | None = None,
        max_existing_docs: int = MAX_EXISTING_DOCS,
    ):
        """Initialize the assembler.

        Args:
            docs_root: Directory holding the existing documentation.
            workspace_path: Root used to make existing-doc keys relative.
            max_existing_docs: Upper bound on parsed pages.
        """
        self.docs_root = docs_root
        self.workspace_path = workspace_path or docs_root.parent
        self.max_existing_docs = max_existing_docs

    def find_existing_docs(self) -> dict[str, ExistingDoc]:
        """Parse up to max_existing_docs pages below the docs root.

        Any I/O failure is logged and treated as "no existing docs" for the
        listing, or skips the single unreadable page.
        """
        if self.max_existing_docs <= 0:
            return {}
        if not self.docs_root.is_dir():
            logger.info(f"No existing docs found under {self.docs_root} (first run?)")
            return {}

        try:
            files = find_doc_files(self.docs_root)
        except OSError as e:
            logger.warning(f"Could not list existing docs under {self.docs_root}: {e}")
            return {}

        docs: dict[str, ExistingDoc] = {}
        for path in files[: self.max_existing_docs]:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read {path}: {e}")
                continue

            metadata, body = parse_frontmatter(text)
            docs[self._relative(path)] = ExistingDoc(frontmatter=metadata or {}, content=body)

        return docs

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.workspace_path).as_posix()
        except ValueError:
            return path.as_posix()

    def assemble(
        self,
        commits: Sequence[CommitInfo],
        changed_files: Sequence[FileStat],
        diffs: Sequence[FileDiff],
        changes: Sequence[ChangeRecord] = (),
    ) -> DocContext:
        """Assemble the prompt context.

        Args:
            commits: Commits in the range, newest first.
            changed_files: Per-file line statistics.
            diffs: Diffs to embed.
            changes: Change records from the incremental page path.

        Returns:
            A new DocContext.
        """
        commit_list = list(commits)
        file_list = list(changed_files)

        if commit_list:
            date_range = (commit_list[-1].date or "N/A", commit_list[0].date or "N/A")
        else:
            date_range = ("N/A", "N/A")

        context = DocContext(
            commits=commit_list,
            changed_files=file_list,
            diffs=list(diffs),
            existing_docs=self.find_existing_docs(),
            summary=generate_change_summary(commit_list, file_list),
            features=identify_features(commit_list),
            date_range=date_range,
            user_facing_changes=identify_user_facing_changes(file_list),
            changes=list(changes),
        )
        logger.debug(
            f"Context: {context.summary}; {len(context.features)} feature(s), "
            f"{len(context.existing_docs)} existing doc(s)"
        )
        return context

    def assemble_from_changes(
        self, changes: Sequence[ChangeRecord], commits: Sequence[CommitInfo] = ()
    ) -> DocContext:
        """Assemble a context for the page path from change records alone.

        Line statistics are counted from the (possibly truncated) diffs.
        """
        stats = [
            FileStat(
                path=change.path,
                additions=_count_lines(change.diff, "+"),
                deletions=_count_lines(change.diff, "-"),
            )
            for change in changes
        ]
        diffs = [FileDiff(file=change.path, content=change.diff) for change in changes]
        return self.assemble(commits, stats, diffs, changes=changes)


def _count_lines(diff: str, marker: str) -> int:
    header = marker * 3
    return sum(
        1 for line in diff.splitlines() if line.startswith(marker) and not line.startswith(header)
    )
