"""Data models shared across the documentation pipeline.

These models carry change history from git through context assembly,
prompting and parsing to the written pages and navigation entries.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def sanitize_file_name(title: str) -> str:
    """Convert a page title to a filesystem-safe slug.

    Lowercases the title, collapses every run of non-alphanumeric characters
    into a single dash and strips leading and trailing dashes. The result is
    idempotent: sanitizing a slug returns it unchanged.

    Args:
        title: Page title.

    Returns:
        Slug, possibly empty when the title has no ASCII letters or digits.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower())
    return slug.strip("-")


def capitalize_first(value: str) -> str:
    """Uppercase the first character only, leaving the rest untouched."""
    return value[:1].upper() + value[1:]


class ChangeStatus(Enum):
    """Status of a changed path, from the git name-status letter."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    TYPE_CHANGED = "type_changed"
    UNKNOWN = "unknown"

    @classmethod
    def from_letter(cls, status: str) -> "ChangeStatus":
        """Map a name-status code such as `M` or `R100` to a ChangeStatus."""
        letters = {
            "A": cls.ADDED,
            "M": cls.MODIFIED,
            "D": cls.DELETED,
            "R": cls.RENAMED,
            "C": cls.COPIED,
            "T": cls.TYPE_CHANGED,
        }
        return letters.get(status[:1].upper(), cls.UNKNOWN)


@dataclass(frozen=True)
class RevisionRange:
    """A git revision range; `from_rev` is an ancestor of or equal to `to_rev`."""

    from_rev: str
    to_rev: str = "HEAD"

    def spec(self) -> str:
        """Render as a two-dot range for git diff."""
        return f"{self.from_rev}..{self.to_rev}"

    def __str__(self) -> str:
        return self.spec()


@dataclass
class ChangeRecord:
    """A changed path with its (possibly truncated) diff.

    Attributes:
        path: Path relative to the repository root (new path for renames).
        status: Change status.
        diff: Unified diff text, truncated to the configured cap.
        old_path: Previous path for renames and copies.
        truncated: Whether the diff was cut.
    """

    path: str
    status: ChangeStatus
    diff: str = ""
    old_path: str | None = None
    truncated: bool = False


@dataclass(frozen=True)
class CommitInfo:
    """Commit metadata used in prompts."""

    hash: str
    message: str
    author: str
    email: str = ""
    date: str = ""

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass(frozen=True)
class FileStat:
    """Line counts for one changed file."""

    path: str
    additions: int = 0
    deletions: int = 0

    @property
    def changes(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class FileDiff:
    """Full diff text for one file."""

    file: str
    content: str


@dataclass
class ExistingDoc:
    """A documentation page already present under the docs root."""

    frontmatter: dict[str, Any]
    content: str


@dataclass
class DocContext:
    """Bounded context handed to prompt templates.

    Built fresh for every invocation and never persisted.

    Attributes:
        commits: Commits in the range, newest first.
        changed_files: Per-file line statistics.
        diffs: Full diffs for the first files of the range.
        existing_docs: Parsed pages keyed by path relative to the workspace.
        summary: One-line statistics string.
        features: Commit messages that announce user-facing features.
        date_range: Oldest and newest commit dates.
        user_facing_changes: Comma separated user-facing paths.
        changes: Change records for the incremental page path.
    """

    commits: list[CommitInfo] = field(default_factory=list)
    changed_files: list[FileStat] = field(default_factory=list)
    diffs: list[FileDiff] = field(default_factory=list)
    existing_docs: dict[str, ExistingDoc] = field(default_factory=dict)
    summary: str = ""
    features: list[str] = field(default_factory=list)
    date_range: tuple[str, str] = ("N/A", "N/A")
    user_facing_changes: str = ""
    changes: list[ChangeRecord] = field(default_factory=list)


@dataclass
class Page:
    """A generated documentation page.

    Attributes:
        title: Non-empty page title.
        content: Markdown/MDX body, heading included.
        audience: Audience identifier the page was written for.
        description: Short summary for the metadata header.
        source_order: Position of the page in the model response.
    """

    title: str
    content: str
    audience: str
    description: str = ""
    source_order: int = 0

    def __post_init__(self):
        self.title = self.title.strip()
        if not self.title:
            raise ValueError("Page title must not be empty")

    @property
    def slug(self) -> str:
        return sanitize_file_name(self.title)


@dataclass(frozen=True)
class NavigationEntry:
    """A page reference inside an audience navigation group."""

    audience: str
    page_path: str
    display_label: str


@dataclass(frozen=True)
class TrackingState:
    """Persisted watermark record."""

    last_processed_commit: str
    last_update: str
    files_processed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastProcessedCommit": self.last_processed_commit,
            "lastUpdate": self.last_update,
            "filesProcessed": self.files_processed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackingState":
        """Build from a stored record.

        Accepts the keys written by `to_dict` and, for legacy baseline
        records, the snake_case `last_documented_commit` and
        `last_documented_at` keys.

        Raises:
            ValueError: If no revision is present.
            TypeError: If `filesProcessed` is not a number.
        """
        commit = data.get("lastProcessedCommit") or data.get("last_documented_commit")
        if not isinstance(commit, str) or not commit.strip():
            raise ValueError("tracking record has no processed commit")
        return cls(
            last_processed_commit=commit.strip(),
            last_update=str(data.get("lastUpdate") or data.get("last_documented_at") or ""),
            files_processed=int(data.get("filesProcessed", 0) or 0),
        )
