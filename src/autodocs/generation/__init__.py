"""Documentation generation pipeline module.

The orchestrator lives in `autodocs.generation.orchestrator` and is not
re-exported here, since the framework adapters import the models below.
"""

from autodocs.generation.changes import ChangeSetCollector, RangeChanges, truncate_diff
from autodocs.generation.context import ContextAssembler, generate_change_summary
from autodocs.generation.frontmatter import build_frontmatter, parse_frontmatter
from autodocs.generation.models import (
    ChangeRecord,
    ChangeStatus,
    CommitInfo,
    DocContext,
    FileDiff,
    FileStat,
    NavigationEntry,
    Page,
    RevisionRange,
    TrackingState,
    sanitize_file_name,
)
from autodocs.generation.parsing import DocUpdate, ResponseParseError, ResponseParser, UpdateResult
from autodocs.generation.prompts import Audience, AudiencePrompt, prompt_for, range_prompt_for
from autodocs.generation.tracking import ChangeTracker, TrackingError
from autodocs.generation.writer import PageWriteError, PageWriter

__all__ = [
    # Models
    "ChangeRecord",
    "ChangeStatus",
    "CommitInfo",
    "DocContext",
    "FileDiff",
    "FileStat",
    "NavigationEntry",
    "Page",
    "RevisionRange",
    "TrackingState",
    "sanitize_file_name",
    # Tracking and collection
    "ChangeTracker",
    "TrackingError",
    "ChangeSetCollector",
    "RangeChanges",
    "truncate_diff",
    # Context and prompts
    "ContextAssembler",
    "generate_change_summary",
    "Audience",
    "AudiencePrompt",
    "prompt_for",
    "range_prompt_for",
    # Parsing and writing
    "DocUpdate",
    "ResponseParseError",
    "ResponseParser",
    "UpdateResult",
    "PageWriteError",
    "PageWriter",
    "build_frontmatter",
    "parse_frontmatter",
]
