"""Watermark tracking for incremental documentation runs.

The tracking record stores the last revision whose changes were fully
documented. Each run diffs from that revision to HEAD; the record is
rewritten only after every page and navigation update of the run landed,
so a failed run is retried from the same starting point.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from autodocs.generation.models import RevisionRange, TrackingState

if TYPE_CHECKING:
    from autodocs.repo.git_repo import GitRepo

logger = logging.getLogger(__name__)


class TrackingError(Exception):
    """Raised when the tracking record cannot be written."""

    pass


def _write_json_atomic(path: Path, data: dict) -> None:
    """Write JSON to a sibling temp file, then rename it over the target."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ChangeTracker:
    """Loads and advances the last-processed revision watermark."""

    def __init__(self, tracking_path: Path):
        """Initialize the tracker.

        Args:
            tracking_path: Location of the JSON tracking record.
        """
        self.tracking_path = tracking_path

    def load_state(self) -> TrackingState | None:
        """Read the tracking record.

        Returns:
            The stored state, or None when the record is missing or
            unparsable. Callers treat None as "no watermark".
        """
        if not self.tracking_path.exists():
            return None

        try:
            data = json.loads(self.tracking_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("tracking record is not a JSON object")
            return TrackingState.from_dict(data)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable tracking record {self.tracking_path}: {e}")
            return None

    def load_watermark(self) -> str | None:
        """Return the last processed revision, or None if there is none."""
        state = self.load_state()
        return state.last_processed_commit if state else None

    def resolve_range(
        self, base_branch: str, force: bool = False, head: str = "HEAD"
    ) -> RevisionRange:
        """Compute the revision range the next run should analyze.

        Args:
            base_branch: Fallback start when there is no watermark.
            force: Ignore the watermark and diff against the base branch.
            head: End of the range.

        Returns:
            `watermark..head`, or `base_branch..head` for forced and first runs.
        """
        if force:
            logger.info(f"Forced run, diffing against base branch {base_branch}")
            return RevisionRange(from_rev=base_branch, to_rev=head)

        watermark = self.load_watermark()
        if watermark:
            logger.info(f"Resuming from watermark {watermark[:7]}")
            return RevisionRange(from_rev=watermark, to_rev=head)

        logger.info(f"No watermark found, diffing against base branch {base_branch}")
        return RevisionRange(from_rev=base_branch, to_rev=head)

    def commit_watermark(self, revision: str, files_processed: int) -> TrackingState:
        """Overwrite the tracking record with a new watermark.

        The full record is replaced, never merged with the previous one.

        Args:
            revision: Revision whose changes are now documented.
            files_processed: Number of changed files covered by the run.

        Returns:
            The state that was written.

        Raises:
            TrackingError: If the record cannot be written.
        """
        state = TrackingState(
            last_processed_commit=revision,
            last_update=datetime.now(timezone.utc).isoformat(),
            files_processed=files_processed,
        )
        try:
            _write_json_atomic(self.tracking_path, state.to_dict())
        except OSError as e:
            raise TrackingError(
                f"Could not write tracking record {self.tracking_path}: {e}"
            ) from e

        logger.info(f"Watermark advanced to {revision[:7]}")
        return state

    def initialize(self, repo: GitRepo, overwrite: bool = False) -> TrackingState:
        """Record the current HEAD as the baseline for future runs.

        Args:
            repo: Repository whose HEAD becomes the watermark.
            overwrite: Replace an existing record.

        Returns:
            The baseline state.

        Raises:
            TrackingError: If a record exists and overwrite is False, or the
                record cannot be written.
        """
        if self.tracking_path.exists() and not overwrite:
            raise TrackingError(
                f"Tracking record {self.tracking_path} already exists; "
                "pass overwrite=True to replace it"
            )

        head = repo.get_head_commit()
        branch = repo.get_current_branch()
        logger.info(f"Initializing docs tracking at {head[:7]} on {branch}")
        return self.commit_watermark(head, files_processed=0)
