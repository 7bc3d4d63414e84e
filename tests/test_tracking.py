"""Watermark tracking tests."""

import json
from pathlib import Path

import pytest

from autodocs.generation.tracking import ChangeTracker, TrackingError
from autodocs.repo import GitRepo


@pytest.fixture
def tracking_path(tmp_path: Path) -> Path:
    return tmp_path / ".docs-tracking.json"


class TestLoadWatermark:
    """Tests for reading the tracking record."""

    def test_missing_record_means_no_watermark(self, tracking_path: Path):
        """No file yields None."""
        assert ChangeTracker(tracking_path).load_watermark() is None

    def test_corrupt_record_means_no_watermark(self, tracking_path: Path):
        """Unparsable JSON is ignored rather than raised."""
        tracking_path.write_text("{not json")

        assert ChangeTracker(tracking_path).load_watermark() is None

    def test_record_without_commit_means_no_watermark(self, tracking_path: Path):
        """A JSON object lacking the revision is ignored."""
        tracking_path.write_text(json.dumps({"lastUpdate": "2025-01-01"}))

        assert ChangeTracker(tracking_path).load_watermark() is None

    @pytest.mark.parametrize("count", [[1], {"n": 1}, "many"])
    def test_malformed_file_count_means_no_watermark(self, tracking_path: Path, count):
        """A file count that is not a number makes the record unusable."""
        tracking_path.write_text(
            json.dumps({"lastProcessedCommit": "abc123", "filesProcessed": count})
        )

        assert ChangeTracker(tracking_path).load_watermark() is None

    def test_legacy_snake_case_record(self, tracking_path: Path):
        """Baseline records with last_documented_commit are still read."""
        tracking_path.write_text(
            json.dumps({"last_documented_commit": "abc123", "last_documented_at": "2025-01-01"})
        )

        state = ChangeTracker(tracking_path).load_state()

        assert state.last_processed_commit == "abc123"
        assert state.last_update == "2025-01-01"

    def test_reads_stored_commit(self, tracking_path: Path):
        """The stored revision is returned."""
        tracking_path.write_text(json.dumps({"lastProcessedCommit": "abc123"}))

        assert ChangeTracker(tracking_path).load_watermark() == "abc123"


class TestResolveRange:
    """Tests for the range the next run analyzes."""

    def test_watermark_starts_the_range(self, tracking_path: Path):
        """A stored watermark yields watermark..HEAD."""
        tracking_path.write_text(json.dumps({"lastProcessedCommit": "abc123"}))

        revision_range = ChangeTracker(tracking_path).resolve_range("main")

        assert revision_range.spec() == "abc123..HEAD"

    def test_no_watermark_falls_back_to_base_branch(self, tracking_path: Path):
        """First runs diff against the base branch."""
        revision_range = ChangeTracker(tracking_path).resolve_range("develop")

        assert revision_range.spec() == "develop..HEAD"

    def test_force_ignores_watermark(self, tracking_path: Path):
        """Forced runs diff against the base branch even with a watermark."""
        tracking_path.write_text(json.dumps({"lastProcessedCommit": "abc123"}))

        revision_range = ChangeTracker(tracking_path).resolve_range("main", force=True)

        assert revision_range.from_rev == "main"


class TestCommitWatermark:
    """Tests for advancing the watermark."""

    def test_overwrites_whole_record(self, tracking_path: Path):
        """Unknown keys from an earlier record are not carried over."""
        tracking_path.write_text(json.dumps({"lastProcessedCommit": "old", "extra": True}))

        ChangeTracker(tracking_path).commit_watermark("new123", files_processed=3)

        data = json.loads(tracking_path.read_text())
        assert set(data) == {"lastProcessedCommit", "lastUpdate", "filesProcessed"}
        assert data["lastProcessedCommit"] == "new123"
        assert data["filesProcessed"] == 3

    def test_leaves_no_temp_files(self, tracking_path: Path):
        """Only the record itself remains after an atomic write."""
        ChangeTracker(tracking_path).commit_watermark("abc", files_processed=0)

        assert [p.name for p in tracking_path.parent.iterdir()] == [tracking_path.name]

    def test_write_failure_raises_tracking_error(self, tmp_path: Path):
        """An unwritable location is fatal."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        tracker = ChangeTracker(blocker / ".docs-tracking.json")

        with pytest.raises(TrackingError):
            tracker.commit_watermark("abc", files_processed=0)


class TestInitialize:
    """Tests for recording a baseline."""

    def test_records_head(self, git_workspace):
        """The baseline is the current HEAD."""
        tracker = ChangeTracker(git_workspace.path / ".docs-tracking.json")

        state = tracker.initialize(GitRepo(git_workspace.path))

        assert state.last_processed_commit == git_workspace.head()
        assert tracker.load_watermark() == git_workspace.head()

    def test_refuses_to_overwrite_without_flag(self, git_workspace):
        """An existing record is kept unless overwrite is requested."""
        tracking_path = git_workspace.path / ".docs-tracking.json"
        tracking_path.write_text(json.dumps({"lastProcessedCommit": "abc123"}))
        tracker = ChangeTracker(tracking_path)
        repo = GitRepo(git_workspace.path)

        with pytest.raises(TrackingError, match="already exists"):
            tracker.initialize(repo)

        tracker.initialize(repo, overwrite=True)
        assert tracker.load_watermark() == git_workspace.head()
