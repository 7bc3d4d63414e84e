"""Change-set collection tests."""

from unittest.mock import MagicMock

from autodocs.generation.changes import ChangeSetCollector, truncate_diff
from autodocs.generation.models import ChangeStatus, RevisionRange
from autodocs.repo import GitRepo, NameStatusEntry


def test_truncate_diff_caps_length():
    """Long diffs are cut to the cap and flagged."""
    diff, truncated = truncate_diff("x" * 50, 20)

    assert diff == "x" * 20
    assert truncated


def test_truncate_diff_keeps_short_diffs():
    """Diffs within the cap are returned untouched."""
    assert truncate_diff("short", 20) == ("short", False)


class TestCollect:
    """Tests for the incremental page path."""

    def test_collects_changed_paths_with_diffs(self, git_workspace):
        """Every changed path gets a status and its diff."""
        base = git_workspace.head()
        git_workspace.commit({"src/api.py": "def handler():\n    return 1\n"}, "Add api")
        collector = ChangeSetCollector(GitRepo(git_workspace.path))

        records = collector.collect(RevisionRange(base, "HEAD"), [])

        assert len(records) == 1
        assert records[0].path == "src/api.py"
        assert records[0].status is ChangeStatus.ADDED
        assert "+def handler():" in records[0].diff

    def test_excluded_paths_are_dropped(self, git_workspace):
        """Paths matching an exclude pattern never become records."""
        base = git_workspace.head()
        git_workspace.commit(
            {
                "src/app.ts": "export const a = 1;\n",
                "src/app.test.ts": "test('a', () => {});\n",
                "node_modules/lib/index.js": "module.exports = 1;\n",
                "docs/developer/page.mdx": "# Page\n",
            },
            "Mixed change",
        )
        collector = ChangeSetCollector(GitRepo(git_workspace.path))

        records = collector.collect(
            RevisionRange(base), ["node_modules/**", "docs/**", "**/*.test.*"]
        )

        assert [r.path for r in records] == ["src/app.ts"]

    def test_non_ascii_paths_are_excluded_and_diffed(self, git_workspace):
        """Accented file names still match exclusions and get their diff."""
        base = git_workspace.head()
        git_workspace.commit(
            {"docs/café.md": "# Café\n", "src/café.py": "menu = []\n"}, "Add café"
        )
        collector = ChangeSetCollector(GitRepo(git_workspace.path))

        records = collector.collect(RevisionRange(base), ["docs/**"])

        assert [r.path for r in records] == ["src/café.py"]
        assert "+menu = []" in records[0].diff

    def test_diffs_are_capped(self, git_workspace):
        """Each diff is cut to max_diff_chars."""
        base = git_workspace.head()
        git_workspace.commit({"big.py": "value = 1\n" * 500}, "Add big file")
        collector = ChangeSetCollector(GitRepo(git_workspace.path), max_diff_chars=200)

        (record,) = collector.collect(RevisionRange(base), [])

        assert len(record.diff) == 200
        assert record.truncated

    def test_diff_uses_the_range_not_the_base_branch(self, git_workspace):
        """Only changes after from_rev appear in the diff."""
        git_workspace.commit({"src/app.py": "old = 1\n"}, "Add app")
        watermark = git_workspace.head()
        git_workspace.commit({"src/app.py": "old = 1\nnew = 2\n"}, "Extend app")
        collector = ChangeSetCollector(GitRepo(git_workspace.path))

        (record,) = collector.collect(RevisionRange(watermark), [])

        assert record.status is ChangeStatus.MODIFIED
        assert "+new = 2" in record.diff
        assert "+old = 1" not in record.diff

    def test_no_changes_yields_empty_list(self, git_workspace):
        """An empty range produces no records."""
        collector = ChangeSetCollector(GitRepo(git_workspace.path))

        assert collector.collect(RevisionRange(git_workspace.head()), []) == []


class TestCollectRange:
    """Tests for the commit-range path."""

    def test_collects_commits_stats_and_diffs(self, git_workspace):
        """Commits, line statistics and diffs come back together."""
        base = git_workspace.head()
        git_workspace.commit({"src/a.py": "a = 1\nb = 2\n"}, "feat: add a")
        git_workspace.commit({"src/b.py": "c = 3\n"}, "fix: add b")
        collector = ChangeSetCollector(GitRepo(git_workspace.path))

        changes = collector.collect_range(base, "HEAD", [])

        assert [c.message for c in changes.commits] == ["fix: add b", "feat: add a"]
        assert {(f.path, f.additions) for f in changes.changed_files} == {
            ("src/a.py", 2),
            ("src/b.py", 1),
        }
        assert {d.file for d in changes.diffs} == {"src/a.py", "src/b.py"}

    def test_only_first_files_get_diffs(self, git_workspace):
        """Diffs are fetched for at most max_range_diff_files files."""
        base = git_workspace.head()
        git_workspace.commit({f"src/m{i}.py": f"x = {i}\n" for i in range(5)}, "Add modules")
        collector = ChangeSetCollector(GitRepo(git_workspace.path), max_range_diff_files=2)

        changes = collector.collect_range(base, "HEAD", [])

        assert len(changes.changed_files) == 5
        assert len(changes.diffs) == 2

    def test_range_excludes_patterns(self, git_workspace):
        """Excluded paths are left out of the statistics."""
        base = git_workspace.head()
        git_workspace.commit({"src/a.py": "a\n", "dist/out.js": "o\n"}, "Build")
        collector = ChangeSetCollector(GitRepo(git_workspace.path))

        changes = collector.collect_range(base, "HEAD", ["dist/**"])

        assert [f.path for f in changes.changed_files] == ["src/a.py"]


def test_watermark_range_is_requested_from_git():
    """A watermark of abc123 makes the collector diff abc123..HEAD."""
    repo = MagicMock()
    repo.diff_name_status.return_value = [NameStatusEntry(status="M", path="src/app.py")]
    repo.diff_path.return_value = "+change"
    collector = ChangeSetCollector(repo)

    collector.collect(RevisionRange("abc123"), [])

    repo.diff_name_status.assert_called_once_with("abc123..HEAD")
    repo.diff_path.assert_called_once_with("abc123..HEAD", "src/app.py")
