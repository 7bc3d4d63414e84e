"""Shared pytest fixtures for all tests.

Repositories are real git repositories created in a temp directory, so the
GitPython wrapper and the collectors run against actual git output.
"""

import subprocess
from pathlib import Path

import pytest

RUN_ENV_VARS = (
    "WORKSPACE_PATH",
    "ACTIVE_PROVIDER",
    "ACTIVE_MODEL",
    "OPENROUTER_API_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "OLLAMA_ENDPOINT",
    "GITHUB_OUTPUT",
    "GITHUB_REPOSITORY",
    "AUDIENCE",
    "FROM_COMMIT",
    "TO_COMMIT",
    "FORCE",
    "DRY_RUN",
    "INIT_TRACKING",
)


def run_git(repo_path: Path, *args: str) -> str:
    """Run a git command in repo_path and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args], cwd=repo_path, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


class GitWorkspace:
    """A throwaway git repository with helpers to create commits."""

    def __init__(self, path: Path):
        self.path = path

    def git(self, *args: str) -> str:
        return run_git(self.path, *args)

    def commit(self, files: dict[str, str], message: str) -> str:
        """Write files, commit everything and return the new HEAD sha."""
        for relative, content in files.items():
            target = self.path / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        self.git("add", "-A")
        self.git("commit", "-m", message)
        return self.head()

    def delete(self, relative: str, message: str) -> str:
        self.git("rm", "-q", relative)
        self.git("commit", "-m", message)
        return self.head()

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")


@pytest.fixture(autouse=True)
def clean_run_env(monkeypatch):
    """Keep the caller's environment from leaking into settings."""
    for name in RUN_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def git_workspace(tmp_path: Path) -> GitWorkspace:
    """Create a git repository on branch main with one initial commit."""
    repo_path = tmp_path / "project"
    repo_path.mkdir()

    run_git(repo_path, "init", "-q")
    run_git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    run_git(repo_path, "config", "user.email", "test@test.com")
    run_git(repo_path, "config", "user.name", "Test User")
    run_git(repo_path, "config", "commit.gpgsign", "false")

    workspace = GitWorkspace(repo_path)
    workspace.commit({"README.md": "# Test Project\n"}, "Initial commit")
    return workspace
