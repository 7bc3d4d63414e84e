"""Repository access: git queries and path filtering."""

from autodocs.repo.file_filter import is_excluded, pattern_to_regex
from autodocs.repo.git_repo import (
    CommitEntry,
    GitError,
    GitRepo,
    NameStatusEntry,
    NumstatEntry,
)

__all__ = [
    "CommitEntry",
    "GitError",
    "GitRepo",
    "NameStatusEntry",
    "NumstatEntry",
    "is_excluded",
    "pattern_to_regex",
]
