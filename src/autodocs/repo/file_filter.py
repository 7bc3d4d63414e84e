"""Glob-style path exclusion for changed files."""

import re
from functools import lru_cache
from typing import Iterable


@lru_cache(maxsize=256)
def pattern_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a glob-like pattern into a regex over the full relative path.

    `**` matches any number of characters including `/`, `*` matches within
    a single path segment and `?` matches one non-`/` character. A `**/`
    prefix or infix also matches zero directories, so `**/*.test.*` matches
    `app.test.js` at the repository root.

    Args:
        pattern: Pattern such as `node_modules/**` or `**/*.spec.*`.

    Returns:
        Compiled regex to be used with `fullmatch`.
    """
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts))


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    """Check if a path matches any exclude pattern.

    Args:
        path: Relative file path using `/` separators.
        patterns: Exclude patterns.

    Returns:
        True if the path should be excluded.
    """
    normalized = path.replace("\\", "/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
    return any(pattern_to_regex(pattern).fullmatch(normalized) for pattern in patterns)
