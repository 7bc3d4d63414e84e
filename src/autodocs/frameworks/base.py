"""Shared building blocks for the site framework adapters.

Each framework adapter implements the FrameworkAdapter protocol: it rewrites
page bodies into the framework's authoring syntax and merges navigation
entries into the framework's configuration artifact. The scanning logic for
callouts and code groups is shared here; only the rendered syntax differs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Protocol, Sequence

from autodocs.constants.generation import CODE_GROUP_GAP
from autodocs.generation.models import NavigationEntry, Page

logger = logging.getLogger(__name__)


class ConfigMergeError(Exception):
    """Raised when a framework configuration artifact cannot be merged."""

    def __init__(self, message: str, path: Path | None = None):
        self.message = message
        self.path = path
        super().__init__(message)


class FrameworkAdapter(Protocol):
    """Capabilities every site framework must provide."""

    name: str
    page_extension: str
    doc_format: str
    config_candidates: tuple[str, ...]

    def transform(self, content: str) -> str:
        """Convert callouts and group adjacent code blocks."""
        ...

    def navigation_entries(self, audience: str, pages: Sequence[Page]) -> list[NavigationEntry]:
        """Build navigation entries for pages of one audience."""
        ...

    def merge_navigation(
        self, existing: str | None, audience: str, pages: Sequence[Page]
    ) -> str:
        """Merge pages into the configuration text, or synthesize a default."""
        ...


# =============================================================================
# Callouts
# =============================================================================


@dataclass(frozen=True)
class CalloutMarker:
    """An emoji-prefixed callout such as `💡 Tip: ...`."""

    kind: str
    emoji: str
    label: str

    @property
    def pattern(self) -> re.Pattern[str]:
        # The emoji variation selector is optional; text runs to the next
        # blank line, the next heading or the end of the text.
        return re.compile(
            rf"{re.escape(self.emoji)}\ufe0f?\s*{self.label}:(.*?)(?=\n\n|\n#|\Z)",
            re.DOTALL,
        )


CALLOUT_MARKERS: tuple[CalloutMarker, ...] = (
    CalloutMarker("warning", "\u26a0", "Warning"),
    CalloutMarker("tip", "\U0001f4a1", "Tip"),
    CalloutMarker("info", "\u2139", "Info"),
    CalloutMarker("caution", "\u26a0", "Caution"),
    CalloutMarker("danger", "\u274c", "Danger"),
    CalloutMarker("note", "\U0001f4dd", "Note"),
)


def convert_callouts(content: str, renderers: Mapping[str, Callable[[str], str]]) -> str:
    """Rewrite callout markers using per-kind renderers.

    Markers without a renderer, and free-form admonition text that does not
    match a marker, are left untouched.

    Args:
        content: Page body.
        renderers: Map of callout kind to a function taking the stripped
            callout text and returning framework syntax.

    Returns:
        Content with callouts converted.
    """
    for marker in CALLOUT_MARKERS:
        render = renderers.get(marker.kind)
        if render is None:
            continue
        content = marker.pattern.sub(lambda m, r=render: r(m.group(1).strip()), content)
    return content


# =============================================================================
# Code groups
# =============================================================================

CODE_BLOCK_PATTERN = re.compile(r"```(\w+)\n(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block located in a page body.

    Attributes:
        language: Language tag after the opening fence.
        code: Block body including its trailing newline.
        start: Offset of the opening fence.
        end: Offset just past the closing fence.
    """

    language: str
    code: str
    start: int
    end: int


def find_code_blocks(content: str) -> list[CodeBlock]:
    """Locate language-tagged fenced code blocks in document order."""
    return [
        CodeBlock(language=m.group(1), code=m.group(2), start=m.start(), end=m.end())
        for m in CODE_BLOCK_PATTERN.finditer(content)
    ]


def group_code_blocks(
    content: str,
    render_group: Callable[[Sequence[CodeBlock]], str],
    gap: int = CODE_GROUP_GAP,
) -> tuple[str, int]:
    """Replace runs of adjacent code blocks with composite blocks.

    Two blocks are adjacent when fewer than `gap` characters separate the end
    of one from the start of the next. Each maximal run of two or more
    adjacent blocks is rendered by `render_group` and spliced in place;
    isolated blocks stay as they are. The text is rewritten in a single
    forward pass, shifting later offsets by the length delta of each
    replacement.

    Args:
        content: Page body.
        render_group: Renders a run of blocks as one composite block.
        gap: Adjacency threshold in characters.

    Returns:
        Tuple of (rewritten content, number of composite blocks created).
    """
    blocks = find_code_blocks(content)
    result = content
    offset = 0
    groups = 0

    i = 0
    while i < len(blocks) - 1:
        run = [blocks[i]]
        while i + len(run) < len(blocks) and blocks[i + len(run)].start - run[-1].end < gap:
            run.append(blocks[i + len(run)])

        if len(run) < 2:
            i += 1
            continue

        replacement = render_group(run)
        start = run[0].start + offset
        end = run[-1].end + offset
        result = result[:start] + replacement + result[end:]
        offset += len(replacement) - (end - start)
        groups += 1
        i += len(run)

    return result, groups


# =============================================================================
# Script-source helpers
# =============================================================================


def js_string(value: str) -> str:
    """Quote a value as a single-quoted JavaScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", " ")
    return f"'{escaped}'"


def read_config_artifact(path: Path) -> str | None:
    """Read a configuration artifact, returning None when it does not exist.

    Raises:
        ConfigMergeError: If the file exists but cannot be read.
    """
    if not path.exists():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigMergeError(f"Could not read {path}: {e}", path=path) from e


def locate_config(adapter: FrameworkAdapter, workspace_path: Path) -> Path:
    """Probe the adapter's candidate locations; default to the first one."""
    for candidate in adapter.config_candidates:
        path = workspace_path / candidate
        if path.exists():
            return path
    return workspace_path / adapter.config_candidates[0]


def apply_navigation(
    adapter: FrameworkAdapter,
    workspace_path: Path,
    audience: str,
    pages: Sequence[Page],
) -> Path:
    """Merge navigation entries for pages into the framework config on disk.

    Args:
        adapter: Framework adapter.
        workspace_path: Project root the config lives in.
        audience: Audience whose navigation group is updated.
        pages: Pages written in this run.

    Returns:
        Path of the configuration file.

    Raises:
        ConfigMergeError: If the file cannot be read, parsed or written.
    """
    path = locate_config(adapter, workspace_path)
    existing = read_config_artifact(path)
    merged = adapter.merge_navigation(existing, audience, pages)

    if merged == existing:
        logger.info(f"{path.name} already lists the {audience} navigation; unchanged")
        return path

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(merged, encoding="utf-8")
    except OSError as e:
        raise ConfigMergeError(f"Could not write {path}: {e}", path=path) from e

    action = "Created" if existing is None else "Updated"
    logger.info(f"{action} {path.relative_to(workspace_path).as_posix()} navigation for {audience}")
    return path
