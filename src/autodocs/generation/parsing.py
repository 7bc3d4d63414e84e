"""Parsing of raw model responses.

Two response shapes are handled:

1. Page lists: Markdown/MDX text where every top-level heading starts a new
   page. Headings inside fenced code blocks are ignored.
2. Update lists: JSON of the form `{"updates": [...], "summary": ...}`,
   either inside a fenced block or as the whole response.
"""

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from autodocs.constants.generation import (
    DEFAULT_DESCRIPTION,
    DEFAULT_PAGE_TITLE,
    DESCRIPTION_MAX_CHARS,
)
from autodocs.generation.models import Page

logger = logging.getLogger(__name__)


class ResponseParseError(Exception):
    """Raised when a model response holds no usable structured data."""

    def __init__(self, message: str, raw_response: str = ""):
        self.message = message
        self.raw_response = raw_response
        super().__init__(message)


class DocUpdate(BaseModel):
    """One file update proposed by the model."""

    file: str = Field(..., min_length=1, description="Target path relative to the workspace")
    action: str = Field("update", description="create or update")
    content: str = Field(..., description="Full new file content")
    reason: str = Field("", description="Why the update is needed")


class UpdateResult(BaseModel):
    """Structured update list returned by the commit-range prompts.

    Audience-specific extras (technicalHighlights, businessImpact,
    userFacingChanges) are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    updates: list[DocUpdate] = Field(default_factory=list)
    summary: str = ""


JSON_FENCE_PATTERN = re.compile(r"```json[ \t]*\n(.*?)\n```", re.DOTALL)
PLAIN_FENCE_PATTERN = re.compile(r"```[ \t]*\n(.*?)\n```", re.DOTALL)
FENCE_LINE_PATTERN = re.compile(r"^\s*(```|~~~)")


class ResponseParser:
    """Turns raw model output into pages or structured updates."""

    def __init__(self, description_max_chars: int = DESCRIPTION_MAX_CHARS):
        self.description_max_chars = description_max_chars

    # -------------------------------------------------------------------------
    # Page lists
    # -------------------------------------------------------------------------

    def split_sections(self, raw: str) -> list[list[str]]:
        """Split text into sections, one per top-level heading.

        Lines before the first heading are dropped. Lines inside fenced
        code blocks never start a section.

        Returns:
            List of sections, each a list of lines (with line endings) whose
            first element is the heading line.
        """
        sections: list[list[str]] = []
        preamble: list[str] = []
        in_fence = False

        for line in raw.splitlines(keepends=True):
            if FENCE_LINE_PATTERN.match(line):
                in_fence = not in_fence
            elif not in_fence and line.startswith("# "):
                sections.append([line])
                continue

            if sections:
                sections[-1].append(line)
            else:
                preamble.append(line)

        if sections and "".join(preamble).strip():
            logger.debug("Dropping text before the first top-level heading")

        return sections

    def extract_description(self, lines: list[str]) -> str:
        """Return the first non-empty, non-heading line after the title."""
        for line in lines[1:]:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                return stripped[: self.description_max_chars]
        return DEFAULT_DESCRIPTION

    def parse_pages(self, raw: str, audience: str) -> list[Page]:
        """Parse a page-list response.

        Args:
            raw: Raw model output.
            audience: Audience the pages belong to.

        Returns:
            Pages in response order. Without any top-level heading a single
            "Documentation Update" page holds the raw text verbatim.

        Raises:
            ResponseParseError: If the response is empty.
        """
        if not raw.strip():
            raise ResponseParseError(f"Empty model response for {audience}", raw_response=raw)

        pages: list[Page] = []
        for order, lines in enumerate(self.split_sections(raw)):
            title = lines[0][2:].strip()
            if not title:
                logger.warning(f"Skipping section {order} with an empty heading")
                continue
            pages.append(
                Page(
                    title=title,
                    content="".join(lines),
                    audience=audience,
                    description=self.extract_description(lines),
                    source_order=order,
                )
            )

        seen: dict[str, str] = {}
        for page in pages:
            if page.slug in seen:
                logger.warning(
                    f"{audience} pages {seen[page.slug]!r} and {page.title!r} share the file name "
                    f"{page.slug!r}; the later page will replace the earlier one"
                )
            seen.setdefault(page.slug, page.title)

        if not pages:
            return [
                Page(
                    title=DEFAULT_PAGE_TITLE,
                    content=raw,
                    audience=audience,
                    description=DEFAULT_DESCRIPTION,
                    source_order=0,
                )
            ]

        return pages

    # -------------------------------------------------------------------------
    # Update lists
    # -------------------------------------------------------------------------

    def _candidates(self, raw: str) -> list[str]:
        candidates = [m.group(1) for m in JSON_FENCE_PATTERN.finditer(raw)]
        candidates.extend(m.group(1) for m in PLAIN_FENCE_PATTERN.finditer(raw))
        candidates.append(raw.strip())
        return candidates

    def extract_json(self, raw: str) -> Any:
        """Extract the first JSON document from a response.

        Tries, in order: fenced blocks tagged `json`, untagged fenced blocks,
        then the whole response.

        Raises:
            ResponseParseError: If no candidate is valid JSON.
        """
        for candidate in self._candidates(raw):
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                continue
        raise ResponseParseError("Model response contains no valid JSON", raw_response=raw)

    def parse_updates(self, raw: str) -> UpdateResult:
        """Parse a structured update-list response.

        Raises:
            ResponseParseError: If no JSON is found or it lacks the expected
                shape.
        """
        data = self.extract_json(raw)
        if not isinstance(data, dict):
            raise ResponseParseError("Model response JSON is not an object", raw_response=raw)

        try:
            return UpdateResult.model_validate(data)
        except ValidationError as e:
            raise ResponseParseError(
                f"Model response has an invalid update list: {e}", raw_response=raw
            ) from e
