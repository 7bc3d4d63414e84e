"""Mintlify adapter: MDX components and mint.json navigation."""

import json
import logging
from typing import Any, Sequence

from autodocs.constants.generation import CODE_GROUP_GAP
from autodocs.frameworks.base import (
    CodeBlock,
    ConfigMergeError,
    convert_callouts,
    group_code_blocks,
)
from autodocs.generation.models import NavigationEntry, Page, capitalize_first

logger = logging.getLogger(__name__)

CALLOUT_RENDERERS = {
    "warning": lambda text: f"<Warning>{text}</Warning>",
    "tip": lambda text: f"<Tip>{text}</Tip>",
    "info": lambda text: f"<Info>{text}</Info>",
    "caution": lambda text: f"<Warning>{text}</Warning>",
    "danger": lambda text: f"<Warning>{text}</Warning>",
    "note": lambda text: f"<Note>{text}</Note>",
}


def render_code_group(blocks: Sequence[CodeBlock]) -> str:
    """Render a run of blocks as a <CodeGroup>; the label follows the language."""
    items = "\n\n".join(
        f"```{block.language} {capitalize_first(block.language)}\n{block.code}```"
        for block in blocks
    )
    return f"<CodeGroup>\n{items}\n</CodeGroup>"


class MintlifyFramework:
    """Mintlify site framework."""

    name = "mintlify"
    page_extension = ".mdx"
    doc_format = "MDX"
    config_candidates = ("mint.json",)

    def __init__(self, docs_path: str = "docs", code_group_gap: int = CODE_GROUP_GAP):
        """Initialize the adapter.

        Args:
            docs_path: Docs root relative to mint.json, used in page paths.
            code_group_gap: Adjacency threshold for code groups.
        """
        self.docs_path = docs_path.strip("/")
        self.code_group_gap = code_group_gap

    def transform(self, content: str) -> str:
        formatted = convert_callouts(content, CALLOUT_RENDERERS)
        formatted, _ = group_code_blocks(formatted, render_code_group, self.code_group_gap)
        return formatted

    def navigation_entries(self, audience: str, pages: Sequence[Page]) -> list[NavigationEntry]:
        prefix = f"{self.docs_path}/{audience}" if self.docs_path else audience
        return [
            NavigationEntry(
                audience=audience,
                page_path=f"{prefix}/{page.slug}",
                display_label=page.title,
            )
            for page in pages
        ]

    def default_config(self) -> dict[str, Any]:
        return {"name": "Documentation", "navigation": []}

    def merge_navigation(
        self, existing: str | None, audience: str, pages: Sequence[Page]
    ) -> str:
        """Merge pages into mint.json.

        The audience group is matched case-insensitively by its `group` name
        and created when missing. Pages already listed by exact path are not
        added again; existing entries keep their order.

        Raises:
            ConfigMergeError: If the existing text is not a JSON object with a
                navigation list.
        """
        if existing is None:
            config = self.default_config()
        else:
            try:
                config = json.loads(existing)
            except json.JSONDecodeError as e:
                raise ConfigMergeError(f"mint.json is not valid JSON: {e}") from e
            if not isinstance(config, dict):
                raise ConfigMergeError("mint.json must contain a JSON object")

        navigation = config.setdefault("navigation", [])
        if not isinstance(navigation, list):
            raise ConfigMergeError("mint.json `navigation` must be a list")

        group = next(
            (
                item
                for item in navigation
                if isinstance(item, dict) and str(item.get("group", "")).lower() == audience.lower()
            ),
            None,
        )
        if group is None:
            group = {"group": capitalize_first(audience), "pages": []}
            navigation.append(group)

        group_pages = group.setdefault("pages", [])
        if not isinstance(group_pages, list):
            raise ConfigMergeError(f"mint.json group `{group.get('group')}` pages must be a list")

        added = 0
        for entry in self.navigation_entries(audience, pages):
            if entry.page_path not in group_pages:
                group_pages.append(entry.page_path)
                added += 1

        logger.debug(f"mint.json: {added} page(s) added to group {group.get('group')}")
        return json.dumps(config, indent=2, ensure_ascii=False) + "\n"
