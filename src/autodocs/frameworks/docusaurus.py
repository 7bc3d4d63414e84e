"""Docusaurus adapter: admonitions, Tabs and sidebars.js navigation.

sidebars.js is JavaScript, so navigation is patched textually: a new
`<audience>Sidebar` key is inserted before the closing brace of the
top-level object. An existing audience sidebar is left alone.
"""

import logging
import re
from typing import Sequence

from autodocs.constants.generation import CODE_GROUP_GAP
from autodocs.frameworks.base import (
    CodeBlock,
    ConfigMergeError,
    convert_callouts,
    group_code_blocks,
    js_string,
)
from autodocs.generation.models import NavigationEntry, Page, capitalize_first

logger = logging.getLogger(__name__)

TABS_IMPORTS = "import Tabs from '@theme/Tabs';\nimport TabItem from '@theme/TabItem';\n"

# Closing brace of a top-level object literal, at column 0
TOP_LEVEL_CLOSE_PATTERN = re.compile(r"^\}[ \t]*;?[ \t]*$", re.MULTILINE)


def _admonition(kind: str):
    return lambda text: f":::{kind}\n{text}\n:::"


CALLOUT_RENDERERS = {
    "warning": _admonition("warning"),
    "tip": _admonition("tip"),
    "info": _admonition("info"),
    "caution": _admonition("caution"),
    "danger": _admonition("danger"),
    "note": _admonition("note"),
}


def render_tabs(blocks: Sequence[CodeBlock]) -> str:
    """Render a run of blocks as <Tabs> with one <TabItem> per block."""
    items = "\n".join(
        f'  <TabItem value="{block.language}" label="{capitalize_first(block.language)}">\n'
        f"\n```{block.language}\n{block.code}```\n\n  </TabItem>"
        for block in blocks
    )
    return f"<Tabs>\n{items}\n</Tabs>"


class DocusaurusFramework:
    """Docusaurus site framework."""

    name = "docusaurus"
    page_extension = ".mdx"
    doc_format = "MDX"
    config_candidates = ("sidebars.js", "sidebars.ts")

    def __init__(self, code_group_gap: int = CODE_GROUP_GAP):
        self.code_group_gap = code_group_gap

    def transform(self, content: str) -> str:
        """Convert callouts to admonitions and code runs to Tabs.

        The theme imports are added once, at the top, when at least one Tabs
        block was created.
        """
        formatted = convert_callouts(content, CALLOUT_RENDERERS)
        formatted, groups = group_code_blocks(formatted, render_tabs, self.code_group_gap)
        if groups and "@theme/Tabs" not in content:
            formatted = f"{TABS_IMPORTS}\n{formatted}"
        return formatted

    def navigation_entries(self, audience: str, pages: Sequence[Page]) -> list[NavigationEntry]:
        return [
            NavigationEntry(
                audience=audience,
                page_path=f"{audience}/{page.slug}",
                display_label=page.title,
            )
            for page in pages
        ]

    def sidebar_key(self, audience: str) -> str:
        return f"{audience}Sidebar"

    def _sidebar_block(self, audience: str, pages: Sequence[Page]) -> str:
        items = ", ".join(js_string(e.page_path) for e in self.navigation_entries(audience, pages))
        return (
            f"  {self.sidebar_key(audience)}: [\n"
            "    {\n"
            "      type: 'category',\n"
            f"      label: {js_string(capitalize_first(audience))},\n"
            f"      items: [{items}],\n"
            "    },\n"
            "  ],"
        )

    def default_sidebars(self, audience: str, pages: Sequence[Page]) -> str:
        return f"module.exports = {{\n{self._sidebar_block(audience, pages)}\n}};\n"

    def merge_navigation(
        self, existing: str | None, audience: str, pages: Sequence[Page]
    ) -> str:
        """Insert an audience sidebar into sidebars.js.

        Raises:
            ConfigMergeError: If no top-level closing brace is found.
        """
        if existing is None:
            return self.default_sidebars(audience, pages)

        key = self.sidebar_key(audience)
        if re.search(rf"\b{re.escape(key)}\b", existing):
            logger.info(f"Sidebar {key} exists, manual update may be needed")
            return existing

        closings = list(TOP_LEVEL_CLOSE_PATTERN.finditer(existing))
        if not closings:
            raise ConfigMergeError("sidebars.js has no top-level closing brace to insert before")
        closing = closings[-1]

        head = existing[: closing.start()].rstrip()
        separator = "" if head.endswith(("{", ",")) else ","
        return (
            f"{head}{separator}\n{self._sidebar_block(audience, pages)}\n"
            f"{existing[closing.start():]}"
        )
