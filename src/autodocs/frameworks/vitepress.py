"""VitePress adapter: custom containers, code-group and sidebar config.

The VitePress config is a JavaScript/TypeScript module. A new `'/<audience>/'`
sidebar entry is inserted right after the opening brace of the `sidebar`
object; nested or array-style sidebars are not rewritten.
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

SIDEBAR_ANCHOR_PATTERN = re.compile(r"sidebar\s*:\s*\{")


def _container(kind: str):
    return lambda text: f"::: {kind}\n{text}\n:::"


CALLOUT_RENDERERS = {
    "warning": _container("warning"),
    "tip": _container("tip"),
    "info": _container("info"),
    "caution": _container("warning"),
    "danger": _container("danger"),
    "note": _container("details Note"),
}


def render_code_group(blocks: Sequence[CodeBlock]) -> str:
    """Render a run of blocks as a `::: code-group` container."""
    items = "\n\n".join(
        f"```{block.language} [{capitalize_first(block.language)}]\n{block.code}```"
        for block in blocks
    )
    return f"::: code-group\n\n{items}\n\n:::"


class VitePressFramework:
    """VitePress site framework."""

    name = "vitepress"
    page_extension = ".md"
    doc_format = "Markdown"
    config_candidates = (
        ".vitepress/config.js",
        ".vitepress/config.mjs",
        ".vitepress/config.ts",
        ".vitepress/config.mts",
    )

    def __init__(self, code_group_gap: int = CODE_GROUP_GAP):
        self.code_group_gap = code_group_gap

    def transform(self, content: str) -> str:
        formatted = convert_callouts(content, CALLOUT_RENDERERS)
        formatted, _ = group_code_blocks(formatted, render_code_group, self.code_group_gap)
        return formatted

    def navigation_entries(self, audience: str, pages: Sequence[Page]) -> list[NavigationEntry]:
        return [
            NavigationEntry(
                audience=audience,
                page_path=f"/{audience}/{page.slug}",
                display_label=page.title,
            )
            for page in pages
        ]

    def sidebar_key(self, audience: str) -> str:
        return f"/{audience}/"

    def _items(self, audience: str, pages: Sequence[Page], indent: str) -> str:
        return f",\n{indent}".join(
            f"{{ text: {js_string(e.display_label)}, link: {js_string(e.page_path)} }}"
            for e in self.navigation_entries(audience, pages)
        )

    def _sidebar_block(self, audience: str, pages: Sequence[Page], indent: str = "      ") -> str:
        return (
            f"{indent}{js_string(self.sidebar_key(audience))}: [\n"
            f"{indent}  {{\n"
            f"{indent}    text: {js_string(capitalize_first(audience))},\n"
            f"{indent}    items: [\n"
            f"{indent}      {self._items(audience, pages, indent + '      ')}\n"
            f"{indent}    ]\n"
            f"{indent}  }}\n"
            f"{indent}]"
        )

    def default_config(self, audience: str, pages: Sequence[Page]) -> str:
        label = js_string(capitalize_first(audience))
        return (
            "import { defineConfig } from 'vitepress'\n"
            "\n"
            "export default defineConfig({\n"
            "  title: 'Documentation',\n"
            "  description: 'Auto-generated documentation',\n"
            "\n"
            "  themeConfig: {\n"
            "    nav: [\n"
            "      { text: 'Home', link: '/' },\n"
            f"      {{ text: {label}, link: {js_string(f'/{audience}/introduction')} }}\n"
            "    ],\n"
            "\n"
            "    sidebar: {\n"
            f"{self._sidebar_block(audience, pages)}\n"
            "    },\n"
            "\n"
            "    socialLinks: [\n"
            "      { icon: 'github', link: 'https://github.com/your-repo' }\n"
            "    ]\n"
            "  }\n"
            "})\n"
        )

    def has_sidebar(self, existing: str, audience: str) -> bool:
        key = self.sidebar_key(audience)
        return f"'{key}'" in existing or f'"{key}"' in existing

    def merge_navigation(
        self, existing: str | None, audience: str, pages: Sequence[Page]
    ) -> str:
        """Insert an audience sidebar into the VitePress config.

        Raises:
            ConfigMergeError: If the config has no `sidebar: {` object.
        """
        if existing is None:
            return self.default_config(audience, pages)

        if self.has_sidebar(existing, audience):
            logger.info(f"Sidebar {self.sidebar_key(audience)} exists, manual update may be needed")
            return existing

        anchor = SIDEBAR_ANCHOR_PATTERN.search(existing)
        if anchor is None:
            raise ConfigMergeError("VitePress config has no `sidebar: {` object to insert into")

        insert_at = anchor.end()
        rest = existing[insert_at:]
        separator = "" if rest.lstrip().startswith("}") else ","
        return (
            f"{existing[:insert_at]}\n{self._sidebar_block(audience, pages)}{separator}"
            f"{rest}"
        )
