"""VitePress adapter tests."""

import pytest

from autodocs.frameworks import ConfigMergeError, VitePressFramework
from autodocs.generation.models import Page

CONFIG_JS = """import { defineConfig } from 'vitepress'

export default defineConfig({
  title: 'Acme',
  themeConfig: {
    sidebar: {
      '/guide/': [
        { text: 'Guide', items: [{ text: 'Intro', link: '/guide/intro' }] }
      ]
    }
  }
})
"""


@pytest.fixture
def framework() -> VitePressFramework:
    return VitePressFramework()


@pytest.fixture
def pages() -> list[Page]:
    return [Page("Release Notes", "# Release Notes", "stakeholder")]


class TestTransform:
    """Tests for container and code-group syntax."""

    def test_adjacent_blocks_become_code_group(self, framework: VitePressFramework):
        """Adjacent blocks are wrapped in a code-group container."""
        content = "```js\nrun()\n```\n\n```python\nrun()\n```"

        assert framework.transform(content) == (
            "::: code-group\n\n```js [Js]\nrun()\n```\n\n```python [Python]\nrun()\n```\n\n:::"
        )

    @pytest.mark.parametrize(
        "marker, container",
        [
            ("⚠️ Warning:", "warning"),
            ("💡 Tip:", "tip"),
            ("ℹ️ Info:", "info"),
            ("⚠️ Caution:", "warning"),
            ("❌ Danger:", "danger"),
            ("📝 Note:", "details Note"),
        ],
    )
    def test_callouts_become_containers(self, framework, marker, container):
        """Each callout maps to a custom container."""
        assert framework.transform(f"{marker} Text") == f"::: {container}\nText\n:::"

    def test_pages_are_markdown(self, framework: VitePressFramework):
        """VitePress pages use the .md extension."""
        assert framework.page_extension == ".md"
        assert framework.doc_format == "Markdown"


class TestMergeNavigation:
    """Tests for .vitepress/config merging."""

    def test_default_config_has_audience_sidebar(self, framework, pages):
        """A missing config is synthesized with the audience sidebar."""
        result = framework.merge_navigation(None, "stakeholder", pages)

        assert "export default defineConfig({" in result
        assert "'/stakeholder/': [" in result
        assert "text: 'Stakeholder'," in result
        assert "{ text: 'Release Notes', link: '/stakeholder/release-notes' }" in result

    def test_inserts_after_sidebar_anchor(self, framework, pages):
        """The new entry is the first key of the sidebar map."""
        result = framework.merge_navigation(CONFIG_JS, "stakeholder", pages)

        anchor = result.index("sidebar: {")
        assert anchor < result.index("'/stakeholder/'") < result.index("'/guide/'")
        assert "]," in result[result.index("'/stakeholder/'") : result.index("'/guide/'")]

    def test_empty_sidebar_gets_no_trailing_comma(self, framework, pages):
        """Inserting into an empty map does not leave a dangling comma."""
        result = framework.merge_navigation(
            "export default {\n  themeConfig: {\n    sidebar: {}\n  }\n}\n", "stakeholder", pages
        )

        assert "]}" in result
        assert "],}" not in result

    def test_existing_sidebar_with_double_quotes_is_unchanged(self, framework, pages):
        """An audience key in either quote style counts as present."""
        existing = 'export default {\n  themeConfig: {\n    sidebar: {\n      "/stakeholder/": []\n    }\n  }\n}\n'

        assert framework.merge_navigation(existing, "stakeholder", pages) == existing

    def test_merge_is_idempotent(self, framework, pages):
        """A second merge produces no duplicate entry."""
        once = framework.merge_navigation(CONFIG_JS, "stakeholder", pages)

        assert framework.merge_navigation(once, "stakeholder", pages) == once

    def test_array_sidebar_raises(self, framework, pages):
        """Configs without a sidebar map cannot be patched."""
        existing = "export default {\n  themeConfig: {\n    sidebar: [\n      { text: 'All' }\n    ]\n  }\n}\n"

        with pytest.raises(ConfigMergeError):
            framework.merge_navigation(existing, "stakeholder", pages)
