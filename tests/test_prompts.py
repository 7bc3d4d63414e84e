"""Audience prompt catalog tests."""

import pytest

from autodocs.generation.models import (
    ChangeRecord,
    ChangeStatus,
    CommitInfo,
    DocContext,
    ExistingDoc,
    FileDiff,
    FileStat,
)
from autodocs.generation.prompts import (
    Audience,
    PromptTemplate,
    prompt_for,
    range_prompt_for,
    system_instruction_for,
)


@pytest.fixture
def range_context() -> DocContext:
    return DocContext(
        commits=[
            CommitInfo(hash="1234567890", message="feat: add export", author="Ada", date="2025-02-01"),
            CommitInfo(hash="abcdef0123", message="fix: rounding", author="Bob", date="2025-01-01"),
        ],
        changed_files=[FileStat("src/components/Export.tsx", 40, 2), FileStat("src/math.py", 3, 1)],
        diffs=[FileDiff(file=f"f{i}.py", content=f"+line {i}") for i in range(5)],
        existing_docs={
            f"docs/developer/p{i}.mdx": ExistingDoc(frontmatter={"title": f"P{i}"}, content="x" * 900)
            for i in range(3)
        },
        summary="2 commits, 2 files changed, +43/-3 lines",
        features=["feat: add export"],
        date_range=("2025-01-01", "2025-02-01"),
        user_facing_changes="src/components/Export.tsx",
    )


def test_prompt_template_renders_variables():
    """Templates substitute named variables."""
    assert PromptTemplate("Hello {name}").render(name="docs") == "Hello docs"


def test_prompt_template_missing_variable_raises():
    """A missing variable is an error, not an empty string."""
    with pytest.raises(KeyError):
        PromptTemplate("Hello {name}").render()


class TestAudience:
    """Tests for audience resolution."""

    def test_parses_known_values(self):
        """Identifiers are matched case-insensitively."""
        assert Audience.parse(" Customer ") is Audience.CUSTOMER

    def test_unknown_values_fall_back_to_developer(self):
        """Unrecognized audiences use the developer prompts."""
        assert Audience.parse("investor") is Audience.DEVELOPER
        assert system_instruction_for("investor") == system_instruction_for("developer")

    def test_each_audience_has_a_distinct_instruction(self):
        """The three audiences get different system instructions."""
        instructions = {system_instruction_for(a) for a in Audience}

        assert len(instructions) == 3


class TestPagePrompt:
    """Tests for the page-generation prompt."""

    def test_embeds_every_change(self):
        """Each change record appears with path, status and diff."""
        context = DocContext(
            changes=[
                ChangeRecord("src/a.py", ChangeStatus.ADDED, diff="+a = 1"),
                ChangeRecord("src/b.py", ChangeStatus.DELETED, diff="-b = 2"),
            ]
        )

        prompt = prompt_for("developer", context, doc_format="Markdown")

        assert "Files changed: 2" in prompt.user_prompt
        assert "File: src/a.py (added)" in prompt.user_prompt
        assert "-b = 2" in prompt.user_prompt
        assert "in Markdown format" in prompt.user_prompt

    def test_marks_truncated_diffs(self):
        """A cut diff is flagged so the model does not treat it as complete."""
        context = DocContext(
            changes=[ChangeRecord("src/big.py", ChangeStatus.MODIFIED, diff="+x", truncated=True)]
        )

        prompt = prompt_for("developer", context, doc_format="MDX")

        assert "File: src/big.py (modified, diff truncated)" in prompt.user_prompt

    def test_customer_instruction_excludes_internals(self):
        """Customer pages leave refactoring and performance work out."""
        prompt = prompt_for("customer", DocContext())

        assert "refactoring" in prompt.system_instruction
        assert prompt.system_instruction == system_instruction_for(Audience.CUSTOMER)


class TestRangePrompt:
    """Tests for the commit-range update prompts."""

    def test_developer_prompt_limits_diffs_and_docs(self, range_context: DocContext):
        """Only the first three diffs and two doc excerpts are embedded."""
        prompt = range_prompt_for("developer", range_context)

        assert "### f2.py" in prompt.user_prompt
        assert "### f3.py" not in prompt.user_prompt
        assert "docs/developer/p1.mdx" in prompt.user_prompt
        assert "docs/developer/p2.mdx" not in prompt.user_prompt
        assert "x" * 501 not in prompt.user_prompt
        assert "1234567: feat: add export (Ada)" in prompt.user_prompt

    def test_stakeholder_prompt_uses_period_and_summary(self, range_context: DocContext):
        """Stakeholders see the period and statistics, not diffs."""
        prompt = range_prompt_for("stakeholder", range_context)

        assert "2025-01-01 -> 2025-02-01" in prompt.user_prompt
        assert range_context.summary in prompt.user_prompt
        assert "+line 0" not in prompt.user_prompt

    def test_customer_prompt_lists_features(self, range_context: DocContext):
        """Customers see feature commits and user-facing paths."""
        prompt = range_prompt_for("customer", range_context, docs_path="site")

        assert "feat: add export" in prompt.user_prompt
        assert "src/components/Export.tsx" in prompt.user_prompt
        assert '"file": "site/customer/guides/new-feature.mdx"' in prompt.user_prompt

    def test_range_prompts_ask_for_json_only(self, range_context: DocContext):
        """Every audience is asked for the update-list JSON."""
        for audience in Audience:
            prompt = range_prompt_for(audience, range_context)

            assert '"updates": [' in prompt.user_prompt
            assert "Return ONLY the JSON" in prompt.user_prompt
