# src/autodocs/generation/prompts.py
"""Audience prompt catalog.

Maps each documentation audience to a fixed system instruction and to the
templates that turn a DocContext into a user prompt. Everything here is pure
string interpolation; no I/O.

Two prompt shapes exist:
- Page prompts ask for Markdown/MDX pages separated by top-level headings.
- Range prompts ask for a JSON list of file updates covering a commit range.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from autodocs.constants.generation import (
    EXISTING_DOC_EXCERPT_CHARS,
    PROMPT_DIFF_LIMIT,
    PROMPT_EXISTING_DOCS_LIMIT,
)
from autodocs.generation.models import ChangeRecord, DocContext

logger = logging.getLogger(__name__)


class Audience(str, Enum):
    """Documentation consumer profiles."""

    DEVELOPER = "developer"
    STAKEHOLDER = "stakeholder"
    CUSTOMER = "customer"

    @classmethod
    def parse(cls, value: "str | Audience") -> "Audience":
        """Resolve an audience identifier, falling back to DEVELOPER."""
        if isinstance(value, Audience):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown audience {value!r}, using developer prompts")
            return cls.DEVELOPER


@dataclass
class PromptTemplate:
    """A template for generating prompts with variable substitution."""

    template: str

    def render(self, **kwargs: Any) -> str:
        """Render the template with the given variables.

        Raises:
            KeyError: If a required variable is missing.
        """
        return self.template.format(**kwargs)


@dataclass(frozen=True)
class AudiencePrompt:
    """A rendered prompt pair ready for the LLM client."""

    system_instruction: str
    user_prompt: str


# =============================================================================
# System Instructions
# =============================================================================

DEVELOPER_SYSTEM_PROMPT = """You are an expert technical documentation writer for developers.

Create detailed, precise technical documentation including:
- API references with parameters, types and return values
- Working code examples, in several languages when useful
- Error handling and edge cases
- Performance and security considerations
- Best practices, patterns and advanced configuration

Use technical language, explain both the "how" and the "why", and include
implementation details and known limitations."""

STAKEHOLDER_SYSTEM_PROMPT = """You are a business documentation expert writing for non-technical stakeholders.

Create high-level, strategic documentation including:
- Business value and impact of the changes
- Key features and capabilities
- Metrics and KPIs where they can be inferred
- ROI and cost implications
- Risks mitigated, opportunities and next steps

Use plain business language, avoid technical jargon, keep paragraphs short
and focus on outcomes."""

CUSTOMER_SYSTEM_PROMPT = """You are a user experience documentation writer for end users.

Create clear, friendly user guides including:
- Step-by-step tutorials for new or changed functionality
- Common use cases
- Troubleshooting and FAQs
- Tips and tricks

Use simple language, focus on tasks and goals, and be encouraging.
Only document what users can see or do. Leave out internal refactoring,
performance-only changes and implementation details."""

SYSTEM_PROMPTS: dict[Audience, str] = {
    Audience.DEVELOPER: DEVELOPER_SYSTEM_PROMPT,
    Audience.STAKEHOLDER: STAKEHOLDER_SYSTEM_PROMPT,
    Audience.CUSTOMER: CUSTOMER_SYSTEM_PROMPT,
}


# =============================================================================
# Page Template
# =============================================================================

PAGES_TEMPLATE = PromptTemplate(
    """Analyze these code changes and generate documentation.

Files changed: {files_changed}

Changes:
{changes}

Generate comprehensive documentation in {doc_format} format.

Formatting rules:
- Start every page with a top-level heading (`# Page Title`); each top-level
  heading begins a new page.
- Use `##` and deeper headings inside a page.
- Mark callouts with these prefixes at the start of a paragraph:
  "⚠️ Warning:", "💡 Tip:", "ℹ️ Info:", "⚠️ Caution:", "❌ Danger:", "📝 Note:".
- When showing the same example in several languages, place the fenced code
  blocks directly after each other."""
)

CHANGE_ENTRY_TEMPLATE = """
File: {path} ({status})
Diff:
```diff
{diff}
```
"""


# =============================================================================
# Range Templates
# =============================================================================

DEVELOPER_RANGE_TEMPLATE = PromptTemplate(
    """Analyze these commits and generate or update TECHNICAL documentation for DEVELOPERS.

## Commits analyzed ({commit_count}):
{commits_detailed}

## Changed files:
{changed_files}

## Main diffs:
{diffs}

## Existing documentation:
{existing_docs}

## Your task:
1. Analyze ALL commits in the range
2. Identify the relevant technical changes
3. For every significant change, generate or update detailed technical documentation
4. Include API reference, parameters, code examples and errors
5. Keep the focus on implementation details

Return JSON with this structure:
```json
{{
  "updates": [
    {{
      "file": "{docs_path}/developer/api-reference/endpoint.mdx",
      "action": "update" | "create",
      "content": "... full page content ...",
      "reason": "Technical reason for the update"
    }}
  ],
  "summary": "Technical summary of the documented changes",
  "technicalHighlights": [
    "Breaking change: API signature changed",
    "New endpoint for X"
  ]
}}
```

Return ONLY the JSON, nothing else."""
)

STAKEHOLDER_RANGE_TEMPLATE = PromptTemplate(
    """Analyze these commits and generate or update BUSINESS documentation for STAKEHOLDERS.

## Commits analyzed ({commit_count}):
{commit_messages}

## Period: {date_from} -> {date_to}

## Code changes:
{summary}

## Your task:
1. Translate the technical changes into business terms
2. Highlight the VALUE for the company and its users
3. Communicate clearly, without technical jargon
4. Focus on impact, results and metrics
5. Identify risks and opportunities

Examples of technical -> business translation:
- "Optimized database query" -> "Page load time reduced, improving the user experience"
- "Implemented caching" -> "Lower server costs at the same performance"
- "Fixed authentication bug" -> "Resolved an issue that blocked some users from signing in"

Return JSON:
```json
{{
  "updates": [
    {{
      "file": "{docs_path}/stakeholder/releases/release-notes.mdx",
      "action": "update",
      "content": "... business-friendly page content ...",
      "reason": "Communicate the business value of the changes"
    }}
  ],
  "summary": "Business summary of the changes",
  "businessImpact": {{
    "userValue": "What users gain",
    "businessValue": "What the company gains",
    "metrics": ["Metric 1", "Metric 2"],
    "risks": ["Mitigated risk"]
  }}
}}
```

Return ONLY the JSON, nothing else."""
)

CUSTOMER_RANGE_TEMPLATE = PromptTemplate(
    """Analyze these commits and generate or update USER documentation for END CUSTOMERS.

## Commits analyzed ({commit_count}):
{commit_messages}

## New features identified:
{features}

## Changes relevant to users:
{user_facing_changes}

## Your task:
1. Identify what is VISIBLE and USEFUL to the end user
2. Write practical how-to guides
3. Update the user-friendly changelog
4. Write simply and clearly
5. Focus on user benefits, not implementation

What to document:
- New buttons and UI functionality
- Changes to user workflows
- New capabilities
- Bug fixes that affect the user experience

What NOT to document:
- Internal refactoring
- Performance optimizations (unless clearly noticeable)
- Technical implementation details

Guide structure:
1. What you can do now
2. Why it is useful
3. How to use it (step by step)
4. Tips and tricks
5. FAQ

Return JSON:
```json
{{
  "updates": [
    {{
      "file": "{docs_path}/customer/guides/new-feature.mdx",
      "action": "create",
      "content": "... user-friendly guide ...",
      "reason": "New functionality relevant to users"
    }}
  ],
  "summary": "What changed for the user",
  "userFacingChanges": [
    {{
      "title": "New feature X",
      "description": "You can now do Y more easily",
      "type": "feature" | "improvement" | "fix"
    }}
  ]
}}
```

Return ONLY the JSON, nothing else."""
)


# =============================================================================
# Helper Functions
# =============================================================================


def _format_changes(changes: Sequence[ChangeRecord]) -> str:
    return "\n".join(
        CHANGE_ENTRY_TEMPLATE.format(
            path=c.path,
            status=f"{c.status.value}, diff truncated" if c.truncated else c.status.value,
            diff=c.diff,
        )
        for c in changes
    )


def _format_existing_docs(context: DocContext) -> str:
    if not context.existing_docs:
        return "No existing documentation"

    sections = []
    for path, doc in list(context.existing_docs.items())[:PROMPT_EXISTING_DOCS_LIMIT]:
        frontmatter = json.dumps(doc.frontmatter, indent=2, default=str)
        excerpt = doc.content[:EXISTING_DOC_EXCERPT_CHARS]
        sections.append(f"### {path}\n```yaml\n{frontmatter}\n```\nContent: {excerpt}...")
    return "\n\n".join(sections)


def _format_diffs(context: DocContext) -> str:
    if not context.diffs:
        return "No diffs available"
    return "\n".join(
        f"### {d.file}\n```diff\n{d.content}\n```\n" for d in context.diffs[:PROMPT_DIFF_LIMIT]
    )


def _bullets(items: Sequence[str], empty: str) -> str:
    return "\n".join(f"- {item}" for item in items) if items else empty


# =============================================================================
# Catalog
# =============================================================================


def system_instruction_for(audience: "str | Audience") -> str:
    """Get the fixed system instruction for an audience."""
    return SYSTEM_PROMPTS[Audience.parse(audience)]


def prompt_for(
    audience: "str | Audience", context: DocContext, doc_format: str = "MDX"
) -> AudiencePrompt:
    """Build the page-generation prompt for an audience.

    Every change record in the context is embedded; diffs are expected to be
    capped already by the collector.

    Args:
        audience: Audience identifier; unknown values use developer prompts.
        context: Assembled context with change records.
        doc_format: Authoring format name the framework expects.

    Returns:
        AudiencePrompt with system instruction and user prompt.
    """
    resolved = Audience.parse(audience)
    user_prompt = PAGES_TEMPLATE.render(
        files_changed=len(context.changes),
        changes=_format_changes(context.changes),
        doc_format=doc_format,
    )
    return AudiencePrompt(system_instruction=SYSTEM_PROMPTS[resolved], user_prompt=user_prompt)


def range_prompt_for(
    audience: "str | Audience", context: DocContext, docs_path: str = "docs"
) -> AudiencePrompt:
    """Build the commit-range structured-update prompt for an audience.

    Only the first few diffs are embedded; their text is not cut further.

    Args:
        audience: Audience identifier; unknown values use developer prompts.
        context: Assembled commit-range context.
        docs_path: Docs root used in the example update paths.

    Returns:
        AudiencePrompt with system instruction and user prompt.
    """
    resolved = Audience.parse(audience)
    commit_messages = _bullets([c.message for c in context.commits], "- (none)")

    if resolved is Audience.STAKEHOLDER:
        user_prompt = STAKEHOLDER_RANGE_TEMPLATE.render(
            commit_count=len(context.commits),
            commit_messages=commit_messages,
            date_from=context.date_range[0],
            date_to=context.date_range[1],
            summary=context.summary,
            docs_path=docs_path,
        )
    elif resolved is Audience.CUSTOMER:
        user_prompt = CUSTOMER_RANGE_TEMPLATE.render(
            commit_count=len(context.commits),
            commit_messages=commit_messages,
            features="\n".join(context.features) or "No explicit feature commits",
            user_facing_changes=context.user_facing_changes or "None identified",
            docs_path=docs_path,
        )
    else:
        user_prompt = DEVELOPER_RANGE_TEMPLATE.render(
            commit_count=len(context.commits),
            commits_detailed=_bullets(
                [f"{c.short_hash}: {c.message} ({c.author})" for c in context.commits],
                "- (none)",
            ),
            changed_files=_bullets(
                [f"{f.path} ({f.additions}+ {f.deletions}-)" for f in context.changed_files],
                "- (none)",
            ),
            diffs=_format_diffs(context),
            existing_docs=_format_existing_docs(context),
            docs_path=docs_path,
        )

    return AudiencePrompt(system_instruction=SYSTEM_PROMPTS[resolved], user_prompt=user_prompt)
