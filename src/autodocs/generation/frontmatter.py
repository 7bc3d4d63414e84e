"""Utilities for building and parsing YAML front matter in doc pages.

Every written page starts with a metadata header carrying at least:
- title: The page title shown by the site framework
- description: One-line summary used in listings and search previews

Existing pages are parsed back into (metadata, body) when they are sampled
into prompt context.
"""

import yaml


def build_frontmatter(title: str, description: str) -> str:
    """Build a YAML front matter block for a page.

    Values are YAML-quoted as needed, so titles containing colons or quotes
    survive a round trip.

    Args:
        title: Page title.
        description: Page description.

    Returns:
        Front matter string starting with --- and ending with --- followed
        by a blank line.
    """
    metadata = {"title": title, "description": description}

    body = yaml.safe_dump(
        metadata, sort_keys=False, allow_unicode=True, default_flow_style=False, width=1000
    )
    return f"---\n{body}---\n\n"


def parse_frontmatter(content: str) -> tuple[dict | None, str]:
    """Parse YAML front matter from page content.

    Args:
        content: Full page content that may start with front matter.

    Returns:
        Tuple of (metadata_dict, remaining_content). If no valid front matter
        is found, returns (None, original_content).
    """
    text = content.replace("\r\n", "\n")
    if not text.startswith("---\n"):
        return None, content

    end_pos = text.find("\n---\n", 3)
    if end_pos == -1:
        if text.rstrip().endswith("\n---"):
            end_pos = text.rstrip().rfind("\n---")
        else:
            return None, content

    try:
        metadata = yaml.safe_load(text[4:end_pos]) if end_pos > 4 else {}
    except yaml.YAMLError:
        return None, content
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        return None, content

    body_start = end_pos + len("\n---\n")
    if body_start < len(text) and text[body_start] == "\n":
        body_start += 1

    return metadata, text[body_start:]
