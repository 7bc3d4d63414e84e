"""Documentation generation constants.

Defaults for the size caps and heuristics used while building prompt
context and transforming generated pages. The matching [generation] config
keys override the caps per workspace.
"""

# =============================================================================
# Context Limits
# =============================================================================
# Diffs are truncated per file before they reach a prompt. The commit-range
# path keeps full diffs but only for the first few files. Existing docs are
# sampled to show the model the current tone and structure.

MAX_DIFF_CHARS = 2000
MAX_RANGE_DIFF_FILES = 10
MAX_EXISTING_DOCS = 5
PROMPT_DIFF_LIMIT = 3
PROMPT_EXISTING_DOCS_LIMIT = 2
EXISTING_DOC_EXCERPT_CHARS = 500

# =============================================================================
# Change Classification
# =============================================================================
# Commit messages containing any of these markers are listed as user-facing
# features. Paths under these directories count as user-facing changes.

FEATURE_PREFIXES = ("feat:", "feature:", "add:", "new:", "ui:", "ux:")
USER_FACING_DIRS = ("components/", "pages/")

# =============================================================================
# Page Parsing and Transformation
# =============================================================================
# Two fenced code blocks closer than CODE_GROUP_GAP characters are grouped
# into one tabbed component.

CODE_GROUP_GAP = 100
DESCRIPTION_MAX_CHARS = 160
DEFAULT_PAGE_TITLE = "Documentation Update"
DEFAULT_DESCRIPTION = "Auto-generated documentation"
