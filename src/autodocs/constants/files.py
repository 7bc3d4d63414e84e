"""File and path constants."""

# Workspace config file read by load_settings().
CONFIG_FILE = ".autodocs.ini"

# Changed paths matching these patterns never reach a prompt.
DEFAULT_EXCLUDE_PATTERNS = (
    "node_modules/**",
    "dist/**",
    "build/**",
    "docs/**",
    "**/*.test.*",
    "**/*.spec.*",
)

# Extensions scanned when discovering existing documentation pages.
DOC_EXTENSIONS = (".md", ".mdx")
