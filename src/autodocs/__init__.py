"""Generate audience-specific documentation pages from git change history."""

__version__ = "0.1.0"
