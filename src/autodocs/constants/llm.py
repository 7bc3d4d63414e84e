"""LLM client configuration.

Default parameters for LLM API calls. These can be overridden per-call
but provide sensible defaults for documentation generation.
"""

# =============================================================================
# Generation Defaults
# =============================================================================
# Documentation is structured output, so the default temperature is low.

MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.3

# =============================================================================
# OpenRouter
# =============================================================================
# OpenRouter ranks and attributes traffic using these request headers.

OPENROUTER_API_BASE = "https://openrouter.ai/api/v1"
OPENROUTER_TITLE = "Auto-Docs Framework"
DEFAULT_REFERER = "https://github.com"
