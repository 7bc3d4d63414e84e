"""Configuration constants.

Re-exports all constants for convenient importing:
    from autodocs.constants import CODE_GROUP_GAP, FEATURE_PREFIXES
"""

from autodocs.constants.generation import *  # noqa: F403
from autodocs.constants.llm import *  # noqa: F403
from autodocs.constants.files import *  # noqa: F403
