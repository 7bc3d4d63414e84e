"""Site framework adapters."""

from enum import Enum

from autodocs.config import ConfigError
from autodocs.constants.generation import CODE_GROUP_GAP
from autodocs.frameworks.base import (
    ConfigMergeError,
    FrameworkAdapter,
    apply_navigation,
    convert_callouts,
    group_code_blocks,
)
from autodocs.frameworks.docusaurus import DocusaurusFramework
from autodocs.frameworks.manifest import deep_merge, merge_manifest_file
from autodocs.frameworks.mintlify import MintlifyFramework
from autodocs.frameworks.vitepress import VitePressFramework


class FrameworkName(str, Enum):
    """Supported static-site frameworks."""

    MINTLIFY = "mintlify"
    DOCUSAURUS = "docusaurus"
    VITEPRESS = "vitepress"


def get_framework(
    name: str, docs_path: str = "docs", code_group_gap: int = CODE_GROUP_GAP
) -> FrameworkAdapter:
    """Create the adapter for a framework name.

    Raises:
        ConfigError: If the framework is not supported.
    """
    try:
        framework = FrameworkName(name.strip().lower())
    except ValueError as e:
        supported = ", ".join(f.value for f in FrameworkName)
        raise ConfigError(f"Unsupported framework: {name}. Must be one of: {supported}") from e

    if framework is FrameworkName.MINTLIFY:
        return MintlifyFramework(docs_path=docs_path, code_group_gap=code_group_gap)
    if framework is FrameworkName.DOCUSAURUS:
        return DocusaurusFramework(code_group_gap=code_group_gap)
    return VitePressFramework(code_group_gap=code_group_gap)


__all__ = [
    "ConfigMergeError",
    "DocusaurusFramework",
    "FrameworkAdapter",
    "FrameworkName",
    "MintlifyFramework",
    "VitePressFramework",
    "apply_navigation",
    "convert_callouts",
    "deep_merge",
    "get_framework",
    "group_code_blocks",
    "merge_manifest_file",
]
