"""Merging of a template package manifest into an existing one.

Used when scaffolding a docs site into a project that already has a
package.json: the template's keys are added without overriding anything the
project already declares.
"""

import copy
import json
import logging
import shutil
from pathlib import Path
from typing import Any

from autodocs.frameworks.base import ConfigMergeError

logger = logging.getLogger(__name__)


def _merge_lists(target: list[Any], source: list[Any]) -> list[Any]:
    merged = list(target)
    for item in source:
        if item not in merged:
            merged.append(item)
    return merged


def deep_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge source into a copy of target.

    - Nested objects are merged recursively.
    - Lists are unioned without duplicates, target items first.
    - Any other value already present in target wins, even when falsy.
    - Keys missing from target are copied from source.

    Neither input is modified.
    """
    result = copy.deepcopy(target)
    for key, value in source.items():
        if key not in result:
            result[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(result[key], dict):
            result[key] = deep_merge(result[key], value)
        elif isinstance(value, list) and isinstance(result[key], list):
            result[key] = _merge_lists(result[key], value)
    return result


def _read_json_object(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigMergeError(f"Could not read {path}: {e}", path=path) from e
    except json.JSONDecodeError as e:
        raise ConfigMergeError(f"{path.name} is not valid JSON: {e}", path=path) from e
    if not isinstance(data, dict):
        raise ConfigMergeError(f"{path.name} must contain a JSON object", path=path)
    return data


def merge_manifest_file(template_path: Path, target_path: Path) -> dict[str, Any]:
    """Merge a template manifest into the target manifest on disk.

    When the target does not exist the template is copied as is.

    Args:
        template_path: Template package.json.
        target_path: Project package.json, rewritten with 2-space indentation.

    Returns:
        The merged manifest.

    Raises:
        ConfigMergeError: If either file is unreadable or not a JSON object,
            or the target cannot be written.
    """
    template = _read_json_object(template_path)

    if not target_path.exists():
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(template_path, target_path)
        except OSError as e:
            raise ConfigMergeError(f"Could not create {target_path}: {e}", path=target_path) from e
        logger.info(f"Created {target_path.name} from template")
        return template

    merged = deep_merge(_read_json_object(target_path), template)
    try:
        target_path.write_text(json.dumps(merged, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as e:
        raise ConfigMergeError(f"Could not write {target_path}: {e}", path=target_path) from e

    logger.info(f"Merged template into {target_path.name}")
    return merged
