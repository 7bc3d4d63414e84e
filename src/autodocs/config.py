# src/autodocs/config.py
"""Configuration system for autodocs.

This module handles loading settings from environment variables and the
.autodocs.ini file in the workspace, providing sensible defaults, and
computing derived paths for docs output, tracking and logs.
"""

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
import os

from autodocs.constants.files import CONFIG_FILE, DEFAULT_EXCLUDE_PATTERNS

SUPPORTED_FRAMEWORKS = ("mintlify", "docusaurus", "vitepress")
SUPPORTED_AUDIENCES = ("developer", "stakeholder", "customer")
SUPPORTED_PROVIDERS = ("openrouter", "openai", "anthropic", "ollama")


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# =============================================================================
# CONFIG_SCHEMA
# =============================================================================

# Schema: section -> key -> (type, default, min, max, description)
CONFIG_SCHEMA: dict[str, dict[str, tuple[type, Any, Any, Any, str]]] = {
    "project": {
        "framework": (str, None, None, None, "Target site framework"),
        "audiences": (list, ["developer"], None, None, "Audiences to generate"),
        "docs_path": (str, "docs", None, None, "Docs root relative to workspace"),
        "base_branch": (str, "main", None, None, "Fallback base branch"),
    },
    "generation": {
        "max_diff_chars": (int, 2000, 100, 100_000, "Per-file diff cap for page generation"),
        "max_range_diff_files": (int, 10, 1, 100, "Files with diffs in the commit-range path"),
        "max_existing_docs": (int, 5, 0, 50, "Existing docs parsed into context"),
        "code_group_gap": (int, 100, 1, 10_000, "Max gap between grouped code blocks"),
        "description_max_chars": (int, 160, 20, 1000, "Page description length"),
    },
    "llm": {
        "provider": (str, "openrouter", None, None, "LLM provider"),
        "model": (str, "z-ai/glm-4.5-air:free", None, None, "Model identifier"),
        "temperature": (float, 0.3, 0.0, 2.0, "Sampling temperature"),
        "max_tokens": (int, 4000, 256, 32768, "Max response tokens"),
    },
    "triggers": {
        "exclude_patterns": (list, list(DEFAULT_EXCLUDE_PATTERNS), None, None, "Ignored paths"),
    },
    "paths": {
        "tracking_file": (str, ".docs-tracking.json", None, None, "Watermark record"),
        "logs_dir": (str, ".autodocs-logs", None, None, "Logs directory name"),
        "metrics_file": (str, "metrics.jsonl", None, None, "Run metrics log"),
    },
}


# =============================================================================
# Section Dataclasses
# =============================================================================


@dataclass(frozen=True)
class ProjectConfig:
    """Project-level configuration."""

    framework: str
    audiences: list[str]
    docs_path: str
    base_branch: str


@dataclass(frozen=True)
class GenerationConfig:
    """Generation limits."""

    max_diff_chars: int
    max_range_diff_files: int
    max_existing_docs: int
    code_group_gap: int
    description_max_chars: int


@dataclass(frozen=True)
class LLMConfig:
    """LLM client configuration."""

    provider: str
    model: str
    temperature: float
    max_tokens: int


@dataclass(frozen=True)
class TriggersConfig:
    """Which changed paths are considered."""

    exclude_patterns: list[str]


@dataclass(frozen=True)
class PathsConfig:
    """Path names configuration."""

    tracking_file: str
    logs_dir: str
    metrics_file: str


def _split_list(raw_value: str) -> list[str]:
    """Split a comma or newline separated INI value into items."""
    items = []
    for line in raw_value.replace(",", "\n").splitlines():
        item = line.strip()
        if item:
            items.append(item)
    return items


def _load_section(
    parser: ConfigParser, section: str, schema: dict[str, tuple[type, Any, Any, Any, str]]
) -> dict[str, Any]:
    """Load and validate a configuration section.

    Args:
        parser: ConfigParser instance with loaded config
        section: Section name to load
        schema: Schema definition for the section

    Returns:
        Dictionary of validated configuration values

    Raises:
        ConfigError: If validation fails
    """
    result = {}

    for key, (typ, default, min_val, max_val, _) in schema.items():
        if parser.has_option(section, key):
            raw_value = parser.get(section, key)
            value: bool | int | float | str | list[str]
            try:
                if typ is bool:
                    value = raw_value.lower() in ("true", "1", "yes", "on")
                elif typ is int:
                    value = int(raw_value)
                elif typ is float:
                    value = float(raw_value)
                elif typ is list:
                    value = _split_list(raw_value)
                else:
                    value = raw_value.strip()
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for [{section}].{key}: {raw_value!r} (expected {typ.__name__})"
                ) from e
        else:
            value = list(default) if isinstance(default, list) else default

        if typ in (int, float) and value is not None:
            if min_val is not None and value < min_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but minimum is {min_val}"
                )
            if max_val is not None and value > max_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but maximum is {max_val}"
                )

        result[key] = value

    return result


def _defaults(section: str) -> dict[str, Any]:
    return {
        key: (list(default) if isinstance(default, list) else default)
        for key, (_, default, _, _, _) in CONFIG_SCHEMA[section].items()
    }


# =============================================================================
# Config Dataclass with Computed Properties
# =============================================================================


@dataclass(frozen=True)
class Config:
    """Complete run configuration."""

    workspace_path: Path
    project: ProjectConfig
    generation: GenerationConfig = None  # type: ignore[assignment]
    llm: LLMConfig = None  # type: ignore[assignment]
    triggers: TriggersConfig = None  # type: ignore[assignment]
    paths: PathsConfig = None  # type: ignore[assignment]
    api_key: Optional[str] = None
    llm_endpoint: Optional[str] = None

    def __post_init__(self):
        """Fill section configs with schema defaults when not provided."""
        if self.generation is None:
            object.__setattr__(self, "generation", GenerationConfig(**_defaults("generation")))
        if self.llm is None:
            object.__setattr__(self, "llm", LLMConfig(**_defaults("llm")))
        if self.triggers is None:
            object.__setattr__(self, "triggers", TriggersConfig(**_defaults("triggers")))
        if self.paths is None:
            object.__setattr__(self, "paths", PathsConfig(**_defaults("paths")))

    @property
    def framework(self) -> str:
        return self.project.framework

    @property
    def docs_root(self) -> Path:
        """Absolute docs root directory."""
        return self.workspace_path / self.project.docs_path

    @property
    def tracking_path(self) -> Path:
        """Path to the watermark record."""
        return self.workspace_path / self.paths.tracking_file

    @property
    def metrics_path(self) -> Path:
        return self.workspace_path / self.paths.metrics_file

    @property
    def llm_log_path(self) -> Path:
        """Path to LLM query log file."""
        return self.workspace_path / self.paths.logs_dir / "llm-queries.jsonl"


def validate_config(config: Config) -> None:
    """Check cross-field constraints the schema cannot express.

    Raises:
        ConfigError: On the first invalid setting found.
    """
    if not config.project.framework:
        raise ConfigError("Missing required field: [project].framework")
    if config.project.framework not in SUPPORTED_FRAMEWORKS:
        raise ConfigError(
            f"Invalid framework: {config.project.framework}. "
            f"Must be one of: {', '.join(SUPPORTED_FRAMEWORKS)}"
        )
    if not config.project.audiences:
        raise ConfigError("[project].audiences must list at least one audience")
    for audience in config.project.audiences:
        if audience not in SUPPORTED_AUDIENCES:
            raise ConfigError(
                f"Invalid audience: {audience}. Must be one of: {', '.join(SUPPORTED_AUDIENCES)}"
            )
    if config.llm.provider not in SUPPORTED_PROVIDERS:
        raise ConfigError(
            f"Invalid provider: {config.llm.provider}. "
            f"Must be one of: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    if not config.llm.model:
        raise ConfigError("Missing required field: [llm].model")


def _load_config(workspace_path: Path, config_path: Optional[Path] = None) -> Config:
    """Load configuration from an INI file.

    Args:
        workspace_path: Workspace root the config belongs to.
        config_path: Path to config file. If None, uses defaults from schema.

    Returns:
        Config object with all sections populated.

    Raises:
        ConfigError: If validation fails
    """
    parser = ConfigParser()

    if config_path and config_path.exists():
        parser.read(config_path, encoding="utf-8")

    project_values = _load_section(parser, "project", CONFIG_SCHEMA["project"])
    generation_values = _load_section(parser, "generation", CONFIG_SCHEMA["generation"])
    llm_values = _load_section(parser, "llm", CONFIG_SCHEMA["llm"])
    triggers_values = _load_section(parser, "triggers", CONFIG_SCHEMA["triggers"])
    paths_values = _load_section(parser, "paths", CONFIG_SCHEMA["paths"])

    return Config(
        workspace_path=workspace_path,
        project=ProjectConfig(**project_values),
        generation=GenerationConfig(**generation_values),
        llm=LLMConfig(**llm_values),
        triggers=TriggersConfig(**triggers_values),
        paths=PathsConfig(**paths_values),
    )


def _api_key_for(provider: str) -> Optional[str]:
    env_names = {
        "openrouter": "OPENROUTER_API_KEY",
        "openai": "OPENAI_API_KEY",
        "anthropic": "ANTHROPIC_API_KEY",
    }
    env_name = env_names.get(provider)
    return os.getenv(env_name) if env_name else None


def load_settings(workspace_path: Optional[Path] = None) -> Config:
    """Load settings from environment variables and the workspace config file.

    Settings are built fresh on every call; callers keep the returned Config
    for the duration of a run.

    Args:
        workspace_path: Workspace root. Defaults to WORKSPACE_PATH, then the
            current directory.

    Returns:
        Validated Config.

    Raises:
        ConfigError: If the config file or environment holds invalid values.
    """
    if workspace_path is None:
        workspace_path = Path(os.getenv("WORKSPACE_PATH") or os.getcwd())

    config_file = workspace_path / CONFIG_FILE
    base_config = _load_config(workspace_path, config_file if config_file.exists() else None)

    llm = base_config.llm
    provider = os.getenv("ACTIVE_PROVIDER") or llm.provider
    model = os.getenv("ACTIVE_MODEL") or llm.model
    if provider != llm.provider or model != llm.model:
        llm = LLMConfig(
            provider=provider,
            model=model,
            temperature=llm.temperature,
            max_tokens=llm.max_tokens,
        )

    endpoint = None
    if provider == "ollama":
        endpoint = os.getenv("OLLAMA_ENDPOINT", "http://localhost:11434")

    config = Config(
        workspace_path=workspace_path,
        project=base_config.project,
        generation=base_config.generation,
        llm=llm,
        triggers=base_config.triggers,
        paths=base_config.paths,
        api_key=_api_key_for(provider),
        llm_endpoint=endpoint,
    )
    validate_config(config)
    return config
