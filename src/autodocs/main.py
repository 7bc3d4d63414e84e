"""CI entry point.

Reads the run mode from the environment:

- FROM_COMMIT set: commit-range update for AUDIENCE (TO_COMMIT defaults
  to HEAD).
- INIT_TRACKING set: record HEAD as the baseline watermark.
- Otherwise: incremental page generation for AUDIENCE, or every configured
  audience, honoring FORCE and DRY_RUN.
"""

import asyncio
import logging
import os
import sys

from autodocs.config import ConfigError, load_settings
from autodocs.generation.orchestrator import DocsOrchestrator, RunContext
from autodocs.generation.parsing import ResponseParseError
from autodocs.generation.tracking import TrackingError
from autodocs.generation.writer import PageWriteError
from autodocs.llm.client import LLMError
from autodocs.repo.git_repo import GitError

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def configure_logging(level: int | str = logging.INFO) -> None:
    logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=level)
    # litellm is chatty at INFO
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("true", "1", "yes", "on")


async def _run(orchestrator: DocsOrchestrator) -> int:
    audience = os.getenv("AUDIENCE")
    from_commit = os.getenv("FROM_COMMIT")

    if from_commit:
        await orchestrator.run_range(
            from_commit,
            os.getenv("TO_COMMIT") or "HEAD",
            audience or orchestrator.settings.project.audiences[0],
        )
        return 0

    result = await orchestrator.run(
        audiences=[audience] if audience else None,
        force=_env_flag("FORCE"),
        dry_run=_env_flag("DRY_RUN"),
    )
    return 0 if result.success else 1


def main() -> int:
    """Run one documentation job and return the process exit code."""
    configure_logging(os.getenv("LOG_LEVEL", "INFO").upper())

    try:
        settings = load_settings()
        context = RunContext.from_settings(settings)

        if _env_flag("INIT_TRACKING"):
            orchestrator = DocsOrchestrator(context)
            state = orchestrator.tracker.initialize(context.repo, overwrite=_env_flag("FORCE"))
            logger.info(f"Docs tracking initialized at {state.last_processed_commit[:7]}")
            return 0

        logger.info(
            f"autodocs: framework={settings.framework} provider={settings.llm.provider} "
            f"model={settings.llm.model}"
        )
        return asyncio.run(_run(DocsOrchestrator(context)))
    except (
        ConfigError,
        GitError,
        LLMError,
        PageWriteError,
        ResponseParseError,
        TrackingError,
    ) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
