"""Documentation pipeline orchestration.

Two pipelines share the same building blocks:

1. `run` - incremental page generation. Changes since the watermark are
   turned into one set of pages per audience, transformed into the
   framework's syntax, written under the docs root and linked into the
   framework's navigation. The watermark moves only when every audience
   succeeded.
2. `run_range` - commit-range updates. The model returns a JSON list of file
   updates for one audience; they are written verbatim and a metrics record
   is appended.
"""

import json
import logging
import os
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from autodocs.config import Config, ConfigError
from autodocs.frameworks import ConfigMergeError, FrameworkAdapter, apply_navigation, get_framework
from autodocs.generation.changes import ChangeSetCollector
from autodocs.generation.context import ContextAssembler
from autodocs.generation.models import DocContext, Page, RevisionRange, TrackingState
from autodocs.generation.parsing import ResponseParseError, ResponseParser
from autodocs.generation.prompts import AudiencePrompt, prompt_for, range_prompt_for
from autodocs.generation.tracking import ChangeTracker
from autodocs.generation.writer import PageWriter
from autodocs.llm.client import LLMClient
from autodocs.repo.git_repo import GitError, GitRepo

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Collaborators for one invocation, built once and passed explicitly."""

    settings: Config
    repo: GitRepo
    llm: LLMClient
    framework: FrameworkAdapter

    @classmethod
    def from_settings(cls, settings: Config) -> "RunContext":
        """Build the repository, LLM client and framework adapter for settings.

        Raises:
            GitError: If the workspace is not a git repository.
            ConfigError: If the framework is not supported.
        """
        return cls(
            settings=settings,
            repo=GitRepo(settings.workspace_path),
            llm=LLMClient(
                provider=settings.llm.provider,
                model=settings.llm.model,
                api_key=settings.api_key,
                endpoint=settings.llm_endpoint,
                log_path=settings.llm_log_path,
            ),
            framework=get_framework(
                settings.framework,
                docs_path=settings.project.docs_path,
                code_group_gap=settings.generation.code_group_gap,
            ),
        )


@dataclass
class AudienceResult:
    """Outcome of generating one audience.

    Attributes:
        audience: Audience identifier.
        pages: Parsed and transformed pages.
        written: Paths written for the pages (empty on dry runs).
        config_path: Navigation config updated, if any.
        error: Parse failure message; the audience produced nothing.
        navigation_error: Merge failure message; pages were still written.
    """

    audience: str
    pages: list[Page] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    config_path: Path | None = None
    error: str | None = None
    navigation_error: str | None = None


@dataclass
class RunResult:
    """Outcome of an incremental run."""

    revision_range: RevisionRange
    files_processed: int = 0
    audiences: list[AudienceResult] = field(default_factory=list)
    watermark: TrackingState | None = None
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return all(result.error is None for result in self.audiences)

    @property
    def written(self) -> list[Path]:
        return [path for result in self.audiences for path in result.written]


@dataclass
class RangeResult:
    """Outcome of a commit-range run."""

    audience: str
    commits: int = 0
    files_changed: int = 0
    updated_files: list[str] = field(default_factory=list)
    summary: str = ""
    duration_ms: int = 0


class DocsOrchestrator:
    """Runs the documentation pipelines for one workspace."""

    def __init__(self, context: RunContext):
        """Initialize the orchestrator.

        Args:
            context: Settings and collaborators for this invocation.
        """
        self.context = context
        settings = context.settings
        self.tracker = ChangeTracker(settings.tracking_path)
        self.collector = ChangeSetCollector(
            context.repo,
            max_diff_chars=settings.generation.max_diff_chars,
            max_range_diff_files=settings.generation.max_range_diff_files,
        )
        self.assembler = ContextAssembler(
            settings.docs_root,
            workspace_path=settings.workspace_path,
            max_existing_docs=settings.generation.max_existing_docs,
        )
        self.parser = ResponseParser(description_max_chars=settings.generation.description_max_chars)
        self.writer = PageWriter(
            settings.docs_root,
            extension=context.framework.page_extension,
            workspace_path=settings.workspace_path,
        )

    @property
    def settings(self) -> Config:
        return self.context.settings

    def exclude_patterns(self) -> list[str]:
        """Configured exclusions plus the docs root itself."""
        patterns = list(self.settings.triggers.exclude_patterns)
        docs_pattern = f"{self.settings.project.docs_path.strip('/')}/**"
        if docs_pattern not in patterns:
            patterns.append(docs_pattern)
        return patterns

    async def _complete(self, prompt: AudiencePrompt) -> str:
        return await self.context.llm.generate(
            prompt.user_prompt,
            system_prompt=prompt.system_instruction,
            temperature=self.settings.llm.temperature,
            max_tokens=self.settings.llm.max_tokens,
        )

    # -------------------------------------------------------------------------
    # Incremental pages
    # -------------------------------------------------------------------------

    def _resolve_range(self, base_branch: str, force: bool, head: str) -> RevisionRange:
        revision_range = self.tracker.resolve_range(base_branch, force=force, head=head)
        if revision_range.from_rev == base_branch:
            return revision_range

        try:
            reachable = self.context.repo.is_ancestor(revision_range.from_rev, head)
        except GitError as e:
            logger.warning(f"Watermark {revision_range.from_rev[:7]} is unusable: {e}")
            reachable = False

        if not reachable:
            logger.warning(
                f"Watermark {revision_range.from_rev[:7]} is not an ancestor of HEAD, "
                f"diffing against base branch {base_branch}"
            )
            return RevisionRange(from_rev=base_branch, to_rev=head)
        return revision_range

    async def generate_audience(
        self, audience: str, doc_context: DocContext, dry_run: bool = False
    ) -> AudienceResult:
        """Generate, write and link the pages of one audience.

        A response that cannot be parsed is recorded on the result; a config
        merge failure is logged and the pages are kept.

        Raises:
            LLMError: If the model call fails.
            PageWriteError: If a page cannot be written.
        """
        framework = self.context.framework
        result = AudienceResult(audience=audience)

        prompt = prompt_for(audience, doc_context, doc_format=framework.doc_format)
        raw = await self._complete(prompt)

        try:
            pages = self.parser.parse_pages(raw, audience)
        except ResponseParseError as e:
            logger.error(f"Could not parse {audience} response: {e.message}")
            result.error = e.message
            return result

        result.pages = [replace(page, content=framework.transform(page.content)) for page in pages]
        logger.info(f"Parsed {len(result.pages)} {audience} page(s)")

        if dry_run:
            for page in result.pages:
                logger.info(f"[dry run] {audience}/{page.slug}{framework.page_extension}")
            return result

        result.written = self.writer.write(result.pages, audience)

        try:
            result.config_path = apply_navigation(
                framework, self.settings.workspace_path, audience, result.pages
            )
        except ConfigMergeError as e:
            logger.warning(f"Navigation for {audience} not updated: {e.message}")
            result.navigation_error = e.message

        return result

    async def run(
        self,
        audiences: Sequence[str] | None = None,
        force: bool = False,
        base_branch: str | None = None,
        dry_run: bool = False,
    ) -> RunResult:
        """Document the changes since the watermark for each audience.

        Args:
            audiences: Audiences to generate; defaults to the configured ones.
            force: Ignore the watermark and diff against the base branch.
            base_branch: Overrides the configured base branch.
            dry_run: Parse and transform pages without writing anything.

        Returns:
            RunResult; `success` is False when any audience failed to parse.

        Raises:
            GitError: If the change set cannot be collected.
            LLMError: If a model call fails.
            PageWriteError: If a page cannot be written.
            TrackingError: If the watermark cannot be saved.
        """
        selected = list(audiences or self.settings.project.audiences)
        base = base_branch or self.settings.project.base_branch
        head = self.context.repo.get_head_commit()

        revision_range = self._resolve_range(base, force, head)
        changes = self.collector.collect(revision_range, self.exclude_patterns())
        result = RunResult(
            revision_range=revision_range, files_processed=len(changes), dry_run=dry_run
        )

        if not changes:
            logger.info("No changes to document")
            return result

        doc_context = self.assembler.assemble_from_changes(changes)
        for audience in selected:
            logger.info(f"Generating {audience} docs for {len(changes)} file(s)")
            result.audiences.append(await self.generate_audience(audience, doc_context, dry_run))

        if dry_run:
            logger.info("Dry run complete; nothing written")
        elif result.success:
            result.watermark = self.tracker.commit_watermark(head, files_processed=len(changes))
        else:
            failed = ", ".join(r.audience for r in result.audiences if r.error)
            logger.error(f"Watermark not advanced; failed audiences: {failed}")

        return result

    # -------------------------------------------------------------------------
    # Commit-range updates
    # -------------------------------------------------------------------------

    async def run_range(
        self, from_rev: str, to_rev: str = "HEAD", audience: str = "developer"
    ) -> RangeResult:
        """Apply model-proposed updates for the commits in from_rev...to_rev.

        Raises:
            ConfigError: If from_rev is missing.
            GitError: If the commit log or statistics cannot be read.
            LLMError: If the model call fails.
            ResponseParseError: If the response holds no valid update list.
            PageWriteError: If an update cannot be written.
        """
        if not from_rev:
            raise ConfigError("A start revision (FROM_COMMIT) is required for a range run")

        start_time = time.perf_counter()
        result = RangeResult(audience=audience)
        logger.info(f"Range run for {audience}: {from_rev}...{to_rev}")

        changes = self.collector.collect_range(from_rev, to_rev, self.exclude_patterns())
        result.commits = len(changes.commits)
        result.files_changed = len(changes.changed_files)
        if not changes.commits:
            logger.info("No commits to analyze")
            return result
        if not changes.changed_files:
            logger.info("No relevant files changed")
            return result

        doc_context = self.assembler.assemble(
            changes.commits, changes.changed_files, changes.diffs
        )
        prompt = range_prompt_for(audience, doc_context, docs_path=self.settings.project.docs_path)
        update_result = self.parser.parse_updates(await self._complete(prompt))
        logger.info(f"Model summary: {update_result.summary}")

        self.writer.apply_updates(update_result.updates)
        result.updated_files = [update.file for update in update_result.updates]
        result.summary = update_result.summary
        result.duration_ms = int((time.perf_counter() - start_time) * 1000)

        self.record_metrics(
            {
                "commits": result.commits,
                "filesChanged": result.files_changed,
                "pagesUpdated": len(result.updated_files),
                "duration": result.duration_ms,
                "model": self.settings.llm.model,
            },
            audience,
        )
        write_github_output(
            {
                "updated_files": ",".join(result.updated_files),
                "summary": result.summary,
                "audience": audience,
            }
        )

        logger.info(
            f"{audience} docs updated: {len(result.updated_files)} file(s) "
            f"in {result.duration_ms / 1000:.1f}s"
        )
        return result

    def record_metrics(self, data: dict[str, Any], audience: str) -> None:
        """Append one JSON line to the metrics log."""
        entry = {"timestamp": datetime.now(timezone.utc).isoformat(), "audience": audience, **data}
        path = self.settings.metrics_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning(f"Could not append metrics to {path}: {e}")


def write_github_output(values: dict[str, str]) -> bool:
    """Append key=value lines to $GITHUB_OUTPUT when running in Actions.

    Newlines in values are flattened to spaces.

    Returns:
        True if the outputs were written.
    """
    output_path = os.getenv("GITHUB_OUTPUT")
    if not output_path:
        return False

    lines = "".join(f"{key}={' '.join(value.splitlines())}\n" for key, value in values.items())
    try:
        with open(output_path, "a", encoding="utf-8") as f:
            f.write(lines)
    except OSError as e:
        logger.warning(f"Could not write GitHub outputs to {output_path}: {e}")
        return False
    return True
