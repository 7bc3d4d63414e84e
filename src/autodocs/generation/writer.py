"""Writing generated pages and structured updates to disk."""

import logging
from pathlib import Path
from typing import Sequence

from autodocs.generation.frontmatter import build_frontmatter
from autodocs.generation.models import Page
from autodocs.generation.parsing import DocUpdate

logger = logging.getLogger(__name__)


class PageWriteError(Exception):
    """Raised when a page cannot be written."""

    def __init__(self, message: str, path: Path | None = None):
        self.message = message
        self.path = path
        super().__init__(message)


class PageWriter:
    """Writes pages under `<docs_root>/<audience>/`.

    Pages are overwritten in place. Page paths are validated before anything
    is written; a filesystem failure stops the batch and pages already
    written stay on disk.
    """

    def __init__(self, docs_root: Path, extension: str = ".mdx", workspace_path: Path | None = None):
        """Initialize the writer.

        Args:
            docs_root: Documentation root directory.
            extension: Page file extension including the dot.
            workspace_path: Root that structured updates are resolved against.
        """
        self.docs_root = docs_root
        self.extension = extension
        self.workspace_path = workspace_path or docs_root.parent

    def page_path(self, page: Page, audience: str) -> Path:
        """Resolve the file a page is written to.

        Raises:
            PageWriteError: If the title yields an empty file name.
        """
        slug = page.slug
        if not slug:
            raise PageWriteError(f"Page title {page.title!r} has no usable file name characters")
        return self.docs_root / audience / f"{slug}{self.extension}"

    def write(self, pages: Sequence[Page], audience: str) -> list[Path]:
        """Write pages with a title/description metadata header.

        Args:
            pages: Pages to write, in order.
            audience: Audience directory name.

        Returns:
            Written paths in page order.

        Raises:
            PageWriteError: On an empty slug (before any write) or a
                filesystem failure.
        """
        # Resolve every path first so an unusable title writes nothing.
        targets = [(page, self.page_path(page, audience)) for page in pages]

        written: list[Path] = []
        for page, path in targets:
            text = build_frontmatter(page.title, page.description) + page.content
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text, encoding="utf-8")
            except OSError as e:
                raise PageWriteError(f"Could not write {path}: {e}", path=path) from e

            logger.info(f"Wrote {path.relative_to(self.docs_root).as_posix()}")
            written.append(path)
        return written

    def resolve_update_path(self, file: str) -> Path:
        """Resolve an update target inside the workspace.

        Raises:
            PageWriteError: If the path is absolute or escapes the workspace.
        """
        relative = Path(file)
        root = self.workspace_path.resolve()
        target = (root / relative).resolve()
        if relative.is_absolute() or not target.is_relative_to(root):
            raise PageWriteError(f"Update path {file!r} is outside the workspace")
        return target

    def apply_updates(self, updates: Sequence[DocUpdate]) -> list[Path]:
        """Write structured updates verbatim to their target files.

        Returns:
            Written paths in update order.

        Raises:
            PageWriteError: On an unsafe path or a filesystem failure.
        """
        written: list[Path] = []
        for update in updates:
            path = self.resolve_update_path(update.file)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(update.content, encoding="utf-8")
            except OSError as e:
                raise PageWriteError(f"Could not write {path}: {e}", path=path) from e

            verb = "Created" if update.action == "create" else "Updated"
            logger.info(f"{verb} {update.file}: {update.reason}")
            written.append(path)
        return written
