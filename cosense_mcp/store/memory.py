"""In-process page store with compare-and-swap semantics.

InMemoryPageStore implements the PageStore protocol against a dict of
versioned pages. A commit reads the page and its version, runs the mutator,
yields to the event loop, and writes only if the version is unchanged. It
is a local stand-in for the remote wiki and the double used by the tests.
"""

import asyncio
import logging
from dataclasses import dataclass

from cosense_mcp.core.errors import PageNotFoundError
from cosense_mcp.core.types import CommitResult, Mutator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredPage:
    """A page snapshot and its version (bumped on every write)."""

    lines: tuple[str, ...]
    version: int


class InMemoryPageStore:
    """Versioned page store keyed by (project, title).

    Example:
        store = InMemoryPageStore()
        store.put("notes", "Title", ["Title", "line1"])
        store.fail_next_commits(2)  # next two commits lose their race
    """

    def __init__(self) -> None:
        self._pages: dict[tuple[str, str], StoredPage] = {}
        self._forced_failures = 0
        self.fetch_calls = 0
        self.commit_calls = 0

    def put(self, project: str, title: str, lines: list[str]) -> None:
        """Create or replace a page, bumping its version."""
        key = (project, title)
        previous = self._pages.get(key)
        version = previous.version + 1 if previous else 1
        self._pages[key] = StoredPage(lines=tuple(lines), version=version)

    def get(self, project: str, title: str) -> list[str] | None:
        """Return a copy of a page's lines, or None if it does not exist."""
        page = self._pages.get((project, title))
        return list(page.lines) if page else None

    def version(self, project: str, title: str) -> int:
        """Current version of a page (0 if it does not exist)."""
        page = self._pages.get((project, title))
        return page.version if page else 0

    def fail_next_commits(self, count: int) -> None:
        """Make the next count commits report a lost race."""
        self._forced_failures = count

    async def fetch(self, project: str, title: str) -> list[str]:
        self.fetch_calls += 1
        lines = self.get(project, title)
        if lines is None:
            raise PageNotFoundError(project, title)
        return lines

    async def commit(self, project: str, title: str, mutator: Mutator) -> CommitResult:
        """Apply mutator to the current page and write if nobody wrote meanwhile.

        A missing page is treated as empty and created by the write.
        """
        self.commit_calls += 1
        base_version = self.version(project, title)
        new_lines = mutator(self.get(project, title) or [])

        # Let concurrent writers interleave between read and write
        await asyncio.sleep(0)

        if self._forced_failures > 0:
            self._forced_failures -= 1
            return CommitResult.failed("Page was updated by someone else")

        current_version = self.version(project, title)
        if current_version != base_version:
            logger.debug(
                "Commit to %s/%s lost race (version %d -> %d)",
                project,
                title,
                base_version,
                current_version,
            )
            return CommitResult.failed(
                f"Page was updated by someone else (version {base_version} -> {current_version})"
            )

        self._pages[(project, title)] = StoredPage(
            lines=tuple(new_lines), version=current_version + 1
        )
        return CommitResult(ok=True)
