"""Core types for cosense-mcp.

This module defines the data structures shared between the mutation engine
and the page store: page content, commit results and mutation results.
Result dataclasses are frozen for immutability.
"""

from collections.abc import Callable
from dataclasses import dataclass

PageContent = list[str]
"""Ordered text lines of a page. The first line is the page title."""

Mutator = Callable[[list[str]], list[str]]
"""Function the page store applies to freshly fetched lines before writing."""


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a compare-and-swap write.

    Attributes:
        ok: True if the write was accepted.
        reason: Why the write was rejected (empty on success).
    """

    ok: bool
    reason: str = ""

    @classmethod
    def failed(cls, reason: str) -> "CommitResult":
        return cls(ok=False, reason=reason)


@dataclass(frozen=True)
class MutationResult:
    """Structured result returned by every engine entry point.

    Attributes:
        output: Human-readable success message.
        error: Human-readable failure message (empty on success).
        error_kind: Class name of the error that ended the request.
        attempts: Number of attempts made (0 if rejected before the loop).
        max_attempts: Attempt budget (retry limit + 1).
        lines_added: Added lines, when the edit reports a change summary.
        lines_removed: Removed lines, when the edit reports a change summary.
        dry_run: True if nothing was committed on purpose.
    """

    output: str = ""
    error: str = ""
    error_kind: str = ""
    attempts: int = 0
    max_attempts: int = 0
    lines_added: int | None = None
    lines_removed: int | None = None
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """Return True if the mutation succeeded (no error)."""
        return not self.error
