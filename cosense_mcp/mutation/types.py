"""Request and state types for page mutations.

A MutationRequest describes one edit to one page. The edit is one of three
kinds, each a small frozen dataclass; apply_strategy() dispatches on them.
Everything here lives for a single request and is discarded afterwards.
"""

from dataclasses import dataclass, field

from cosense_mcp.patch.applier import DEFAULT_SEARCH_WINDOW, ApplyMode
from cosense_mcp.patch.types import PatchFile


@dataclass(frozen=True)
class InsertAfterAnchor:
    """Insert lines after the first line equal to target_line_text.

    If no line matches, the lines are appended to the end of the page.
    """

    target_line_text: str
    text: str


@dataclass(frozen=True)
class Overwrite:
    """Replace the whole page with new_content (newline-separated)."""

    new_content: str


@dataclass(frozen=True)
class UnifiedDiff:
    """Apply an already parsed single-page patch."""

    patch: PatchFile
    mode: ApplyMode = ApplyMode.STRICT
    search_window: int = DEFAULT_SEARCH_WINDOW


Edit = InsertAfterAnchor | Overwrite | UnifiedDiff


@dataclass(frozen=True)
class MutationRequest:
    """One edit request against one page.

    Attributes:
        project: Project containing the page.
        page_title: Title of the page (expected first line).
        edit: What to do to the page.
        allow_title_change: Permit the first line to change.
        retry_limit: Retries after the first attempt (0 = single attempt).
    """

    project: str
    page_title: str
    edit: Edit
    allow_title_change: bool = False
    retry_limit: int = 0


@dataclass(frozen=True)
class EditOutcome:
    """Candidate content produced by an edit strategy.

    Attributes:
        lines: New page lines to commit.
        lines_added: Added line count, if the edit kind reports one.
        lines_removed: Removed line count, if the edit kind reports one.
        warnings: Non-critical notes (e.g., hunk applied at an offset).
    """

    lines: list[str]
    lines_added: int | None = None
    lines_removed: int | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class RetryState:
    """Attempt bookkeeping for a single mutate_with_retry() call."""

    max_attempts: int
    attempts: int = 0
    last_error: str | None = None
    last_error_kind: str = ""

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts

    def record_failure(self, message: str, kind: str) -> None:
        self.last_error = message
        self.last_error_kind = kind
