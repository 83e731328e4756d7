"""Edit strategies: turn current page lines into candidate new lines.

apply_strategy() is a pure function of the request and the lines fetched
for the current attempt, so the retry controller can run it again on fresh
content without any state carried over from a failed attempt.
"""

from cosense_mcp.core.errors import ConflictError
from cosense_mcp.mutation.guard import guard_title
from cosense_mcp.mutation.types import (
    EditOutcome,
    InsertAfterAnchor,
    MutationRequest,
    Overwrite,
    UnifiedDiff,
)
from cosense_mcp.patch.applier import apply_patch


def insert_after_anchor(lines: list[str], target_line_text: str, text: str) -> list[str]:
    """Insert text after the first line equal to target_line_text.

    Appends to the end when no line matches.
    """
    try:
        index = lines.index(target_line_text) + 1
    except ValueError:
        index = len(lines)
    return lines[:index] + text.split("\n") + lines[index:]


def _apply_diff(edit: UnifiedDiff, current: list[str]) -> EditOutcome:
    result = apply_patch(current, edit.patch, mode=edit.mode, search_window=edit.search_window)
    if not result.success:
        raise ConflictError(result.diagnostics, result.failed_hunks)
    return EditOutcome(
        lines=result.new_lines,
        lines_added=result.lines_added,
        lines_removed=result.lines_removed,
        warnings=result.warnings,
    )


def apply_strategy(request: MutationRequest, current: list[str]) -> EditOutcome:
    """Compute the candidate content for one attempt.

    Args:
        request: The mutation request.
        current: Page lines fetched for this attempt.

    Returns:
        EditOutcome with the lines to commit.

    Raises:
        ConflictError: If a unified diff cannot be located in current.
        TitleChangeRejected: If an overwrite or diff renames the page
            without allow_title_change.
    """
    edit = request.edit

    if isinstance(edit, InsertAfterAnchor):
        inserted = edit.text.split("\n")
        return EditOutcome(
            lines=insert_after_anchor(current, edit.target_line_text, edit.text),
            lines_added=len(inserted),
            lines_removed=0,
        )

    if isinstance(edit, Overwrite):
        outcome = EditOutcome(lines=edit.new_content.split("\n"))
    elif isinstance(edit, UnifiedDiff):
        outcome = _apply_diff(edit, current)
    else:
        raise TypeError(f"Unknown edit kind: {type(edit).__name__}")

    guard_title(outcome.lines, request.page_title, request.allow_title_change)
    return outcome
