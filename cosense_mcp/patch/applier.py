"""Applier for unified diff patches.

This module applies a parsed page patch to the current lines of a page.
Every hunk must be located (at its anchor or within a bounded search window
around it) or nothing is applied. When a hunk cannot be located the result
carries diagnostics about context lines missing from the page.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from cosense_mcp.patch.types import ADD, CONTEXT, REMOVE, Hunk, PatchFile

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_WINDOW = 50


class ApplyMode(Enum):
    """Strictness level for applying patches."""

    STRICT = "strict"  # Exact context match required
    TOLERANT = "tolerant"  # Allow trailing whitespace differences


@dataclass
class ApplyResult:
    """Result of applying a patch.

    Attributes:
        success: True if all hunks applied successfully
        new_lines: The patched lines (a copy of the original if failed)
        lines_added: Number of '+' lines across all hunks
        lines_removed: Number of '-' lines across all hunks
        applied_hunks: Indices of successfully applied hunks
        failed_hunks: List of (index, reason) for failed hunks
        diagnostics: Context lines missing from the page (on failure)
        warnings: Non-critical issues encountered during application
    """

    success: bool
    new_lines: list[str]
    lines_added: int = 0
    lines_removed: int = 0
    applied_hunks: list[int] = field(default_factory=list)
    failed_hunks: list[tuple[int, str]] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _normalize_line(line: str, mode: ApplyMode) -> str:
    if mode == ApplyMode.STRICT:
        return line
    return line.rstrip()


def _verify_match(
    lines: list[str], expected: list[str], pos: int, mode: ApplyMode
) -> bool:
    """Verify that lines at position match expected content."""
    if pos < 0 or pos + len(expected) > len(lines):
        return False

    for i, exp_line in enumerate(expected):
        if _normalize_line(lines[pos + i], mode) != _normalize_line(exp_line, mode):
            return False

    return True


def _candidate_positions(target: int, window: int) -> list[int]:
    """Positions to try, nearest to target first."""
    positions = [target]
    for distance in range(1, window + 1):
        positions.append(target + distance)
        positions.append(target - distance)
    return positions


def _locate_hunk(
    lines: list[str],
    hunk: Hunk,
    offset: int,
    min_pos: int,
    mode: ApplyMode,
    search_window: int,
) -> tuple[int | None, int]:
    """Find where a hunk applies.

    Args:
        lines: Current page lines (with earlier hunks applied)
        hunk: Hunk to locate
        offset: Net line offset introduced by earlier hunks
        min_pos: First position not consumed by earlier hunks
        mode: Matching strictness
        search_window: How far from the anchor to search

    Returns:
        Tuple of (position or None, expected position)
    """
    expected = hunk.source_lines()

    if not expected:
        # Pure insertion: "@@ -N,0 ..." inserts after line N
        target = min(max(hunk.old_start + offset, min_pos), len(lines))
        return target, target

    target = hunk.old_start - 1 + offset
    for pos in _candidate_positions(target, search_window):
        if pos < min_pos:
            continue
        if _verify_match(lines, expected, pos, mode):
            return pos, target
    return None, target


def _perform_replacement(
    lines: list[str], hunk: Hunk, pos: int
) -> tuple[list[str], int]:
    """Perform the actual line replacement for a hunk.

    Returns:
        Tuple of (new_lines, length of the new section)
    """
    new_section: list[str] = []
    page_idx = pos

    for prefix, content in hunk.lines:
        if prefix == CONTEXT:
            # Keep the page's own text (preserves whitespace in tolerant mode)
            new_section.append(lines[page_idx])
            page_idx += 1
        elif prefix == REMOVE:
            page_idx += 1
        elif prefix == ADD:
            new_section.append(content)

    return lines[:pos] + new_section + lines[page_idx:], len(new_section)


def find_missing_context(
    lines: list[str], patch: PatchFile, mode: ApplyMode = ApplyMode.STRICT
) -> list[str]:
    """Report every context line of the patch that is absent from the page.

    The check is page-wide: a context line counts as present if it occurs
    anywhere in the page, not necessarily at the hunk's location.

    Returns:
        One 'Expected context line not found: "<text>"' message per missing
        context line, in patch order.
    """
    present = {_normalize_line(line, mode) for line in lines}
    diagnostics: list[str] = []
    for hunk in patch.hunks:
        for content in hunk.context_lines():
            if _normalize_line(content, mode) not in present:
                diagnostics.append(f'Expected context line not found: "{content}"')
    return diagnostics


def apply_patch(
    lines: list[str],
    patch: PatchFile,
    mode: ApplyMode = ApplyMode.STRICT,
    search_window: int = DEFAULT_SEARCH_WINDOW,
) -> ApplyResult:
    """Apply a patch to page lines.

    Applies all hunks in order. If any hunk cannot be located, the original
    lines are returned unchanged (atomic rollback) together with diagnostics.

    Args:
        lines: Current page lines
        patch: Patch to apply
        mode: Matching strictness (STRICT, TOLERANT)
        search_window: Maximum distance (in lines) from a hunk's anchor at
            which it may still be applied

    Returns:
        ApplyResult with new lines if successful, original lines if failed

    Example:
        >>> from cosense_mcp.patch.types import PatchFile, Hunk
        >>> hunk_lines = [(" ", "Title"), ("-", "line1"), ("+", "line1 edited")]
        >>> patch = PatchFile("Title", "Title", [Hunk(1, 2, 1, 2, hunk_lines)])
        >>> result = apply_patch(["Title", "line1", "line2"], patch)
        >>> result.new_lines
        ['Title', 'line1 edited', 'line2']
    """
    lines_added = patch.count_additions()
    lines_removed = patch.count_removals()

    applied_hunks: list[int] = []
    warnings: list[str] = []

    current_lines = list(lines)
    offset = 0
    min_pos = 0

    for i, hunk in enumerate(patch.hunks):
        pos, target = _locate_hunk(current_lines, hunk, offset, min_pos, mode, search_window)

        if pos is None:
            reason = (
                f"context mismatch at line {target + 1} "
                f"(searched {search_window} line(s) around it)"
            )
            logger.debug("Hunk %d failed: %s", i + 1, reason)
            return ApplyResult(
                success=False,
                new_lines=list(lines),
                lines_added=lines_added,
                lines_removed=lines_removed,
                applied_hunks=applied_hunks,
                failed_hunks=[(i, reason)],
                diagnostics=find_missing_context(lines, patch, mode),
                warnings=warnings,
            )

        if pos != target and hunk.source_lines():
            warnings.append(f"Hunk {i + 1} applied at offset {pos - target:+d}")

        current_lines, section_len = _perform_replacement(current_lines, hunk, pos)
        offset += hunk.count_additions() - hunk.count_removals() + (pos - target)
        min_pos = pos + section_len
        applied_hunks.append(i)

    return ApplyResult(
        success=True,
        new_lines=current_lines,
        lines_added=lines_added,
        lines_removed=lines_removed,
        applied_hunks=applied_hunks,
        warnings=warnings,
    )
