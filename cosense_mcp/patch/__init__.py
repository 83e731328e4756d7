"""Patch module for parsing, serializing, and applying unified diffs to pages.

Main components:
- Types: Hunk, PatchFile - structured representation of a page diff
- Parser: parse_page_patch() - convert diff text for exactly one page
- Applier: apply_patch() - apply a patch to page lines, with diagnostics

Example usage:
    >>> from cosense_mcp.patch import parse_page_patch, apply_patch
    >>> diff_text = '''
    ... --- a/Title
    ... +++ b/Title
    ... @@ -1,3 +1,3 @@
    ...  Title
    ... -line1
    ... +line1 edited
    ...  line2
    ... '''
    >>> patch = parse_page_patch(diff_text)
    >>> result = apply_patch(["Title", "line1", "line2"], patch)
    >>> result.success
    True
    >>> result.new_lines
    ['Title', 'line1 edited', 'line2']
"""

from cosense_mcp.patch.applier import (
    DEFAULT_SEARCH_WINDOW,
    ApplyMode,
    ApplyResult,
    apply_patch,
    find_missing_context,
)
from cosense_mcp.patch.parser import format_unified_diff, parse_page_patch, parse_unified_diff
from cosense_mcp.patch.types import Hunk, PatchFile

__all__ = [
    # Types
    "Hunk",
    "PatchFile",
    # Parser
    "parse_unified_diff",
    "parse_page_patch",
    "format_unified_diff",
    # Applier
    "DEFAULT_SEARCH_WINDOW",
    "ApplyMode",
    "ApplyResult",
    "apply_patch",
    "find_missing_context",
]
