"""Types for unified diff patch representation.

This module provides dataclasses for representing a unified diff against a
single page in a structured format suitable for parsing, serialization and
application.
"""

from dataclasses import dataclass, field

CONTEXT = " "
ADD = "+"
REMOVE = "-"


@dataclass
class Hunk:
    """A single hunk in a unified diff.

    A hunk represents a contiguous section of changes in a page,
    including context lines before and after the actual modifications.

    Attributes:
        old_start: Line number in original page (1-indexed)
        old_count: Number of lines from original (context + removed)
        new_start: Line number in new version (1-indexed)
        new_count: Number of lines in new version (context + added)
        lines: List of (prefix, content) tuples where prefix is:
            ' ' = context line (unchanged)
            '-' = line removed from original
            '+' = line added in new version
        context: Optional section text after the closing @@
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[tuple[str, str]] = field(default_factory=list)
    context: str = ""

    def count_removals(self) -> int:
        """Count lines being removed (- prefix)."""
        return sum(1 for prefix, _ in self.lines if prefix == REMOVE)

    def count_additions(self) -> int:
        """Count lines being added (+ prefix)."""
        return sum(1 for prefix, _ in self.lines if prefix == ADD)

    def context_lines(self) -> list[str]:
        """Text of the context lines, in hunk order."""
        return [content for prefix, content in self.lines if prefix == CONTEXT]

    def source_lines(self) -> list[str]:
        """Text the hunk expects in the original page (context + removals)."""
        return [content for prefix, content in self.lines if prefix != ADD]

    def compute_counts(self) -> tuple[int, int]:
        """Compute actual old_count and new_count from lines.

        Returns:
            Tuple of (old_count, new_count) based on actual line prefixes.
        """
        removals = self.count_removals()
        additions = self.count_additions()
        context = len(self.lines) - removals - additions
        return (context + removals, context + additions)


@dataclass
class PatchFile:
    """A patch for a single page.

    Attributes:
        old_path: Name from the --- line, without a/ prefix
        new_path: Name from the +++ line, without b/ prefix
        hunks: List of Hunk objects representing changes
    """

    old_path: str
    new_path: str
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.new_path or self.old_path

    def count_additions(self) -> int:
        return sum(h.count_additions() for h in self.hunks)

    def count_removals(self) -> int:
        return sum(h.count_removals() for h in self.hunks)
