"""Access policy primitives for cosense-mcp.

This module defines which projects the engine may mutate:
- RegexPattern / LiteralPattern: a compiled project pattern
- AccessPolicy: ordered deny and allow patterns, compiled once
- is_writable(): the deny-first access predicate

Pattern strings are regular expressions matched against the whole project
name. A string that does not compile as a regular expression is kept as a
literal and matched by exact equality instead.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegexPattern:
    """Project pattern backed by a compiled regular expression."""

    source: str
    regex: re.Pattern[str]

    def matches(self, project: str) -> bool:
        return self.regex.fullmatch(project) is not None


@dataclass(frozen=True)
class LiteralPattern:
    """Project pattern matched by exact string equality."""

    source: str

    def matches(self, project: str) -> bool:
        return project == self.source


Pattern = RegexPattern | LiteralPattern


def compile_pattern(source: str) -> Pattern:
    """Compile a pattern string, falling back to a literal on invalid regex.

    Args:
        source: Regular expression, or a plain project name.

    Returns:
        RegexPattern if source compiles, otherwise LiteralPattern.
    """
    try:
        return RegexPattern(source=source, regex=re.compile(source))
    except re.error as e:
        logger.debug("Pattern %r is not a valid regex (%s), matching literally", source, e)
        return LiteralPattern(source=source)


@dataclass(frozen=True)
class AccessPolicy:
    """Allow/deny rules deciding which projects may be mutated.

    Deny patterns always win: a project matching any deny pattern is never
    writable. An empty allow list makes every project read-only.

    Attributes:
        deny_patterns: Patterns that block a project, checked first.
        allow_patterns: Patterns that open a project for editing, in order.
    """

    deny_patterns: tuple[Pattern, ...] = field(default_factory=tuple)
    allow_patterns: tuple[Pattern, ...] = field(default_factory=tuple)

    @classmethod
    def from_patterns(
        cls,
        allow: list[str] | tuple[str, ...] = (),
        deny: list[str] | tuple[str, ...] = (),
    ) -> AccessPolicy:
        """Build a policy from pattern strings.

        Example:
            >>> policy = AccessPolicy.from_patterns(allow=["team-.*"], deny=["team-secret"])
            >>> is_writable("team-notes", policy)
            True
            >>> is_writable("team-secret", policy)
            False
        """
        return cls(
            deny_patterns=tuple(compile_pattern(p) for p in deny),
            allow_patterns=tuple(compile_pattern(p) for p in allow),
        )

    def describe(self) -> list[str]:
        """Return the allow pattern sources, for error messages."""
        return [p.source for p in self.allow_patterns]


def is_writable(project: str, policy: AccessPolicy) -> bool:
    """Check whether a project may be mutated under the given policy.

    Args:
        project: Project name to check.
        policy: Compiled access policy.

    Returns:
        False if any deny pattern matches, True if any allow pattern
        matches, False otherwise.
    """
    for pattern in policy.deny_patterns:
        if pattern.matches(project):
            logger.debug("Project %r blocked by deny pattern %r", project, pattern.source)
            return False

    for pattern in policy.allow_patterns:
        if pattern.matches(project):
            return True

    return False
