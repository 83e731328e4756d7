"""Unit tests for cosense_mcp.core.policy module."""

import pytest

from cosense_mcp.core.policy import (
    AccessPolicy,
    LiteralPattern,
    RegexPattern,
    compile_pattern,
    is_writable,
)


class TestCompilePattern:
    """Tests for regex-or-literal pattern compilation."""

    def test_valid_regex(self) -> None:
        """A valid regular expression compiles to a RegexPattern."""
        pattern = compile_pattern("team-.*")

        assert isinstance(pattern, RegexPattern)
        assert pattern.matches("team-notes")
        assert not pattern.matches("other")

    def test_regex_must_match_whole_name(self) -> None:
        """A plain name does not match longer project names."""
        pattern = compile_pattern("docs")

        assert pattern.matches("docs")
        assert not pattern.matches("docs-private")
        assert not pattern.matches("my-docs")

    def test_invalid_regex_falls_back_to_literal(self) -> None:
        """An invalid regular expression is matched literally."""
        pattern = compile_pattern("weird[project")

        assert isinstance(pattern, LiteralPattern)
        assert pattern.matches("weird[project")
        assert not pattern.matches("weird")


class TestIsWritable:
    """Tests for the deny-first access predicate."""

    def test_allow_match(self) -> None:
        policy = AccessPolicy.from_patterns(allow=["notes"])

        assert is_writable("notes", policy) is True

    def test_no_allow_match(self) -> None:
        policy = AccessPolicy.from_patterns(allow=["notes"])

        assert is_writable("other", policy) is False

    def test_empty_allow_list_denies_everything(self) -> None:
        """Editability is opt-in."""
        policy = AccessPolicy.from_patterns(allow=[], deny=[])

        assert is_writable("notes", policy) is False

    @pytest.mark.parametrize(
        "deny",
        [
            ["team-secret"],
            ["team-sec.*"],
            ["nothing", "team-secret"],
        ],
    )
    def test_deny_wins_over_allow(self, deny: list[str]) -> None:
        """A project matching any deny pattern is never writable."""
        policy = AccessPolicy.from_patterns(allow=["team-.*", "team-secret"], deny=deny)

        assert is_writable("team-secret", policy) is False
        assert is_writable("team-notes", policy) is True

    def test_literal_deny_pattern(self) -> None:
        """Deny patterns use the literal fallback too."""
        policy = AccessPolicy.from_patterns(allow=[".*"], deny=["bad(project"])

        assert is_writable("bad(project", policy) is False
        assert is_writable("good", policy) is True

    def test_literal_allow_pattern(self) -> None:
        policy = AccessPolicy.from_patterns(allow=["a+[b"])

        assert is_writable("a+[b", policy) is True
        assert is_writable("aab", policy) is False

    def test_describe_lists_allow_sources(self) -> None:
        policy = AccessPolicy.from_patterns(allow=["one", "two-.*"], deny=["x"])

        assert policy.describe() == ["one", "two-.*"]

    def test_patterns_compiled_once(self) -> None:
        """from_patterns compiles up front; the policy holds compiled patterns."""
        policy = AccessPolicy.from_patterns(allow=["a.*"], deny=["b"])

        assert all(isinstance(p, RegexPattern) for p in policy.allow_patterns)
        assert all(isinstance(p, RegexPattern) for p in policy.deny_patterns)
