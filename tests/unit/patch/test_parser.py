"""Unit tests for cosense_mcp.patch.parser module."""

import pytest

from cosense_mcp.core.errors import PatchFormatError
from cosense_mcp.patch import format_unified_diff, parse_page_patch, parse_unified_diff
from cosense_mcp.patch.types import Hunk, PatchFile


class TestParseUnifiedDiff:
    """Tests for parse_unified_diff function."""

    def test_parse_simple_hunk(self) -> None:
        """Test parsing a single hunk with add/remove."""
        diff_text = """\
--- a/Title
+++ b/Title
@@ -1,4 +1,4 @@
 Title
-old line
+new line
 line3
 line4
"""
        files = parse_unified_diff(diff_text)

        assert len(files) == 1
        pf = files[0]
        assert pf.old_path == "Title"
        assert pf.new_path == "Title"
        assert len(pf.hunks) == 1

        hunk = pf.hunks[0]
        assert hunk.old_start == 1
        assert hunk.old_count == 4
        assert hunk.new_start == 1
        assert hunk.new_count == 4

        assert hunk.lines == [
            (" ", "Title"),
            ("-", "old line"),
            ("+", "new line"),
            (" ", "line3"),
            (" ", "line4"),
        ]

    def test_parse_multiple_hunks(self) -> None:
        """Test parsing multiple hunks for the same page."""
        diff_text = """\
--- a/Title
+++ b/Title
@@ -1,3 +1,4 @@
 Title
+added at top
 line2
 line3
@@ -10,3 +11,2 @@
 line10
-removed
 line11
"""
        files = parse_unified_diff(diff_text)

        assert len(files) == 1
        assert len(files[0].hunks) == 2
        assert files[0].hunks[1].old_start == 10
        assert files[0].hunks[1].lines[1] == ("-", "removed")

    def test_parse_git_format(self) -> None:
        """Test parsing git extended format with 'diff --git a/...' header."""
        diff_text = """\
diff --git a/My Page b/My Page
index abc1234..def5678 100644
--- a/My Page
+++ b/My Page
@@ -5,2 +5,3 @@ Section
 context
+new line
 more
"""
        files = parse_unified_diff(diff_text)

        assert len(files) == 1
        pf = files[0]
        assert pf.path == "My Page"
        assert pf.hunks[0].context == "Section"

    def test_no_newline_at_eof(self) -> None:
        """Test that the '\\ No newline at end of file' marker is skipped."""
        diff_text = """\
--- a/Title
+++ b/Title
@@ -1,2 +1,2 @@
 Title
-old last line
\\ No newline at end of file
+new last line
\\ No newline at end of file
"""
        files = parse_unified_diff(diff_text)

        assert files[0].hunks[0].lines == [
            (" ", "Title"),
            ("-", "old last line"),
            ("+", "new last line"),
        ]

    def test_blank_line_without_prefix_is_blank_context(self) -> None:
        """Test that a bare empty line inside a hunk becomes blank context."""
        diff_text = "--- a/T\n+++ b/T\n@@ -1,3 +1,3 @@\n T\n\n-x\n+y\n"

        files = parse_unified_diff(diff_text)

        assert files[0].hunks[0].lines == [(" ", "T"), (" ", ""), ("-", "x"), ("+", "y")]

    def test_trailing_blank_lines_are_not_context(self) -> None:
        """Test that newlines after the last hunk are not parsed as context."""
        diff_text = "--- a/T\n+++ b/T\n@@ -1,1 +1,1 @@\n-x\n+y\n\n\n"

        files = parse_unified_diff(diff_text)

        assert files[0].hunks[0].lines == [("-", "x"), ("+", "y")]

    def test_parse_count_defaults_to_one(self) -> None:
        """Test that omitted counts in the hunk header default to 1."""
        diff_text = """\
--- a/T
+++ b/T
@@ -3 +3 @@
-old
+new
"""
        hunk = parse_unified_diff(diff_text)[0].hunks[0]

        assert hunk.old_count == 1
        assert hunk.new_count == 1

    def test_parse_empty_input(self) -> None:
        """Test that empty input yields no files."""
        assert parse_unified_diff("") == []
        assert parse_unified_diff("   \n") == []

    def test_malformed_header_skipped(self) -> None:
        """Test that the lenient parser skips malformed @@ header lines."""
        diff_text = """\
--- a/T
+++ b/T
@@ invalid header @@
 some content
"""
        assert parse_unified_diff(diff_text) == []


class TestParsePagePatch:
    """Tests for parse_page_patch (exactly one page per patch)."""

    def test_single_section(self) -> None:
        """Test that a single file section is returned as a PatchFile."""
        patch = parse_page_patch("--- a/T\n+++ b/T\n@@ -1,1 +1,1 @@\n-x\n+y\n")

        assert isinstance(patch, PatchFile)
        assert patch.path == "T"

    def test_zero_sections(self) -> None:
        """Test that text without file headers is rejected."""
        with pytest.raises(PatchFormatError) as exc_info:
            parse_page_patch("@@ -1,1 +1,1 @@\n-x\n+y\n")

        assert "no file section" in exc_info.value.message
        # The message teaches the expected format
        assert "--- a/Page title" in exc_info.value.message

    def test_empty_text(self) -> None:
        """Test that blank text is rejected."""
        with pytest.raises(PatchFormatError, match="empty"):
            parse_page_patch("  ")

    def test_multiple_sections(self) -> None:
        """Test that multi-page patches are rejected."""
        diff_text = """\
--- a/First
+++ b/First
@@ -1,1 +1,1 @@
-a
+b
--- a/Second
+++ b/Second
@@ -1,1 +1,1 @@
-c
+d
"""
        with pytest.raises(PatchFormatError) as exc_info:
            parse_page_patch(diff_text)

        assert "2 file sections" in exc_info.value.message
        assert "First, Second" in exc_info.value.message

    def test_malformed_hunk_header(self) -> None:
        """Test that a malformed hunk header is a format error."""
        diff_text = """\
--- a/T
+++ b/T
@@ -1,1 +1,1 @@
-a
+b
@@ broken @@
 x
"""
        with pytest.raises(PatchFormatError, match="malformed hunk header"):
            parse_page_patch(diff_text)

    def test_hunk_without_lines(self) -> None:
        """Test that an empty hunk is a format error."""
        diff_text = """\
--- a/T
+++ b/T
@@ -1,1 +1,1 @@
@@ -5,1 +5,1 @@
-a
+b
"""
        with pytest.raises(PatchFormatError, match="hunk 1 has no lines"):
            parse_page_patch(diff_text)

    def test_unprefixed_hunk_line(self) -> None:
        """Test that a context line missing its leading space is a format error."""
        diff_text = """\
--- a/Title
+++ b/Title
@@ -1,3 +1,3 @@
 Title
line1
-line2
+x
"""
        with pytest.raises(PatchFormatError) as exc_info:
            parse_page_patch(diff_text)

        assert "'line1'" in exc_info.value.message
        assert "prefix" in exc_info.value.message

    def test_line_separator_inside_page_line(self) -> None:
        """Test that only newlines split the patch text."""
        patch = parse_page_patch("--- a/T\n+++ b/T\n@@ -1,2 +1,2 @@\n T\n-a\u2028b\n+c\n")

        assert patch.hunks[0].lines == [(" ", "T"), ("-", "a\u2028b"), ("+", "c")]

    def test_crlf_line_endings(self) -> None:
        """Test that CRLF patches parse like LF patches."""
        patch = parse_page_patch("--- a/T\r\n+++ b/T\r\n@@ -1,1 +1,1 @@\r\n-x\r\n+y\r\n")

        assert patch.hunks[0].lines == [("-", "x"), ("+", "y")]

    def test_removed_and_added_lines_that_look_like_file_headers(self) -> None:
        """Test that '--- '/'+++ ' inside an unfinished hunk are -/+ lines."""
        diff_text = """\
--- a/Title
+++ b/Title
@@ -1,3 +1,3 @@
 Title
--- note
+++ new
 x
"""
        patch = parse_page_patch(diff_text)

        assert patch.hunks[0].lines == [
            (" ", "Title"),
            ("-", "-- note"),
            ("+", "++ new"),
            (" ", "x"),
        ]

    def test_file_header_followed_by_hunk_still_splits(self) -> None:
        """Test that a header pair followed by '@@' starts a new section."""
        diff_text = """\
--- a/First
+++ b/First
@@ -1,5 +1,5 @@
-a
+b
--- a/Second
+++ b/Second
@@ -1,1 +1,1 @@
-c
+d
"""
        with pytest.raises(PatchFormatError, match="2 file sections"):
            parse_page_patch(diff_text)

    def test_header_counts_may_be_wrong(self) -> None:
        """Test that header counts disagreeing with the lines are tolerated."""
        patch = parse_page_patch("--- a/T\n+++ b/T\n@@ -1,9 +1,9 @@\n T\n-x\n+y\n")

        assert patch.hunks[0].compute_counts() == (2, 2)


class TestFormatUnifiedDiff:
    """Tests for re-serializing a parsed patch."""

    def test_structural_round_trip(self) -> None:
        """Test that parse(format(patch)) preserves anchors, tags and order."""
        diff_text = """\
--- a/Title
+++ b/Title
@@ -1,4 +1,5 @@ intro
 Title
-line1
+line1 edited
+extra
 line2

@@ -20,2 +21,1 @@
 keep
-drop
"""
        original = parse_page_patch(diff_text)

        reparsed = parse_page_patch(format_unified_diff(original))

        assert reparsed.path == original.path
        assert len(reparsed.hunks) == len(original.hunks)
        for before, after in zip(original.hunks, reparsed.hunks):
            assert after.lines == before.lines
            assert (after.old_start, after.old_count) == (before.old_start, before.old_count)
            assert after.context == before.context

    def test_format_output(self) -> None:
        """Test the exact text produced for a simple patch."""
        patch = PatchFile(
            old_path="T",
            new_path="T",
            hunks=[Hunk(1, 2, 1, 2, [(" ", "T"), ("-", "a"), ("+", "b")])],
        )

        assert format_unified_diff(patch) == "--- a/T\n+++ b/T\n@@ -1,2 +1,2 @@\n T\n-a\n+b\n"


class TestHunkMethods:
    """Tests for Hunk helper methods."""

    def test_counts(self) -> None:
        """Test addition/removal/context accounting."""
        hunk = Hunk(
            old_start=1,
            old_count=3,
            new_start=1,
            new_count=3,
            lines=[(" ", "a"), ("-", "b"), ("+", "c"), ("+", "d"), (" ", "e")],
        )

        assert hunk.count_additions() == 2
        assert hunk.count_removals() == 1
        assert hunk.context_lines() == ["a", "e"]
        assert hunk.source_lines() == ["a", "b", "e"]
        assert hunk.compute_counts() == (3, 4)
