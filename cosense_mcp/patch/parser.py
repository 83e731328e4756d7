"""Parser for unified diff format.

This module provides functions to parse unified diff text into structured
PatchFile and Hunk objects, and to serialize them back to text.
"""

import logging
import re

from cosense_mcp.core.errors import PatchFormatError
from cosense_mcp.patch.types import ADD, CONTEXT, REMOVE, Hunk, PatchFile

logger = logging.getLogger(__name__)

# Pattern for hunk header: @@ -old_start[,old_count] +new_start[,new_count] @@ [context]
HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$"
)

# Pattern for file header in standard unified diff format
UNIFIED_OLD_RE = re.compile(r"^--- (.+?)(?:\t.*)?$")
UNIFIED_NEW_RE = re.compile(r"^\+\+\+ (.+?)(?:\t.*)?$")

# Pattern for git extended diff format
GIT_DIFF_RE = re.compile(r"^diff --git a/(.+) b/(.+)$")

NO_NEWLINE_MARKER = "\\ No newline at end of file"


def _strip_path_prefix(path: str) -> str:
    """Strip a/ or b/ prefix from path if present."""
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path


def _parse_hunk_header(line: str) -> Hunk | None:
    """Parse a hunk header line into a Hunk object.

    Args:
        line: Line starting with @@

    Returns:
        Hunk object with header values, or None if line is malformed.
    """
    match = HUNK_HEADER_RE.match(line)
    if not match:
        return None

    old_start = int(match.group(1))
    # Count defaults to 1 if omitted (e.g., @@ -1 +1,2 @@)
    old_count = int(match.group(2)) if match.group(2) else 1
    new_start = int(match.group(3))
    new_count = int(match.group(4)) if match.group(4) else 1
    context = match.group(5).strip()

    return Hunk(
        old_start=old_start,
        old_count=old_count,
        new_start=new_start,
        new_count=new_count,
        lines=[],
        context=context,
    )


def _is_file_header(lines: list[str], idx: int) -> bool:
    """Check whether lines[idx] starts a new file section."""
    line = lines[idx]
    if line.startswith("diff --git"):
        return True
    return line.startswith("---") and idx + 1 < len(lines) and lines[idx + 1].startswith("+++")


def _ends_hunk(lines: list[str], idx: int, hunk: Hunk) -> bool:
    """Check whether lines[idx] closes the hunk being read.

    Inside a hunk, '--- x' followed by '+++ y' may just as well be the
    removed line '-- x' and the added line '++ y'. The pair is a file header
    only once the hunk's declared counts are used up, or when a hunk header
    follows it directly.
    """
    line = lines[idx]
    if line.startswith("@@") or line.startswith("diff --git"):
        return True
    if not _is_file_header(lines, idx):
        return False

    old, new = hunk.compute_counts()
    if old >= hunk.old_count and new >= hunk.new_count:
        return True
    return idx + 2 < len(lines) and lines[idx + 2].startswith("@@")


def _split_lines(text: str) -> list[str]:
    """Split on "\\n" only, dropping the "\\r" of CRLF line endings.

    str.splitlines() also breaks on characters such as U+2028, which can
    occur inside a single page line.
    """
    # Trailing bare newlines would otherwise become blank context lines
    lines = text.rstrip("\r\n").split("\n")
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _parse_single_file(
    lines: list[str], start_idx: int, problems: list[str]
) -> tuple[PatchFile | None, int]:
    """Parse a single file's diff starting at given index.

    Args:
        lines: All lines of the diff
        start_idx: Index to start parsing from
        problems: Collects descriptions of malformed hunk headers and of
            hunk lines without a ' ', '+' or '-' prefix

    Returns:
        Tuple of (PatchFile or None, next_index)
    """
    idx = start_idx
    n = len(lines)

    old_path = ""
    new_path = ""

    # Handle git extended format: diff --git a/path b/path
    if lines[idx].startswith("diff --git"):
        match = GIT_DIFF_RE.match(lines[idx])
        if match:
            old_path = match.group(1)
            new_path = match.group(2)
        idx += 1

        # Skip git metadata lines (index, mode, etc.) until we hit --- or @@
        while idx < n and not (lines[idx].startswith("---") or lines[idx].startswith("@@")):
            idx += 1

    if idx < n and lines[idx].startswith("---"):
        match = UNIFIED_OLD_RE.match(lines[idx])
        if match:
            old_path = _strip_path_prefix(match.group(1))
        idx += 1

    if idx < n and lines[idx].startswith("+++"):
        match = UNIFIED_NEW_RE.match(lines[idx])
        if match:
            new_path = _strip_path_prefix(match.group(1))
        idx += 1

    # If we have no paths, this isn't a valid file section
    if not old_path and not new_path:
        return None, start_idx + 1

    # Pages have no /dev/null side; keep whichever name is real
    if old_path == "/dev/null":
        old_path = new_path
    if new_path == "/dev/null":
        new_path = old_path

    patch_file = PatchFile(old_path=old_path, new_path=new_path, hunks=[])

    while idx < n:
        line = lines[idx]

        if _is_file_header(lines, idx):
            break

        if not line.startswith("@@"):
            idx += 1
            continue

        hunk = _parse_hunk_header(line)
        idx += 1
        if hunk is None:
            problems.append(f"malformed hunk header {line!r}")
            continue

        while idx < n and not _ends_hunk(lines, idx, hunk):
            line = lines[idx]
            idx += 1

            if line.startswith(NO_NEWLINE_MARKER):
                continue

            if line and line[0] in (CONTEXT, REMOVE, ADD):
                hunk.lines.append((line[0], line[1:]))
            elif line == "":
                # Blank context line written without its space prefix
                hunk.lines.append((CONTEXT, ""))
            else:
                problems.append(
                    f"hunk line {line!r} has no ' ', '+' or '-' prefix "
                    f"(context lines start with a space)"
                )

        if hunk.compute_counts() != (hunk.old_count, hunk.new_count):
            logger.debug(
                "Hunk at line %d: header claims -%d,+%d but lines give -%d,+%d",
                hunk.old_start,
                hunk.old_count,
                hunk.new_count,
                *hunk.compute_counts(),
            )
        patch_file.hunks.append(hunk)

    return patch_file, idx


def _parse(text: str, problems: list[str]) -> list[PatchFile]:
    lines = _split_lines(text)
    result: list[PatchFile] = []
    idx = 0

    while idx < len(lines):
        line = lines[idx]
        if not line or not (line.startswith("diff --git") or line.startswith("---")):
            idx += 1
            continue

        patch_file, idx = _parse_single_file(lines, idx, problems)
        if patch_file is not None and patch_file.hunks:
            result.append(patch_file)

    return result


def parse_unified_diff(text: str) -> list[PatchFile]:
    """Parse unified diff text into structured PatchFile objects.

    Handles:
    - Standard unified diff format (--- a/path, +++ b/path, @@ ... @@)
    - Git extended format (diff --git a/path b/path)
    - Context lines (space prefix), removals (-), additions (+)
    - '\\ No newline at end of file' marker

    Malformed hunk headers and hunk lines without a prefix are skipped.

    Args:
        text: Unified diff text to parse

    Returns:
        List of PatchFile objects, one per file section that has hunks.
        Returns empty list if text cannot be parsed as a valid diff.

    Example:
        >>> diff_text = '''
        ... --- a/Title
        ... +++ b/Title
        ... @@ -1,3 +1,3 @@
        ...  Title
        ... -removed
        ... +added
        ...  more context
        ... '''
        >>> files = parse_unified_diff(diff_text)
        >>> len(files)
        1
        >>> files[0].path
        'Title'
    """
    if not text or not text.strip():
        return []
    return _parse(text, [])


def parse_page_patch(text: str) -> PatchFile:
    """Parse a unified diff that must describe exactly one page.

    Args:
        text: Unified diff text

    Returns:
        The single PatchFile in the diff.

    Raises:
        PatchFormatError: If the text is empty, has no file section with
            hunks, has more than one file section, contains a malformed hunk
            header or an unprefixed hunk line, or contains a hunk without
            lines.
    """
    if not text or not text.strip():
        raise PatchFormatError("patch text is empty")

    problems: list[str] = []
    files = _parse(text, problems)

    if problems:
        raise PatchFormatError(problems[0])
    if not files:
        raise PatchFormatError(
            "no file section found (expected '---' / '+++' headers followed by '@@' hunks)"
        )
    if len(files) > 1:
        names = ", ".join(pf.path for pf in files)
        raise PatchFormatError(
            f"patch contains {len(files)} file sections ({names}); "
            f"only one page can be edited per call"
        )

    patch = files[0]
    for i, hunk in enumerate(patch.hunks):
        if not hunk.lines:
            raise PatchFormatError(f"hunk {i + 1} has no lines")

    logger.debug("Parsed patch for %r with %d hunk(s)", patch.path, len(patch.hunks))
    return patch


def format_unified_diff(patch: PatchFile) -> str:
    """Serialize a PatchFile back to unified diff text.

    Parsing the returned text yields hunks with the same anchors, tags and
    line order.
    """
    out = [f"--- a/{patch.old_path}", f"+++ b/{patch.new_path}"]
    for hunk in patch.hunks:
        header = f"@@ -{hunk.old_start},{hunk.old_count} +{hunk.new_start},{hunk.new_count} @@"
        if hunk.context:
            header += f" {hunk.context}"
        out.append(header)
        out.extend(prefix + content for prefix, content in hunk.lines)
    return "\n".join(out) + "\n"
