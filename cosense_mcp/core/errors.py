"""Typed exception hierarchy for cosense-mcp."""

from __future__ import annotations


class CosenseError(Exception):
    """Base class for all cosense-mcp errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(CosenseError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class AccessDenied(CosenseError):
    """Raised when the access policy does not allow mutating a project."""

    def __init__(self, project: str, allowed: list[str] | None = None) -> None:
        self.project = project
        self.allowed = list(allowed or [])
        editable = ", ".join(self.allowed) if self.allowed else "(none)"
        super().__init__(
            f"Project '{project}' is not in the list of editable projects. "
            f"Editable projects: {editable}"
        )


# === Attempt-level edit errors ===


class EditError(CosenseError):
    """Base class for errors raised while computing new page content."""


PATCH_FORMAT_EXAMPLE = """\
--- a/Page title
+++ b/Page title
@@ -1,3 +1,3 @@
 Page title
-old line
+new line
 unchanged line"""


class PatchFormatError(EditError):
    """Raised when patch text is not a single-page unified diff."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Invalid patch format: {reason}\n"
            f"Expected a unified diff for exactly one page, for example:\n"
            f"{PATCH_FORMAT_EXAMPLE}"
        )


class ConflictError(EditError):
    """Raised when a patch cannot be located in the current page content.

    Attributes:
        diagnostics: Context lines missing from the page, one message each.
        failed_hunks: List of (index, reason) for hunks that failed to apply.
    """

    def __init__(
        self,
        diagnostics: list[str],
        failed_hunks: list[tuple[int, str]] | None = None,
    ) -> None:
        self.diagnostics = list(diagnostics)
        self.failed_hunks = list(failed_hunks or [])

        parts = ["Patch could not be applied to the current page content."]
        for hunk_idx, reason in self.failed_hunks:
            parts.append(f"  Hunk {hunk_idx + 1} failed: {reason}")
        parts.extend(f"  {d}" for d in self.diagnostics)
        parts.append(
            "Possible causes: the page changed since it was read (stale content), "
            "or whitespace / line-ending differences between the patch and the page."
        )
        parts.append(
            "Re-fetch the current page content and regenerate the patch against it."
        )
        super().__init__("\n".join(parts))


class TitleChangeRejected(EditError):
    """Raised when new content would rename the page without permission."""

    def __init__(self, expected: str, observed: str) -> None:
        self.expected = expected
        self.observed = observed
        super().__init__(
            f"Title change detected but not allowed. Current title: '{expected}', "
            f"New first line: '{observed}'. "
            f"Set allowTitleChange to true if you want to change the title."
        )


# === Collaborator errors ===


class TransportFailure(CosenseError):
    """Raised when the page store cannot fetch or commit."""


class PageNotFoundError(TransportFailure):
    """Raised when the requested page does not exist."""

    def __init__(self, project: str, title: str) -> None:
        self.project = project
        self.title = title
        super().__init__(f"Page not found: {project}/{title}")
