"""Title-stability check for new page content."""

from cosense_mcp.core.errors import TitleChangeRejected


def guard_title(new_lines: list[str], expected_title: str, allow_title_change: bool) -> None:
    """Reject content whose first line would rename the page.

    Args:
        new_lines: Candidate page lines.
        expected_title: Current page title.
        allow_title_change: Skip the check entirely when True.

    Raises:
        TitleChangeRejected: If the first line differs from expected_title.
    """
    if allow_title_change or not new_lines:
        return
    if new_lines[0] != expected_title:
        raise TitleChangeRejected(expected=expected_title, observed=new_lines[0])
