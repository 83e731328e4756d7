"""Page mutation engine: the three edit entry points.

insert_after_anchor(), overwrite() and apply_unified_diff() differ only in
the edit they build; all three run through mutate_with_retry(). Requests
that can never succeed are rejected up front without consuming attempts:
a negative retry limit, a project the access policy does not allow, and
patch text that is not a single-page unified diff.

Entry points never raise. Every outcome is a MutationResult.
"""

import logging

from cosense_mcp.config.schema import Config
from cosense_mcp.core.cancel import CancellationToken
from cosense_mcp.core.errors import AccessDenied, CosenseError
from cosense_mcp.core.interfaces import PageStore
from cosense_mcp.core.policy import is_writable
from cosense_mcp.core.types import MutationResult
from cosense_mcp.mutation.retry import format_change_summary, mutate_with_retry
from cosense_mcp.mutation.strategy import apply_strategy
from cosense_mcp.mutation.types import (
    Edit,
    InsertAfterAnchor,
    MutationRequest,
    Overwrite,
    UnifiedDiff,
)
from cosense_mcp.patch.parser import parse_page_patch

logger = logging.getLogger(__name__)


def _rejected(error: CosenseError | str, kind: str = "") -> MutationResult:
    if isinstance(error, CosenseError):
        return MutationResult(error=error.message, error_kind=kind or type(error).__name__)
    return MutationResult(error=error, error_kind=kind)


class MutationEngine:
    """Applies edits to wiki pages through a PageStore.

    The engine holds no per-request state; one instance can serve any
    number of concurrent requests.

    Example:
        engine = MutationEngine(store, load_config_from_env())
        result = await engine.apply_unified_diff("Title", patch_text)
        if not result.success:
            print(result.error)
    """

    def __init__(self, store: PageStore, config: Config) -> None:
        self._store = store
        self._config = config
        self._policy = config.access_policy()

    @property
    def config(self) -> Config:
        return self._config

    def _precheck(
        self, project: str, page_title: str, retry_limit: int, gated: bool
    ) -> MutationResult | None:
        """Return a rejection result if the request can never succeed."""
        if retry_limit < 0:
            return _rejected("Retry limit must be non-negative.", "ValueError")

        if gated and not is_writable(project, self._policy):
            logger.info("Rejected edit of %s/%s: project not editable", project, page_title)
            return _rejected(AccessDenied(project, self._policy.describe()))

        return None

    def _request(
        self,
        page_title: str,
        edit: Edit,
        project: str,
        allow_title_change: bool,
        retry_limit: int,
    ) -> MutationRequest:
        return MutationRequest(
            project=project,
            page_title=page_title,
            edit=edit,
            allow_title_change=allow_title_change,
            retry_limit=retry_limit,
        )

    def _defaults(self, project: str | None, retry_limit: int | None) -> tuple[str, int]:
        return (
            self._config.project_name if project is None else project,
            self._config.default_retry_limit if retry_limit is None else retry_limit,
        )

    async def _run(
        self,
        request: MutationRequest,
        cancel_token: CancellationToken | None,
    ) -> MutationResult:
        return await mutate_with_retry(
            request,
            self._store,
            cancel_token=cancel_token,
            retry_delay=self._config.retry_delay,
        )

    async def insert_after_anchor(
        self,
        page_title: str,
        target_line_text: str,
        text: str,
        project: str | None = None,
        retry_limit: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> MutationResult:
        """Insert lines after the line equal to target_line_text.

        If the target line is not found, the lines are appended to the end
        of the page. Use "\\n" in text to insert several lines.
        """
        project, limit = self._defaults(project, retry_limit)
        rejected = self._precheck(project, page_title, limit, gated=False)
        if rejected is not None:
            return rejected

        request = self._request(
            page_title,
            InsertAfterAnchor(target_line_text=target_line_text, text=text),
            project,
            allow_title_change=False,
            retry_limit=limit,
        )
        return await self._run(request, cancel_token)

    async def overwrite(
        self,
        page_title: str,
        new_content: str,
        project: str | None = None,
        allow_title_change: bool = False,
        retry_limit: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> MutationResult:
        """Rewrite the entire content of a page.

        The first line of new_content must equal page_title unless
        allow_title_change is set. The project must be editable.
        """
        project, limit = self._defaults(project, retry_limit)
        rejected = self._precheck(project, page_title, limit, gated=True)
        if rejected is not None:
            return rejected

        request = self._request(
            page_title,
            Overwrite(new_content=new_content),
            project,
            allow_title_change=allow_title_change,
            retry_limit=limit,
        )
        return await self._run(request, cancel_token)

    async def apply_unified_diff(
        self,
        page_title: str,
        patch_text: str,
        project: str | None = None,
        allow_title_change: bool = False,
        retry_limit: int | None = None,
        dry_run: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> MutationResult:
        """Apply a unified diff to a page.

        The diff must contain exactly one file section. The patch is parsed
        once; every attempt applies it to freshly fetched content. With
        dry_run, the page is fetched and patched once and nothing is written.
        """
        project, limit = self._defaults(project, retry_limit)
        rejected = self._precheck(project, page_title, limit, gated=True)
        if rejected is not None:
            return rejected

        try:
            patch = parse_page_patch(patch_text)
        except CosenseError as e:
            return _rejected(e)

        edit = UnifiedDiff(
            patch=patch,
            mode=self._config.patch.apply_mode,
            search_window=self._config.patch.search_window,
        )
        request = self._request(
            page_title,
            edit,
            project,
            allow_title_change=allow_title_change,
            retry_limit=limit,
        )
        if dry_run:
            return await self._dry_run(request, cancel_token)
        return await self._run(request, cancel_token)

    async def _dry_run(
        self, request: MutationRequest, cancel_token: CancellationToken | None
    ) -> MutationResult:
        """Fetch once, apply the edit, and report without committing."""
        if cancel_token is not None and cancel_token.is_cancelled:
            return MutationResult(
                error="Cancelled before dry run.",
                error_kind="CancelledError",
                max_attempts=1,
                dry_run=True,
            )

        def failed(error: str, kind: str) -> MutationResult:
            return MutationResult(
                error=error, error_kind=kind, attempts=1, max_attempts=1, dry_run=True
            )

        try:
            current = await self._store.fetch(request.project, request.page_title)
        except CosenseError as e:
            return failed(f"Dry run - could not fetch page: {e.message}", type(e).__name__)
        except Exception as e:
            logger.debug("Unexpected error from page store", exc_info=True)
            return failed(f"Dry run - could not fetch page: {e}", "TransportFailure")

        try:
            outcome = apply_strategy(request, current)
        except CosenseError as e:
            return failed(f"Dry run - patch would fail:\n{e.message}", type(e).__name__)

        output = (
            f"Dry run - no changes made: patch applies to page '{request.page_title}' "
            f"({format_change_summary(outcome)})."
        )
        for warning in outcome.warnings:
            output += f"\n  Warning: {warning}"
        return MutationResult(
            output=output,
            attempts=1,
            max_attempts=1,
            lines_added=outcome.lines_added,
            lines_removed=outcome.lines_removed,
            dry_run=True,
        )
