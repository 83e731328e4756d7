"""Retry controller for the mutate-and-commit cycle.

Each attempt hands the page store a mutator bound to the request. The store
fetches the current page, runs the mutator on it and tries a
compare-and-swap write. A rejected write and an error raised while building
the new content are both retryable: the next attempt starts from freshly
fetched content. Attempts run strictly one after another.

Requests that can never succeed (access denied, unparseable patch) are
rejected by the engine before this loop and consume no attempts.
"""

import asyncio
import logging

from cosense_mcp.core.cancel import CancellationToken
from cosense_mcp.core.errors import CosenseError
from cosense_mcp.core.interfaces import PageStore
from cosense_mcp.core.types import MutationResult
from cosense_mcp.mutation.strategy import apply_strategy
from cosense_mcp.mutation.types import (
    EditOutcome,
    InsertAfterAnchor,
    MutationRequest,
    Overwrite,
    RetryState,
)

logger = logging.getLogger(__name__)


def _action(request: MutationRequest) -> tuple[str, str]:
    """(success verb phrase, failure verb) for the request's edit kind."""
    if isinstance(request.edit, InsertAfterAnchor):
        return "inserted lines into", "insert lines into"
    if isinstance(request.edit, Overwrite):
        return "rewrote", "rewrite"
    return "applied patch to", "apply patch to"


def format_change_summary(outcome: EditOutcome) -> str:
    """Render "N line(s) added, M line(s) removed" for an outcome."""
    return f"{outcome.lines_added} line(s) added, {outcome.lines_removed} line(s) removed"


def _success(
    request: MutationRequest, state: RetryState, outcome: EditOutcome | None
) -> MutationResult:
    done, _ = _action(request)
    output = f"Successfully {done} page '{request.page_title}' in project '{request.project}'"
    if state.attempts > 1:
        output += f" (attempt {state.attempts}/{state.max_attempts})"
    output += "."

    lines_added = lines_removed = None
    if outcome is not None:
        if outcome.lines_added is not None and outcome.lines_removed is not None:
            lines_added = outcome.lines_added
            lines_removed = outcome.lines_removed
            output += f" {format_change_summary(outcome)}."
        for warning in outcome.warnings:
            output += f"\n  Warning: {warning}"

    return MutationResult(
        output=output,
        attempts=state.attempts,
        max_attempts=state.max_attempts,
        lines_added=lines_added,
        lines_removed=lines_removed,
    )


def _failure(request: MutationRequest, state: RetryState) -> MutationResult:
    _, verb = _action(request)
    return MutationResult(
        error=(
            f"Failed to {verb} page '{request.page_title}' after {state.attempts} "
            f"attempt(s). Last error: {state.last_error or 'Unknown error'}"
        ),
        error_kind=state.last_error_kind,
        attempts=state.attempts,
        max_attempts=state.max_attempts,
    )


async def mutate_with_retry(
    request: MutationRequest,
    store: PageStore,
    cancel_token: CancellationToken | None = None,
    retry_delay: float = 0.0,
) -> MutationResult:
    """Run the mutate-and-commit cycle with bounded retries.

    Args:
        request: The mutation request; retry_limit + 1 attempts at most.
        store: Page store providing the compare-and-swap commit.
        cancel_token: Checked before every attempt.
        retry_delay: Seconds to wait between attempts.

    Returns:
        MutationResult describing success (with change summary) or the last
        error once the attempt budget is exhausted.
    """
    state = RetryState(max_attempts=request.retry_limit + 1)

    while not state.exhausted:
        if cancel_token is not None and cancel_token.is_cancelled:
            logger.info(
                "Mutation of %s/%s cancelled after %d attempt(s)",
                request.project,
                request.page_title,
                state.attempts,
            )
            return MutationResult(
                error=(
                    f"Cancelled before attempt {state.attempts + 1}/{state.max_attempts}. "
                    f"Last error: {state.last_error or 'none'}"
                ),
                error_kind="CancelledError",
                attempts=state.attempts,
                max_attempts=state.max_attempts,
            )

        if state.attempts > 0 and retry_delay > 0:
            await asyncio.sleep(retry_delay)

        state.attempts += 1
        outcomes: list[EditOutcome] = []

        def mutator(current: list[str]) -> list[str]:
            outcome = apply_strategy(request, list(current))
            outcomes.append(outcome)
            return outcome.lines

        try:
            commit = await store.commit(request.project, request.page_title, mutator)
        except CosenseError as e:
            state.record_failure(e.message, type(e).__name__)
        except Exception as e:
            # Errors from the store's own transport are retryable too
            state.record_failure(str(e) or type(e).__name__, "TransportFailure")
            logger.debug("Unexpected error from page store", exc_info=True)
        else:
            if commit.ok:
                if state.attempts > 1:
                    logger.info(
                        "Mutation of %s/%s succeeded on attempt %d/%d",
                        request.project,
                        request.page_title,
                        state.attempts,
                        state.max_attempts,
                    )
                return _success(request, state, outcomes[-1] if outcomes else None)
            state.record_failure(commit.reason or "Commit was rejected", "TransportFailure")

        logger.warning(
            "Attempt %d/%d for %s/%s failed: %s",
            state.attempts,
            state.max_attempts,
            request.project,
            request.page_title,
            state.last_error,
        )

    return _failure(request, state)
