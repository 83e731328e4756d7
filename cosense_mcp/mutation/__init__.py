"""Page mutation engine.

Main components:
- MutationEngine: insert_after_anchor(), overwrite(), apply_unified_diff()
- mutate_with_retry(): bounded retries around the page store's commit
- apply_strategy(): candidate content for one attempt
- guard_title(): title-stability check
"""

from cosense_mcp.mutation.engine import MutationEngine
from cosense_mcp.mutation.guard import guard_title
from cosense_mcp.mutation.retry import mutate_with_retry
from cosense_mcp.mutation.strategy import apply_strategy, insert_after_anchor
from cosense_mcp.mutation.types import (
    EditOutcome,
    InsertAfterAnchor,
    MutationRequest,
    Overwrite,
    RetryState,
    UnifiedDiff,
)

__all__ = [
    "MutationEngine",
    "mutate_with_retry",
    "apply_strategy",
    "insert_after_anchor",
    "guard_title",
    # Types
    "EditOutcome",
    "InsertAfterAnchor",
    "MutationRequest",
    "Overwrite",
    "RetryState",
    "UnifiedDiff",
]
