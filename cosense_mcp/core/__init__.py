"""Core types and interfaces."""

from cosense_mcp.core.cancel import CancellationToken
from cosense_mcp.core.errors import (
    AccessDenied,
    ConfigError,
    ConflictError,
    CosenseError,
    EditError,
    PageNotFoundError,
    PatchFormatError,
    TitleChangeRejected,
    TransportFailure,
)
from cosense_mcp.core.interfaces import PageStore
from cosense_mcp.core.policy import AccessPolicy, LiteralPattern, RegexPattern, is_writable
from cosense_mcp.core.types import CommitResult, MutationResult, Mutator, PageContent

__all__ = [
    "CancellationToken",
    # Errors
    "CosenseError",
    "ConfigError",
    "AccessDenied",
    "EditError",
    "PatchFormatError",
    "ConflictError",
    "TitleChangeRejected",
    "TransportFailure",
    "PageNotFoundError",
    # Interfaces
    "PageStore",
    # Access policy
    "AccessPolicy",
    "RegexPattern",
    "LiteralPattern",
    "is_writable",
    # Types
    "CommitResult",
    "MutationResult",
    "Mutator",
    "PageContent",
]
