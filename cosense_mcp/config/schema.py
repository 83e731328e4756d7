"""Pydantic models for cosense-mcp configuration validation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cosense_mcp.core.policy import AccessPolicy
from cosense_mcp.patch.applier import DEFAULT_SEARCH_WINDOW, ApplyMode


class PatchConfig(BaseModel):
    """How unified diffs are located in page content.

    Example in config.json:
        "patch": {"mode": "tolerant", "search_window": 20}
    """

    model_config = ConfigDict(extra="forbid")

    mode: Literal["strict", "tolerant"] = "strict"
    """strict = exact line match, tolerant = ignore trailing whitespace."""

    search_window: int = Field(default=DEFAULT_SEARCH_WINDOW, ge=0)
    """How many lines away from its anchor a hunk may still be applied."""

    @property
    def apply_mode(self) -> ApplyMode:
        return ApplyMode(self.mode)


class Config(BaseModel):
    """Root configuration model.

    Example config.json:
        {
            "project_name": "my-notes",
            "editable_projects": ["my-notes", "team-.*"],
            "blocked_projects": ["team-archive"],
            "default_retry_limit": 3
        }
    """

    model_config = ConfigDict(extra="forbid")

    project_name: str = Field(min_length=1)
    """Default project for requests that do not name one."""

    editable_projects: list[str] | None = None
    """Allow patterns. Omitted means only project_name is editable."""

    blocked_projects: list[str] = []
    """Deny patterns, checked before editable_projects."""

    default_retry_limit: int = Field(default=3, ge=0)
    """Retries after the first attempt when a request does not set its own."""

    retry_delay: float = Field(default=0.0, ge=0.0)
    """Seconds to wait between attempts. 0 retries immediately."""

    patch: PatchConfig = PatchConfig()

    @model_validator(mode="after")
    def default_editable_projects(self) -> "Config":
        """Fall back to the default project when no allow list is given."""
        if self.editable_projects is None:
            self.editable_projects = [self.project_name]
        return self

    def access_policy(self) -> AccessPolicy:
        """Compile the allow/deny patterns into an AccessPolicy."""
        return AccessPolicy.from_patterns(
            allow=self.editable_projects or [],
            deny=self.blocked_projects,
        )
