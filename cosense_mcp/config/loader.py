"""Configuration loading with fail-fast behavior.

Configuration comes either from a JSON file or from COSENSE_* environment
variables. Both paths validate through the same Pydantic model and raise
ConfigError on any problem. The mutation engine itself never reads the
environment; it receives the resulting Config.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from cosense_mcp.config.schema import Config
from cosense_mcp.core.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PROJECT_NAME = "COSENSE_PROJECT_NAME"
ENV_EDITABLE_PROJECTS = "COSENSE_EDITABLE_PROJECTS"
ENV_BLOCKED_PROJECTS = "COSENSE_BLOCKED_PROJECTS"
ENV_DEFAULT_RETRY_LIMIT = "COSENSE_DEFAULT_RETRY_LIMIT"


def load_config(path: Path) -> Config:
    """Load and validate config from a JSON file.

    Args:
        path: Path to config file.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON, or fails validation.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    try:
        config = Config.model_validate_json(text)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e

    logger.info("Config loaded from: %s", path)
    return config


def _split_patterns(value: str) -> list[str]:
    """Split a comma-separated pattern list, dropping blanks."""
    return [p.strip() for p in value.split(",") if p.strip()]


def load_config_from_env(
    environ: Mapping[str, str] | None = None,
    use_dotenv: bool = False,
) -> Config:
    """Build config from COSENSE_* environment variables.

    Variables:
        COSENSE_PROJECT_NAME: default project (required)
        COSENSE_EDITABLE_PROJECTS: comma-separated allow patterns
            (defaults to the default project only)
        COSENSE_BLOCKED_PROJECTS: comma-separated deny patterns
        COSENSE_DEFAULT_RETRY_LIMIT: non-negative integer (default 3)

    Args:
        environ: Mapping to read instead of os.environ.
        use_dotenv: Load the nearest .env file (searching up from the
            working directory) into os.environ first.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If the project name is missing, the retry limit is not
            a non-negative integer, or validation fails.
    """
    if use_dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    env = os.environ if environ is None else environ

    project_name = env.get(ENV_PROJECT_NAME)
    if not project_name:
        raise ConfigError(f"{ENV_PROJECT_NAME} is not set")

    data: dict[str, Any] = {"project_name": project_name}

    editable = env.get(ENV_EDITABLE_PROJECTS)
    if editable:
        data["editable_projects"] = _split_patterns(editable)

    blocked = env.get(ENV_BLOCKED_PROJECTS)
    if blocked:
        data["blocked_projects"] = _split_patterns(blocked)

    retry_limit = env.get(ENV_DEFAULT_RETRY_LIMIT)
    if retry_limit:
        try:
            data["default_retry_limit"] = int(retry_limit.strip())
        except ValueError as e:
            raise ConfigError(
                f"{ENV_DEFAULT_RETRY_LIMIT} must be a non-negative integer"
            ) from e
        if data["default_retry_limit"] < 0:
            raise ConfigError(f"{ENV_DEFAULT_RETRY_LIMIT} must be a non-negative integer")

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed (from environment): {e}") from e

    logger.debug(
        "Config from environment: project=%s editable=%s",
        config.project_name,
        config.editable_projects,
    )
    return config
