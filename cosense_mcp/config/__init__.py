"""Configuration loading and validation."""

from cosense_mcp.config.loader import load_config, load_config_from_env
from cosense_mcp.config.schema import Config, PatchConfig

__all__ = [
    "Config",
    "PatchConfig",
    "load_config",
    "load_config_from_env",
]
