"""Shared fixtures for mutation engine tests."""

import pytest

from cosense_mcp.config.schema import Config
from cosense_mcp.mutation.engine import MutationEngine
from cosense_mcp.store.memory import InMemoryPageStore

PROJECT = "notes"
TITLE = "Title"


@pytest.fixture
def store() -> InMemoryPageStore:
    """Store holding a three-line page 'Title' in project 'notes'."""
    store = InMemoryPageStore()
    store.put(PROJECT, TITLE, ["Title", "line1", "line2"])
    return store


@pytest.fixture
def config() -> Config:
    return Config(
        project_name=PROJECT,
        editable_projects=[PROJECT, "team-.*"],
        blocked_projects=["team-archive"],
        default_retry_limit=3,
    )


@pytest.fixture
def engine(store: InMemoryPageStore, config: Config) -> MutationEngine:
    return MutationEngine(store, config)
