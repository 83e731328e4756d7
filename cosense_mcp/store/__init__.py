"""Page store implementations."""

from cosense_mcp.store.memory import InMemoryPageStore, StoredPage

__all__ = ["InMemoryPageStore", "StoredPage"]
