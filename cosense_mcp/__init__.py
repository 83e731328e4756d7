"""cosense-mcp: page mutation engine for Cosense wiki pages."""

__version__ = "0.1.0"
