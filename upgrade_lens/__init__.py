"""Upgrade Lens: codebase scanning and upgrade documentation over MCP."""

__version__ = "0.1.0"
