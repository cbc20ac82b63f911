"""tubecaption: YouTube caption extraction as a library, CLI and MCP server."""

__version__ = "0.1.0"
