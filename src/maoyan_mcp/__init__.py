"""MCP tool server for Maoyan movie showtimes."""

__version__ = "0.1.0"
