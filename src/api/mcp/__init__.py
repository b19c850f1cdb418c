"""
MCP (Model Context Protocol) module for Inkwell.

Provides tools for reading comment threads, commenting, replying, liking
and moderating.
"""
from src.api.mcp.main import (
    TOOLS,
    execute_tool,
    ToolResult,
)

__all__ = [
    "TOOLS",
    "execute_tool",
    "ToolResult",
]
