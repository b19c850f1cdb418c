#!/usr/bin/env python3
"""
MCP (Model Context Protocol) Stdio Server

Exposes the Inkwell comment tools over stdio transport.

Usage:
    python mcp_server.py

Authentication:
    Tools that act on behalf of a user expect a 'secret_key' argument,
    the same secret key the HTTP API accepts.
"""
import asyncio
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    CallToolResult,
    TextContent,
    Tool,
)

from src.core.db.session import SessionLocal, resolve_principal
from src.core.logger import configure_app_logging, get_logger
from src.api.mcp.main import TOOLS as MCP_TOOLS, execute_tool

logger = get_logger(__name__)

server = Server(
    name="Inkwell",
    version="1.0.0",
    instructions=(
        "Inkwell hosts threaded comments on blog posts. Use tools to read "
        "comment threads, comment, reply, like and moderate. Pass 'secret_key' "
        "for any tool that acts as a user."
    ),
)


def convert_tool_to_mcp(tool) -> Tool:
    """Convert an Inkwell tool definition to mcp.types.Tool."""
    return Tool(
        name=tool.name,
        description=tool.description,
        inputSchema=tool.inputSchema.model_json_schema(),
    )


@server.list_tools()
async def handle_list_tools() -> list[Tool]:
    """Return all available tools from the MCP module."""
    return [convert_tool_to_mcp(tool) for tool in MCP_TOOLS]


@server.call_tool()
async def handle_call_tool(name: str, arguments: dict[str, Any] | None) -> CallToolResult:
    """
    Handle tool execution by delegating to execute_tool.

    The 'secret_key' argument, when present, is resolved to the acting
    principal.
    """
    arguments = arguments or {}
    secret_key = arguments.get("secret_key")

    session = SessionLocal()
    try:
        current_user = resolve_principal(session, secret_key)
        result = execute_tool(name, arguments, current_user, session)
    except Exception:
        logger.exception(f"MCP tool {name} failed")
        return CallToolResult(
            content=[TextContent(type="text", text="server_error: internal error")],
            isError=True,
        )
    finally:
        session.close()

    return CallToolResult(
        content=[
            TextContent(type="text", text=item.get("text", ""))
            for item in result.content
        ],
        isError=result.isError,
    )


async def main():
    """Run the MCP stdio server."""
    # stdout carries the protocol, so logs go to the file only
    configure_app_logging(log_to_file=True, log_to_console=False)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


if __name__ == "__main__":
    asyncio.run(main())
