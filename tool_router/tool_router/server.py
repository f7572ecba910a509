from __future__ import annotations

import logging
import sys
from typing import List

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .models import ToolCallRequest
from .router import ToolRouter

logger = logging.getLogger(__name__)

def configure_logging(level: str = "WARNING") -> None:
    # stdout carries protocol frames; logs go to stderr only
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def create_server(router: ToolRouter) -> Server:
    server = Server(router.name, version=router.version)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(name=d.name, description=d.description, inputSchema=d.inputSchema)
            for d in router.list_tools()
        ]

    # Registered directly rather than through @server.call_tool() so the
    # router's envelope reaches the client unchanged, errors included.
    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        result = await router.call_tool(
            ToolCallRequest(name=req.params.name, arguments=req.params.arguments or {})
        )
        return types.ServerResult(
            types.CallToolResult(
                content=[types.TextContent(type="text", text=block.text) for block in result.content],
                isError=result.isError,
            )
        )

    server.request_handlers[types.CallToolRequest] = call_tool
    return server

async def serve(router: ToolRouter) -> None:
    """Run ``router`` over stdin/stdout until the client disconnects."""
    server = create_server(router)
    try:
        async with stdio_server() as (read_stream, write_stream):
            print(router.banner, file=sys.stderr, flush=True)
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await router.aclose()
        logger.info("%s stopped", router.name)
