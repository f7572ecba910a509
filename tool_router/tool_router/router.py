from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from . import envelope
from .config import Settings
from .decorators import register_tools
from .models import ToolCallRequest, ToolCallResult, ToolDescriptor
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

class ToolRouter:
    """Base class for a stdio MCP tool server.

    Subclasses declare tools with ``@tool`` methods. The router owns the
    shared HTTP client and any memoized provider clients, so one instance
    holds all mutable state for its process.
    """

    name: str = "tool-router"
    version: str = "1.0.0"
    banner: str = "Tool router MCP server running"

    def __init__(self, settings: Settings, *, http: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings
        self.http = http or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.timeout_seconds, connect=min(10.0, settings.timeout_seconds))
        )
        self.registry = register_tools(self, ToolRegistry())

    def list_tools(self) -> List[ToolDescriptor]:
        return self.registry.descriptors()

    async def dispatch(self, request: ToolCallRequest) -> Any:
        logger.debug("Calling tool %s", request.name)
        return await self.registry.call(request.name, request.arguments)

    async def call_tool(self, request: ToolCallRequest) -> ToolCallResult:
        try:
            value = await self.dispatch(request)
        except Exception as exc:
            logger.info("Tool %s failed: %s", request.name, exc)
            return envelope.failure(exc)
        return envelope.success(value)

    async def aclose(self) -> None:
        await self.http.aclose()
