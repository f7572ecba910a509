from __future__ import annotations

from typing import List, Optional

class ToolRouterError(Exception):
    """Base class for tool-router failures."""

class UnknownToolError(ToolRouterError):
    """Raised when a caller asks for a tool the router does not expose."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")

class ToolArgumentError(ToolRouterError):
    """Raised when tool arguments do not match the tool's input model."""

    def __init__(self, tool: str, problems: List[str]):
        self.tool = tool
        self.problems = problems
        super().__init__(f"Invalid arguments for {tool}: " + "; ".join(problems))

class ConfigurationError(ToolRouterError):
    """A required credential or endpoint is missing."""

class UpstreamError(ToolRouterError):
    """An external provider or function call failed."""

    def __init__(self, provider: str, message: str, *, status: Optional[int] = None):
        self.provider = provider
        self.status = status
        super().__init__(message)
