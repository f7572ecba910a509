from .decorators import tool, register_tools
from .errors import (
    ConfigurationError,
    ToolArgumentError,
    ToolRouterError,
    UnknownToolError,
    UpstreamError,
)
from .models import ToolCallRequest, ToolCallResult, ToolDescriptor
from .registry import ToolRegistry
from .router import ToolRouter

__version__ = "1.0.0"
