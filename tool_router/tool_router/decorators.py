from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional

from .registry import ToolRegistry, Handler

TOOL_ATTR = "__tool_spec__"

@dataclass(frozen=True)
class ToolSpec:
    name: Optional[str]
    description: Optional[str]
    order: int

_counter = 0

def tool(
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Callable[[Handler], Handler]:
    """Mark a router method as an MCP tool.

    Marked methods are bound and registered per router instance by
    ``register_tools``, in definition order, so the catalog is stable.
    """
    def wrapper(fn: Handler) -> Handler:
        global _counter
        _counter += 1
        setattr(fn, TOOL_ATTR, ToolSpec(name=name, description=description, order=_counter))
        return fn
    return wrapper

def register_tools(owner: object, registry: ToolRegistry) -> ToolRegistry:
    found = []
    for attr in dir(type(owner)):
        fn = getattr(type(owner), attr, None)
        spec = getattr(fn, TOOL_ATTR, None)
        if isinstance(spec, ToolSpec):
            found.append((spec, getattr(owner, attr)))

    for spec, bound in sorted(found, key=lambda item: item[0].order):
        registry.register(bound, name=spec.name, description=spec.description)
    return registry
