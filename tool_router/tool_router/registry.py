from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type, get_type_hints

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from .errors import ToolArgumentError, UnknownToolError
from .models import ToolDescriptor

Handler = Callable[..., Any]

def _is_async(fn: Handler) -> bool:
    return inspect.iscoroutinefunction(fn)

def _input_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    schema = model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    return schema

def _describe_errors(exc: ValidationError) -> List[str]:
    problems: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        problems.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return problems

@dataclass(frozen=True)
class ToolDef:
    name: str
    description: str
    fn: Handler
    input_model: Type[BaseModel]
    descriptor: ToolDescriptor

class ToolRegistry:
    def __init__(self) -> None:
        self._tools: Dict[str, ToolDef] = {}

    def list(self) -> List[ToolDef]:
        return list(self._tools.values())

    def descriptors(self) -> List[ToolDescriptor]:
        return [t.descriptor for t in self._tools.values()]

    def get(self, name: str) -> ToolDef:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def register(
        self,
        fn: Handler,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ToolDef:
        tool_name = name or fn.__name__
        if tool_name in self._tools:
            raise ValueError(f"Tool already registered: {tool_name}")
        desc = description or (fn.__doc__ or "").strip() or f"Tool {tool_name}"

        # Build input model from signature; Annotated metadata carries descriptions
        sig = inspect.signature(fn)
        hints = get_type_hints(fn, include_extras=True)
        fields: Dict[str, Any] = {}

        for pname, p in sig.parameters.items():
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue
            ann = hints.get(pname, Any)
            default = ... if p.default is inspect.Parameter.empty else p.default
            fields[pname] = (ann, default)

        input_model = create_model(  # type: ignore[call-overload]
            f"{tool_name}_Input",
            __config__=ConfigDict(extra="forbid"),
            **fields,
        )

        t = ToolDef(
            name=tool_name,
            description=desc,
            fn=fn,
            input_model=input_model,
            descriptor=ToolDescriptor(name=tool_name, description=desc, inputSchema=_input_schema(input_model)),
        )
        self._tools[tool_name] = t
        return t

    def validate(self, tool: ToolDef, args: Dict[str, Any]) -> BaseModel:
        try:
            return tool.input_model(**args)
        except ValidationError as e:
            raise ToolArgumentError(tool.name, _describe_errors(e)) from None

    async def call(self, name: str, args: Dict[str, Any]) -> Any:
        tool = self.get(name)
        parsed = self.validate(tool, args)

        kwargs = {field: getattr(parsed, field) for field in type(parsed).model_fields}

        if _is_async(tool.fn):
            return await tool.fn(**kwargs)
        return tool.fn(**kwargs)
