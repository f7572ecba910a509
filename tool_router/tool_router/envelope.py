from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from .models import TextContent, ToolCallResult

def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value

def _block(payload: Any) -> TextContent:
    return TextContent(text=json.dumps(payload, indent=2, ensure_ascii=False, default=str))

def success(value: Any) -> ToolCallResult:
    return ToolCallResult(content=[_block(to_jsonable(value))], isError=False)

def failure(exc: BaseException) -> ToolCallResult:
    message = str(exc) or type(exc).__name__
    return ToolCallResult(content=[_block({"error": message})], isError=True)
