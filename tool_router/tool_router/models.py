from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# --- Wire shapes ---

class ToolDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    inputSchema: Dict[str, Any]

class ToolCallRequest(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)

class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str

class ToolCallResult(BaseModel):
    content: List[TextContent]
    isError: bool = False

# --- Provider configuration ---

class Provider(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"
    VOYAGE = "voyage"

class ApiStyle(str, Enum):
    """Calling convention a model is served through."""
    STANDARD = "standard"      # chat/completions: message list in, text out
    STRUCTURED = "structured"  # responses: structured input items in, output items out

class ModelSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    api_style: ApiStyle = ApiStyle.STANDARD

class ProviderModelConfig(BaseModel):
    """Static model allow-list for one provider."""
    model_config = ConfigDict(frozen=True)

    provider: Provider
    default_model_id: str
    models: Tuple[ModelSpec, ...]

    @property
    def available_model_ids(self) -> Tuple[str, ...]:
        return tuple(m.id for m in self.models)

    def api_style(self, model_id: str) -> ApiStyle:
        for m in self.models:
            if m.id == model_id:
                return m.api_style
        raise KeyError(model_id)

# --- Handler results ---

class Completion(BaseModel):
    content: str = ""
    model: str
    usage: Optional[Dict[str, Any]] = None

class Embedding(BaseModel):
    embedding: List[float]
    dimensions: int
    usage: Optional[Dict[str, Any]] = None

class DiscoveredFunction(BaseModel):
    name: str
    service: Literal["supabase"] = "supabase"
    path: str
    endpoint: Optional[str] = None
