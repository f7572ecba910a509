from __future__ import annotations

import asyncio
import logging
from typing import Annotated, Any, Callable, Dict, Literal, Optional

import httpx
from pydantic import Field

from .config import Settings, load_env_files
from .credentials import CredentialResolver, VaultClient
from .decorators import tool
from .models import ApiStyle, Completion, Embedding, ModelSpec, Provider, ProviderModelConfig
from .providers import GeminiClient, OpenAIClient, VoyageClient
from .router import ToolRouter
from .server import configure_logging, serve

logger = logging.getLogger(__name__)

OPENAI = ProviderModelConfig(
    provider=Provider.OPENAI,
    default_model_id="gpt-5.2-pro-2025-12-11",
    models=(
        ModelSpec(id="gpt-5.2-pro-2025-12-11", api_style=ApiStyle.STRUCTURED),
        ModelSpec(id="gpt-5.2-2025-12-11"),
    ),
)

GEMINI = ProviderModelConfig(
    provider=Provider.GEMINI,
    default_model_id="gemini-3-pro-preview",
    models=(ModelSpec(id="gemini-3-pro-preview"), ModelSpec(id="gemini-3-flash-preview")),
)

VOYAGE = ProviderModelConfig(
    provider=Provider.VOYAGE,
    default_model_id="voyage-3",
    models=(ModelSpec(id="voyage-3"),),
)
VOYAGE_DIMENSIONS = 1024

OpenAIModelId = Literal[OPENAI.available_model_ids]  # type: ignore[valid-type]
GeminiModelId = Literal[GEMINI.available_model_ids]  # type: ignore[valid-type]

Prompt = Annotated[str, Field(description="The prompt to send")]
SystemPrompt = Annotated[Optional[str], Field(description="Optional system prompt")]
SystemInstruction = Annotated[Optional[str], Field(description="Optional system instruction")]
OpenAIModel = Annotated[OpenAIModelId, Field(description=f"Model (default: {OPENAI.default_model_id})")]
GeminiModel = Annotated[GeminiModelId, Field(description=f"Model (default: {GEMINI.default_model_id})")]
EmbedText = Annotated[str, Field(description="Text to embed")]
InputType = Annotated[Literal["document", "query"], Field(description="Type (document or query)")]

def _settled(outcome: Any) -> Any:
    if isinstance(outcome, Exception):
        return {"error": str(outcome) or type(outcome).__name__}
    if isinstance(outcome, BaseException):
        raise outcome
    return outcome

class MultimodelRouter(ToolRouter):
    name = "multimodel-mcp"
    banner = "Multimodel MCP server running"

    def __init__(
        self,
        settings: Settings,
        *,
        http: Optional[httpx.AsyncClient] = None,
        credentials: Optional[CredentialResolver] = None,
    ) -> None:
        super().__init__(settings, http=http)
        if credentials is None:
            vault = None
            if settings.supabase_url and settings.supabase_service_role_key:
                vault = VaultClient(
                    self.http,
                    supabase_url=settings.supabase_url,
                    service_role_key=settings.supabase_service_role_key,
                )
            credentials = CredentialResolver(vault)
        self.credentials = credentials
        self._clients: Dict[str, Any] = {}
        self._client_locks: Dict[str, asyncio.Lock] = {p: asyncio.Lock() for p in ("openai", "google", "voyage")}

    # --- lazily built provider clients ---

    async def _client(self, provider: str, build: Callable[[str], Any]) -> Any:
        client = self._clients.get(provider)
        if client is not None:
            return client
        # concurrent first calls wait here so the key is resolved once
        async with self._client_locks[provider]:
            client = self._clients.get(provider)
            if client is None:
                key = await self.credentials.resolve(provider)
                client = self._clients[provider] = build(key)
        return client

    async def openai(self) -> OpenAIClient:
        return await self._client(
            "openai",
            lambda key: OpenAIClient(
                self.http,
                key,
                base_url=self.settings.openai_base_url,
                reasoning_effort=self.settings.reasoning_effort,
            ),
        )

    async def gemini(self) -> GeminiClient:
        return await self._client(
            "google", lambda key: GeminiClient(self.http, key, base_url=self.settings.gemini_base_url)
        )

    async def voyage(self) -> VoyageClient:
        return await self._client(
            "voyage", lambda key: VoyageClient(self.http, key, base_url=self.settings.voyage_base_url)
        )

    async def ask_openai(self, prompt: str, system_prompt: Optional[str], model: str) -> Completion:
        client = await self.openai()
        return await client.complete(prompt, system_prompt, model, OPENAI.api_style(model))

    async def ask_gemini(self, prompt: str, system_prompt: Optional[str], model: str) -> Completion:
        client = await self.gemini()
        return await client.complete(prompt, system_prompt, model)

    # --- tools ---

    @tool(description=f"Query OpenAI models ({', '.join(OPENAI.available_model_ids)})")
    async def query_openai(
        self,
        prompt: Prompt,
        system_prompt: SystemPrompt = None,
        model: OpenAIModel = OPENAI.default_model_id,
    ) -> Completion:
        return await self.ask_openai(prompt, system_prompt, model)

    @tool(description=f"Query Gemini models ({', '.join(GEMINI.available_model_ids)})")
    async def query_gemini(
        self,
        prompt: Prompt,
        system_prompt: SystemInstruction = None,
        model: GeminiModel = GEMINI.default_model_id,
    ) -> Completion:
        return await self.ask_gemini(prompt, system_prompt, model)

    @tool(description=f"Get Voyage AI embeddings ({VOYAGE.default_model_id}, {VOYAGE_DIMENSIONS} dims)")
    async def embed_voyage(self, text: EmbedText, input_type: InputType = "document") -> Embedding:
        client = await self.voyage()
        return await client.embed(text, input_type, VOYAGE.default_model_id)

    @tool(description="Query OpenAI and Gemini in parallel for cross-validation")
    async def parallel_query(
        self,
        prompt: Annotated[str, Field(description="Prompt for both models")],
        system_prompt: SystemPrompt = None,
        openai_model: Annotated[
            OpenAIModelId, Field(description=f"OpenAI model (default: {OPENAI.default_model_id})")
        ] = OPENAI.default_model_id,
        gemini_model: Annotated[
            GeminiModelId, Field(description=f"Gemini model (default: {GEMINI.default_model_id})")
        ] = GEMINI.default_model_id,
    ) -> Dict[str, Any]:
        outcomes = await asyncio.gather(
            self.ask_openai(prompt, system_prompt, openai_model),
            self.ask_gemini(prompt, system_prompt, gemini_model),
            return_exceptions=True,
        )
        report = {}
        for provider, outcome in zip(("openai", "gemini"), outcomes):
            if isinstance(outcome, Exception):
                logger.info("parallel_query: %s failed: %s", provider, outcome)
            report[provider] = _settled(outcome)
        return report

def main() -> None:
    load_env_files()
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    asyncio.run(serve(MultimodelRouter(settings)))

if __name__ == "__main__":
    main()
