from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

import httpx
from pydantic import Field

from .config import Settings, load_env_files, project_root_from_env
from .decorators import tool
from .errors import ConfigurationError, UpstreamError
from .models import DiscoveredFunction
from .router import ToolRouter
from .server import configure_logging, serve

logger = logging.getLogger(__name__)

SERVICE = "supabase"
FUNCTIONS_DIR = "supabase/functions"
EXCLUDED_PREFIX = "_"

def function_endpoint(base_url: Optional[str], name: str) -> Optional[str]:
    return f"{base_url}/functions/v1/{name}" if base_url else None

def scan_functions(project_root: Path, base_url: Optional[str]) -> List[DiscoveredFunction]:
    functions_dir = project_root / FUNCTIONS_DIR
    try:
        entries = sorted(functions_dir.iterdir(), key=lambda p: p.name)
    except (FileNotFoundError, NotADirectoryError):
        logger.debug("No functions directory at %s", functions_dir)
        return []

    return [
        DiscoveredFunction(
            name=entry.name,
            path=f"{FUNCTIONS_DIR}/{entry.name}",
            endpoint=function_endpoint(base_url, entry.name),
        )
        for entry in entries
        if entry.is_dir() and not entry.name.startswith(EXCLUDED_PREFIX)
    ]

def _decode(response: httpx.Response) -> Any:
    if "application/json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text

class ServerlessRouter(ToolRouter):
    name = "serverless-mcp"
    banner = "Serverless MCP server running"

    @tool(description="Discover Supabase edge functions in this project")
    async def discover(self) -> Dict[str, Any]:
        functions = scan_functions(self.settings.project_root, self.settings.supabase_url)
        return {"functions": functions, "count": len(functions)}

    @tool(description="Invoke a Supabase edge function by name")
    async def invoke(
        self,
        name: Annotated[str, Field(description="Function name")],
        payload: Annotated[Optional[Dict[str, Any]], Field(description="Request payload (optional)")] = None,
        endpoint: Annotated[Optional[str], Field(description="Override endpoint URL (optional)")] = None,
    ) -> Dict[str, Any]:
        base_url = self.settings.supabase_url
        key = self.settings.supabase_key

        missing = []
        if not base_url and not endpoint:
            missing.append("SUPABASE_URL")
        if not key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY)")
        if missing:
            raise ConfigurationError(" and ".join(missing) + " not set")

        url = endpoint or function_endpoint(base_url, name)
        logger.info("Invoking %s at %s", name, url)
        try:
            response = await self.http.post(
                url,
                headers={"Authorization": f"Bearer {key}"},
                json=payload if payload is not None else {},
            )
        except httpx.TimeoutException:
            raise UpstreamError(SERVICE, f"Function {name} timed out") from None
        except httpx.HTTPError as exc:
            raise UpstreamError(SERVICE, f"Function {name} request failed: {str(exc) or type(exc).__name__}") from None

        return {
            "function": name,
            "service": SERVICE,
            "result": _decode(response),
            "status": response.status_code,
        }

def main() -> None:
    load_env_files(project_root_from_env())
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    asyncio.run(serve(ServerlessRouter(settings)))

if __name__ == "__main__":
    main()
