import asyncio
import json
from pathlib import Path

import httpx
import pytest

from tool_router.config import Settings

ENV_VARS = [
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "VOYAGE_API_KEY",
    "SUPABASE_URL",
    "EXPO_PUBLIC_SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_ANON_KEY",
    "EXPO_PUBLIC_SUPABASE_ANON_KEY",
    "SERVERLESS_PROJECT_ROOT",
    "OPENAI_BASE_URL",
    "GEMINI_BASE_URL",
    "VOYAGE_BASE_URL",
    "OPENAI_REASONING_EFFORT",
    "TOOL_ROUTER_TIMEOUT_SECONDS",
    "TOOL_ROUTER_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's real keys out of every test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def run(coro):
    return asyncio.run(coro)


def make_settings(**overrides) -> Settings:
    values = dict(
        openai_base_url="https://openai.test/v1",
        gemini_base_url="https://gemini.test/v1beta",
        voyage_base_url="https://voyage.test/v1",
        reasoning_effort="high",
        timeout_seconds=5.0,
        log_level="WARNING",
        supabase_url=None,
        supabase_service_role_key=None,
        supabase_key=None,
        project_root=Path("."),
    )
    values.update(overrides)
    return Settings(**values)


class FakeUpstream:
    """httpx.MockTransport handler that records requests and answers from a route table."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, status=200, json_body=None, text=None, headers=None, error=None):
        self.routes[url] = dict(status=status, json_body=json_body, text=text, headers=headers, error=error)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url not in self.routes:
            return httpx.Response(404, json={"error": {"message": f"no route for {url}"}})
        route = self.routes[url]
        if route["error"] is not None:
            raise route["error"]
        if route["json_body"] is not None:
            return httpx.Response(route["status"], json=route["json_body"], headers=route["headers"])
        return httpx.Response(route["status"], text=route["text"] or "", headers=route["headers"])

    def bodies(self, url):
        return [json.loads(r.content) for r in self.requests if str(r.url) == url]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def upstream():
    return FakeUpstream()


def payload_of(result):
    """Decode the single JSON text block of a ToolCallResult."""
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    return json.loads(result.content[0].text)
