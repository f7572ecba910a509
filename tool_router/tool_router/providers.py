from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from .errors import UpstreamError
from .models import ApiStyle, Completion, Embedding

logger = logging.getLogger(__name__)

def _error_message(response: httpx.Response, label: str) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str) and err["message"]:
            return err["message"]
        if isinstance(err, str) and err:
            return err
        detail = data.get("detail")
        if isinstance(detail, str) and detail:
            return detail
    return f"{label} API error: {response.status_code}"

async def post_json(
    http: httpx.AsyncClient,
    label: str,
    url: str,
    *,
    headers: Mapping[str, str],
    body: Any,
) -> Any:
    """POST a JSON body and return the decoded JSON reply, or raise ``UpstreamError``."""
    try:
        response = await http.post(url, headers=dict(headers), json=body)
    except httpx.TimeoutException:
        raise UpstreamError(label, f"{label} request timed out") from None
    except httpx.HTTPError as exc:
        raise UpstreamError(label, f"{label} request failed: {str(exc) or type(exc).__name__}") from None

    if response.is_error:
        message = _error_message(response, label)
        logger.debug("%s returned %s: %s", label, response.status_code, message)
        raise UpstreamError(label, message, status=response.status_code)

    try:
        return response.json()
    except ValueError:
        raise UpstreamError(label, f"{label} API returned a non-JSON body", status=response.status_code) from None

async def post_object(
    http: httpx.AsyncClient,
    label: str,
    url: str,
    *,
    headers: Mapping[str, str],
    body: Any,
) -> Dict[str, Any]:
    data = await post_json(http, label, url, headers=headers, body=body)
    if not isinstance(data, dict):
        raise UpstreamError(label, f"{label} API returned an unexpected body")
    return data

def _usage(data: Mapping[str, Any], key: str = "usage") -> Optional[Dict[str, Any]]:
    usage = data.get(key)
    return usage if isinstance(usage, dict) else None

class OpenAIClient:
    label = "OpenAI"

    def __init__(self, http: httpx.AsyncClient, api_key: str, *, base_url: str, reasoning_effort: str):
        self._http = http
        self._headers = {"Authorization": f"Bearer {api_key}"}
        self._base_url = base_url
        self._reasoning_effort = reasoning_effort

    async def complete(
        self, prompt: str, system_prompt: Optional[str], model: str, style: ApiStyle
    ) -> Completion:
        if style is ApiStyle.STRUCTURED:
            return await self._responses(prompt, system_prompt, model)
        return await self._chat(prompt, system_prompt, model)

    async def _chat(self, prompt: str, system_prompt: Optional[str], model: str) -> Completion:
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        data = await post_object(
            self._http,
            self.label,
            f"{self._base_url}/chat/completions",
            headers=self._headers,
            body={"model": model, "messages": messages, "reasoning_effort": self._reasoning_effort},
        )
        choices = data.get("choices") or [{}]
        message = choices[0].get("message") or {}
        return Completion(
            content=message.get("content") or "",
            model=data.get("model") or model,
            usage=_usage(data),
        )

    async def _responses(self, prompt: str, system_prompt: Optional[str], model: str) -> Completion:
        input_: Any = prompt
        if system_prompt:
            input_ = [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ]

        data = await post_object(
            self._http,
            self.label,
            f"{self._base_url}/responses",
            headers=self._headers,
            body={"model": model, "input": input_, "reasoning": {"effort": self._reasoning_effort}},
        )

        texts: List[str] = []
        for item in data.get("output") or []:
            if item.get("type") != "message":
                continue
            for part in item.get("content") or []:
                if part.get("type") == "output_text":
                    texts.append(part.get("text") or "")

        return Completion(content="".join(texts), model=data.get("model") or model, usage=_usage(data))

class GeminiClient:
    label = "Gemini"

    def __init__(self, http: httpx.AsyncClient, api_key: str, *, base_url: str):
        self._http = http
        self._headers = {"x-goog-api-key": api_key}
        self._base_url = base_url

    async def complete(self, prompt: str, system_prompt: Optional[str], model: str) -> Completion:
        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if system_prompt:
            body["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        data = await post_object(
            self._http,
            self.label,
            f"{self._base_url}/models/{model}:generateContent",
            headers=self._headers,
            body=body,
        )

        candidates = data.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or []
        # thought parts are reasoning traces, not the answer
        text = "".join(p.get("text") or "" for p in parts if not p.get("thought"))
        return Completion(content=text, model=model, usage=_usage(data, "usageMetadata"))

class VoyageClient:
    label = "Voyage"

    def __init__(self, http: httpx.AsyncClient, api_key: str, *, base_url: str):
        self._http = http
        self._headers = {"Authorization": f"Bearer {api_key}"}
        self._base_url = base_url

    async def embed(self, text: str, input_type: str, model: str) -> Embedding:
        data = await post_object(
            self._http,
            self.label,
            f"{self._base_url}/embeddings",
            headers=self._headers,
            body={"model": model, "input": [text], "input_type": input_type},
        )
        rows = data.get("data") or []
        vector = rows[0].get("embedding") if rows else None
        if not isinstance(vector, list):
            raise UpstreamError(self.label, "Voyage API returned no embedding")
        return Embedding(embedding=vector, dimensions=len(vector), usage=_usage(data))
