from __future__ import annotations

import logging
import os
from typing import Dict, Optional

import httpx

from .errors import ConfigurationError, UpstreamError
from .providers import post_json

logger = logging.getLogger(__name__)

ENV_NAMES: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "google": "GEMINI_API_KEY",
    "voyage": "VOYAGE_API_KEY",
}

VAULT_NAMES: Dict[str, str] = {
    "openai": "openai_api_key",
    "google": "gemini_api_key",
    "voyage": "voyage_api_key",
}

class VaultClient:
    """Reads named secrets through the project's ``get_api_key`` RPC."""

    label = "Supabase Vault"

    def __init__(self, http: httpx.AsyncClient, *, supabase_url: str, service_role_key: str):
        self._http = http
        self._url = f"{supabase_url}/rest/v1/rpc/get_api_key"
        self._headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
        }

    async def get(self, key_name: str) -> Optional[str]:
        value = await post_json(self._http, self.label, self._url, headers=self._headers, body={"key_name": key_name})
        return value if isinstance(value, str) and value else None

class CredentialResolver:
    """Env first, then the vault when one is configured; otherwise name the variable."""

    def __init__(self, vault: Optional[VaultClient] = None):
        self._vault = vault

    async def resolve(self, provider: str) -> str:
        env_name = ENV_NAMES[provider]
        value = (os.getenv(env_name) or "").strip()
        if value:
            return value

        if self._vault is not None:
            try:
                secret = await self._vault.get(VAULT_NAMES[provider])
            except UpstreamError as exc:
                logger.info("Vault lookup for %s failed: %s", provider, exc)
            else:
                if secret:
                    logger.info("Resolved %s credential from vault", provider)
                    return secret

        raise ConfigurationError(f"{env_name} not set")
