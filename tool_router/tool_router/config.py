from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_TIMEOUT_SECONDS = 300.0

def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip()
    return normalized or default

def _env_float(name: str, default: float) -> float:
    value = _env_str(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default

def _first_env(*names: str) -> Optional[str]:
    for name in names:
        value = _env_str(name)
        if value:
            return value
    return None

def load_env_files(project_root: Optional[Path] = None) -> None:
    """Load ``.env`` from the working directory and ``.env.local`` from the project root.

    Variables already present in the process environment win.
    """
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path)
    if project_root is not None:
        local = project_root / ".env.local"
        if local.is_file():
            load_dotenv(dotenv_path=local)

@dataclass(frozen=True)
class Settings:
    openai_base_url: str
    gemini_base_url: str
    voyage_base_url: str
    reasoning_effort: str
    timeout_seconds: float
    log_level: str
    supabase_url: Optional[str]
    supabase_service_role_key: Optional[str]
    supabase_key: Optional[str]
    project_root: Path

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_base_url=_env_str("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
            gemini_base_url=_env_str(
                "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
            ).rstrip("/"),
            voyage_base_url=_env_str("VOYAGE_BASE_URL", "https://api.voyageai.com/v1").rstrip("/"),
            reasoning_effort=_env_str("OPENAI_REASONING_EFFORT", "high"),
            timeout_seconds=max(1.0, _env_float("TOOL_ROUTER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
            log_level=(_env_str("TOOL_ROUTER_LOG_LEVEL", "WARNING") or "WARNING").upper(),
            supabase_url=(_first_env("SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL") or "").rstrip("/") or None,
            supabase_service_role_key=_env_str("SUPABASE_SERVICE_ROLE_KEY"),
            supabase_key=_first_env(
                "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_ANON_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY"
            ),
            project_root=project_root_from_env(),
        )

def project_root_from_env() -> Path:
    root = _env_str("SERVERLESS_PROJECT_ROOT")
    return Path(root).expanduser().resolve() if root else Path.cwd()
