"""Settings loaded from environment variables (+ optional .env)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

ENV_PREFIX = "TODOAI"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True, slots=True)
class Settings:
    app_name: str
    log_level: str

    # Overlap-check the add paths too (the update path always checks).
    validate_on_add: bool

    openai_model: str


def load_settings() -> Settings:
    return Settings(
        app_name=_env(_k("APP_NAME"), "ToDoAI Task Service"),
        log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
        validate_on_add=_env_bool(_k("VALIDATE_ON_ADD"), False),
        openai_model=_env(_k("OPENAI_MODEL"), "gpt-4o-mini"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
