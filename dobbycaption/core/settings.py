"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file.
- Keeps endpoint, model ids and sampling knobs tunable without code changes.

Notes:
- API keys are NOT cached: read_credentials() builds a fresh Settings so a key
  added/removed from the environment is seen on the very next call.
"""

# --- Purpose: robust settings with env-file support and safe handling of extra keys.
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",          # <-- prevents crashes if extra env vars exist
    )

    # API host/port
    host: str = Field(default="0.0.0.0", description="Bind address for FastAPI/Uvicorn")
    port: int = Field(default=8000, description="Port for FastAPI/Uvicorn")

    # CORS
    cors_allow_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed origins for browser apps"
    )

    log_level: str = Field(default="INFO", description="Root log level")

    # ---- Remote inference (Fireworks, OpenAI-compatible chat completions) ----
    chat_completions_url: str = Field(
        default="https://api.fireworks.ai/inference/v1/chat/completions",
        description="Endpoint shared by the description and caption stages"
    )
    http_timeout_s: float = Field(default=120.0, description="Per-request timeout for outbound calls")

    # ---- Description stage (vision model) ----
    description_model: str = Field(default="accounts/fireworks/models/qwen2p5-vl-32b-instruct")

    # ---- Caption stage (text model) ----
    caption_model: str = Field(
        default="accounts/sentientfoundation-serverless/models/dobby-mini-unhinged-plus-llama-3-1-8b"
    )

    # ---- Sampling (shared by both stages) ----
    max_tokens: int = Field(default=4096)
    top_p: float = Field(default=1.0)
    top_k: int = Field(default=40)
    presence_penalty: float = Field(default=0.0)
    frequency_penalty: float = Field(default=0.0)
    temperature: float = Field(default=0.6)

    # false: missing content -> fallback text; true: raise MalformedResponse
    strict_responses: bool = Field(default=False)

    # ---- Credentials (VITE_* names kept so an existing frontend .env still works) ----
    qwen_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("QWEN_API_KEY", "VITE_QWEN_KEY")
    )
    dobby_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("DOBBY_API_KEY", "VITE_DOBBY_KEY")
    )

@dataclass(frozen=True)
class Credentials:
    qwen_api_key: Optional[str]
    dobby_api_key: Optional[str]

def read_credentials() -> Credentials:
    """
    Fresh read of both API keys from env/.env (never taken from the module singleton).
    """
    current = Settings()
    return Credentials(
        qwen_api_key=current.qwen_api_key or None,
        dobby_api_key=current.dobby_api_key or None,
    )

settings = Settings()
