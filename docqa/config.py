# docqa/config.py
from __future__ import annotations
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Globale App-Einstellungen.

    Pflichtwerte kommen aus .env (LLM_API_KEY).
    LLM_PROVIDER bestimmt das Stream-Format des Delegate-Modells:
      - openai : OpenAI-kompatibles /chat/completions (auch Ollama /v1)
      - gemini : Google Generative Language API (streamGenerateContent)
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # LLM
    LLM_PROVIDER: str = "openai"
    LLM_BASE_URL: str = "https://api.openai.com/v1"
    LLM_API_KEY: str
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_TIMEOUT_SECONDS: float = 120.0
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 600
    LLM_WARMUP: bool = False

    # Gesamt-Deadline für eine Antwort (None = keine)
    ANSWER_TIMEOUT_SECONDS: Optional[float] = None

    # Arbeitssprache für Prompt + Refusal-Satz
    PROMPT_LANGUAGE: str = "en"

    # API
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @field_validator("LLM_PROVIDER", mode="after")
    def _check_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"openai", "gemini"}:
            raise ValueError(f"LLM_PROVIDER must be 'openai' or 'gemini', got: {v}")
        return v

    @field_validator("LLM_BASE_URL", mode="after")
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("PROMPT_LANGUAGE", mode="after")
    def _check_language(cls, v: str) -> str:
        # Import hier, damit prompting.py nicht von config.py abhängt
        from .prompting import REFUSALS
        v = v.strip().lower()
        if v not in REFUSALS:
            raise ValueError(f"PROMPT_LANGUAGE must be one of {sorted(REFUSALS)}, got: {v}")
        return v

    @field_validator("ANSWER_TIMEOUT_SECONDS", "LLM_TIMEOUT_SECONDS", mode="after")
    def _positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("timeouts must be > 0")
        return v


settings = Settings()
