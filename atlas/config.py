"""
atlas/config.py — Central configuration loaded from environment variables.
All modules import settings from here; never read os.environ directly elsewhere.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── LLM ──────────────────────────────────────────────────────────────────
    openrouter_api_key: str = Field(..., description="OpenRouter API key")
    openrouter_model: str = Field(
        default="openai/gpt-4o-mini",
        description="OpenRouter model identifier",
    )
    generation_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single text-generation request",
    )
    generation_max_retries: int = Field(
        default=0,
        ge=0,
        description="Client-side retries for a failed generation request",
    )

    # ── Database ──────────────────────────────────────────────────────────────
    database_url: str = Field(..., description="SQLAlchemy connection URI")

    # ── Qualification ─────────────────────────────────────────────────────────
    evaluator_backend: Literal["llm", "rules"] = Field(
        default="llm",
        description="Which evaluator qualifies prospects: the LLM prompt or the local rule table",
    )
    hot_lead_threshold: int = Field(
        default=60,
        ge=0,
        le=100,
        description="Minimum lead score (0–100) for a hot lead",
    )
    warm_lead_threshold: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Minimum lead score (0–100) for a warm lead",
    )

    # ── Instagram metrics ────────────────────────────────────────────────────
    metrics_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="HTTP timeout when fetching public profile metrics",
    )

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Root log level for entry points")


# Singleton — import this everywhere
settings = Settings()
