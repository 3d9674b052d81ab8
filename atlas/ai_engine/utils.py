"""
atlas/ai_engine/utils.py — Shared AI helper utilities.

Provides:
  - build_openrouter_llm()  : factory for the LangChain-compatible OpenRouter LLM
  - parse_json_object()     : pull the one JSON object out of a model reply
  - truncate_for_context()  : safely trim long strings to fit LLM context window
  - format_optional()       : render a nullable prompt value as text or "N/A"
"""

import json
import logging
import re
from typing import Any

from langchain_openai import ChatOpenAI

from atlas.config import settings

logger = logging.getLogger(__name__)

# OpenRouter's base URL (drop-in OpenAI-compatible API)
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def build_openrouter_llm(temperature: float = 0.3) -> ChatOpenAI:
    """
    Build a LangChain ChatOpenAI client pointed at OpenRouter.

    Args:
        temperature: 0.0 = deterministic, 1.0 = creative.
                     Use low temp (0.1–0.3) for structured qualification JSON,
                     higher (0.7–0.8) for conversational DM copy.

    Returns:
        A LangChain-compatible LLM instance with an explicit request timeout.
    """
    return ChatOpenAI(
        model=settings.openrouter_model,
        api_key=settings.openrouter_api_key,
        base_url=OPENROUTER_BASE_URL,
        temperature=temperature,
        timeout=settings.generation_timeout_seconds,
        max_retries=settings.generation_max_retries,
        default_headers={
            "X-Title": "Atlas Social Studio CRM",
        },
    )


_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def parse_json_object(text: str | None) -> dict[str, Any] | None:
    """
    Pull the single JSON object out of a model reply.

    Both prompts ask for one JSON object, but models still wrap it in
    ```json fences or add a sentence before or after it. Anything that is
    not an object (arrays, bare strings, numbers) counts as a parse failure.

    Returns the parsed dict, or None.
    """
    if not text:
        return None

    cleaned = _FENCE_PATTERN.sub(r"\1", text.strip()).strip()
    candidates = [cleaned]
    match = _OBJECT_PATTERN.search(cleaned)
    if match and match.group() != cleaned:
        candidates.append(match.group())

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    logger.warning("No JSON object in model output: %s", text[:200])
    return None


def truncate_for_context(text: str | None, max_chars: int = 2000) -> str:
    """
    Trim a string to max_chars to avoid exceeding LLM context window.
    Appends '...' if truncated.
    """
    if not text or len(text) <= max_chars:
        return text or ""
    return text[:max_chars] + "..."


def format_optional(value: Any) -> str:
    """Render a prompt value, using "N/A" for None (zero is a real value)."""
    if value is None or value == "":
        return "N/A"
    return str(value)
