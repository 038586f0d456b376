"""Thin wrapper around the Google Generative AI SDK (Gemini)."""

import logging
import os
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash-001"

_clients: dict[tuple[str, str, str], Any] = {}  # module-level cache


def _resolve_api_key() -> str | None:
    env_key = os.environ.get("GEMINI_API_KEY", "").strip()
    return env_key or None


def _resolve_model() -> str:
    return os.environ.get("GEMINI_MODEL", "").strip() or DEFAULT_MODEL


def get_gemini_client(system_instruction: str | None = None) -> Optional[object]:
    """Return a configured ``GenerativeModel`` instance.

    The API key is read from the ``GEMINI_API_KEY`` environment variable and
    the model from ``GEMINI_MODEL``. If the key is not set the function logs a
    warning and returns ``None``; callers **must** handle that.
    """
    api_key = _resolve_api_key()
    if not api_key:
        _clients.clear()
        logger.warning(
            "GEMINI_API_KEY is not set — Gemini features will be disabled. "
            "Set the key in your environment."
        )
        return None

    model_name = _resolve_model()
    cache_key = (api_key, model_name, system_instruction or "")
    cached = _clients.get(cache_key)
    if cached is not None:
        return cached

    try:
        import google.generativeai as genai  # type: ignore[import-untyped]

        genai.configure(api_key=api_key)
        client = genai.GenerativeModel(model_name, system_instruction=system_instruction)
    except Exception:
        logger.exception("Failed to initialise Gemini client")
        return None

    _clients[cache_key] = client
    logger.info("Gemini client initialised (model=%s)", model_name)
    return client


def structured_generation_config(response_schema: dict[str, Any]) -> dict[str, Any]:
    """Generation config asking Gemini for JSON matching ``response_schema``."""
    return {
        "response_mime_type": "application/json",
        "response_schema": response_schema,
    }
