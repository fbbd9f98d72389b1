import logging
from typing import Optional

import httpx

from .config import load_settings
from .errors import ConfigurationError, InvalidResponseError, NotFoundError
from .prompts import SYSTEM_INSTRUCTION
from .upstream import raise_for_upstream_status, request_with_retry

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
SERVICE_NAME = "Gemini API"


def gemini_url(model: str) -> str:
    return f"{GEMINI_BASE_URL}/models/{model}:generateContent"


def _extract_text(data) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise InvalidResponseError(f"Unexpected response from Gemini API: {exc!r}") from exc
    if not text.strip():
        raise InvalidResponseError("Gemini API returned an empty analysis.")
    return text


async def generate_analysis(
    prompt: str,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Ask Gemini for a narrative review of the rendered profile prompt."""
    settings = load_settings()
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY is not configured.")

    payload = {
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": settings.gemini_temperature},
    }

    async with httpx.AsyncClient(timeout=settings.gemini_timeout, transport=transport) as client:
        response = await request_with_retry(
            client,
            "POST",
            gemini_url(settings.gemini_model),
            json=payload,
            headers={"x-goog-api-key": settings.gemini_api_key},
            service=SERVICE_NAME,
            max_retries=settings.upstream_max_retries,
            backoff=settings.upstream_retry_backoff,
        )

    if response.status_code == 404:
        raise NotFoundError(f"Gemini model '{settings.gemini_model}' was not found.")
    raise_for_upstream_status(response, SERVICE_NAME)

    try:
        data = response.json()
    except ValueError as exc:
        raise InvalidResponseError("Gemini API returned a non-JSON response.") from exc

    text = _extract_text(data)
    logger.info(
        "Gemini analysis generated with %s (%d prompt chars -> %d reply chars)",
        settings.gemini_model,
        len(prompt),
        len(text),
    )
    return text
