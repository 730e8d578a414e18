from __future__ import annotations

import logging
from typing import Any

import httpx

from common.config import ExtractionSettings

logger = logging.getLogger(__name__)


async def chat(
    message: str,
    preamble: str,
    settings: ExtractionSettings | None = None,
) -> dict[str, Any]:
    """Call Cohere /v1/chat and return the decoded response body."""
    settings = settings or ExtractionSettings()
    url = f"{settings.cohere_api_url.rstrip('/')}/v1/chat"

    payload = {
        "model": settings.model_name,
        "preamble": preamble,
        "message": message,
    }
    headers = {
        "Authorization": f"Bearer {settings.cohere_api_key}",
        "Accept": "application/json",
    }

    async with httpx.AsyncClient(timeout=settings.timeout_s) as client:
        resp = await client.post(url, json=payload, headers=headers)
        resp.raise_for_status()
        return resp.json()
