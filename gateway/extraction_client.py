from __future__ import annotations

import logging

import httpx

from common.config import GatewaySettings
from common.schemas import ClinicalData, ExtractRequest

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_MESSAGE = "Failed to extract clinical data."


async def request_clinical_data(
    transcript: str,
    settings: GatewaySettings | None = None,
) -> ClinicalData:
    """POST the transcript to the extraction service and parse its reply."""
    settings = settings or GatewaySettings()
    payload = ExtractRequest(transcript=transcript).model_dump()

    async with httpx.AsyncClient(timeout=settings.extraction_timeout_s) as client:
        resp = await client.post(settings.extraction_url, json=payload)
        resp.raise_for_status()
        return ClinicalData(**resp.json())


def error_detail(exc: httpx.HTTPError) -> str:
    """Best user-facing message for a failed extraction call."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        detail = body.get("detail") if isinstance(body, dict) else None
        if isinstance(detail, str) and detail:
            return detail
    return EXTRACTION_FAILED_MESSAGE
