from __future__ import annotations

import json
import logging

import httpx
from fastapi import FastAPI, HTTPException

from common.config import ExtractionSettings
from common.schemas import ClinicalData, ExtractRequest
from extraction_service.cohere_client import chat
from extraction_service.prompts import CLINICAL_FIELDS, SYSTEM_PROMPT, ensure_string_list, reply_text

logger = logging.getLogger(__name__)

settings = ExtractionSettings()
app = FastAPI(title="Clinical Extraction Service")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/extract-clinical-data", response_model=ClinicalData)
async def extract_clinical_data(req: ExtractRequest):
    transcript = req.transcript.strip()
    if not transcript:
        return ClinicalData()

    if not settings.cohere_api_key:
        raise HTTPException(
            status_code=503,
            detail="Missing Cohere API key (set EXTRACTION_COHERE_API_KEY)",
        )

    try:
        data = await chat(transcript, SYSTEM_PROMPT, settings)
    except (httpx.HTTPError, ValueError):
        logger.exception("Cohere call failed")
        raise HTTPException(status_code=502, detail="Cohere API unavailable")

    raw = reply_text(data) if isinstance(data, dict) else ""
    if not raw:
        logger.error("Cohere returned: %s", json.dumps(data, indent=2))
        raise HTTPException(status_code=502, detail="Cohere API returned empty content")

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.error("Raw Cohere text: %s", raw)
        raise HTTPException(status_code=502, detail="Cohere response was not valid JSON")
    if not isinstance(parsed, dict):
        logger.error("Cohere JSON is not an object: %s", raw)
        raise HTTPException(status_code=502, detail="Cohere response was not valid JSON")

    return ClinicalData(**{field: ensure_string_list(parsed.get(field)) for field in CLINICAL_FIELDS})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
