from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from common.config import GatewaySettings
from common.schemas import (
    ClientMessageType,
    ClinicalDataMessage,
    ErrorMessage,
    HelloMessage,
    TranscriptMessage,
)
from gateway.extraction_client import EXTRACTION_FAILED_MESSAGE, error_detail, request_clinical_data
from gateway.session import Session, SessionManager
from recognition.errors import RecognitionError
from recognition.session import UNAVAILABLE_MESSAGE

logger = logging.getLogger(__name__)

EMPTY_TRANSCRIPT_MESSAGE = "Transcript is empty; please capture audio first."
MALFORMED_MESSAGE = "Malformed message"
ENGINE_EVENTS = (ClientMessageType.result, ClientMessageType.error, ClientMessageType.end)

settings = GatewaySettings()
app = FastAPI(title="Ambient Scribe Gateway")
manager = SessionManager(max_sessions=settings.max_sessions, settings=settings)


@app.get("/health")
async def health():
    return {"status": "ok", "active_sessions": manager.active_count}


@app.websocket("/scribe")
async def scribe_endpoint(ws: WebSocket):
    await ws.accept()
    stream_id: str | None = None
    session: Session | None = None
    try:
        # Expect a hello message first (text frame)
        msg = decode_message(await ws.receive_text())
        hello = None
        if msg is not None and msg.get("type") == ClientMessageType.hello:
            try:
                hello = HelloMessage(**msg)
            except ValidationError as exc:
                logger.warning("Malformed hello message: %s", exc)
        if hello is None:
            await ws.send_text(ErrorMessage(stream_id="", detail="Expected hello message").model_dump_json())
            await ws.close()
            return

        stream_id = hello.stream_id
        session = await manager.create(stream_id, ws, capabilities=hello.capabilities)
        await _publish(session)

        while True:
            message = await ws.receive()
            if message.get("type") == "websocket.disconnect":
                break
            if message.get("text") is None:
                continue
            data = decode_message(message["text"])
            if data is None:
                await _send_error(session, MALFORMED_MESSAGE)
                continue
            await handle_client_message(session, data)

    except WebSocketDisconnect:
        logger.info("Client disconnected: %s", stream_id)
    except RuntimeError as exc:
        logger.warning("Session error: %s", exc)
        await ws.send_text(ErrorMessage(stream_id=stream_id or "", detail=str(exc)).model_dump_json())
    except Exception:
        logger.exception("Unexpected error in scribe endpoint")
    finally:
        if session is not None:
            await manager.remove(session.stream_id)


def decode_message(raw: str) -> dict[str, Any] | None:
    """Parse a client text frame; None unless it is a JSON object."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Dropping non-JSON client frame")
        return None
    if not isinstance(data, dict):
        logger.warning("Dropping client frame that is not a JSON object")
        return None
    return data


async def handle_client_message(session: Session, data: dict[str, Any]) -> None:
    """Apply one client message to the session and push the resulting state."""
    kind = data.get("type")
    recognition = session.recognition

    if kind == ClientMessageType.start:
        try:
            recognition.start_session()
        except RecognitionError as exc:
            logger.info("Start rejected for %s: %s", session.stream_id, exc)
    elif kind == ClientMessageType.stop:
        recognition.stop_session()
    elif kind in ENGINE_EVENTS:
        if session.engine is None:
            await _send_error(session, UNAVAILABLE_MESSAGE)
        else:
            try:
                session.engine.dispatch(data)
            except ValidationError as exc:
                logger.warning("Malformed %s event from %s: %s", kind, session.stream_id, exc)
                await _send_error(session, f"Malformed {kind} event")
    elif kind == ClientMessageType.draft:
        await _send_draft(session)
    else:
        await _send_error(session, f"Unknown message type: {kind!r}")

    await _flush_commands(session)
    await _publish(session)


async def _send_draft(session: Session) -> None:
    transcript = session.recognition.final_transcript
    if not transcript.strip():
        await _send_error(session, EMPTY_TRANSCRIPT_MESSAGE)
        return
    try:
        clinical = await request_clinical_data(transcript, settings)
    except httpx.HTTPError as exc:
        logger.warning("Clinical extraction failed for %s: %s", session.stream_id, exc)
        await _send_error(session, error_detail(exc))
        return
    except ValueError as exc:
        logger.warning("Unexpected extraction reply for %s: %s", session.stream_id, exc)
        await _send_error(session, EXTRACTION_FAILED_MESSAGE)
        return
    await session.client_ws.send_text(
        ClinicalDataMessage(stream_id=session.stream_id, data=clinical).model_dump_json()
    )


async def _flush_commands(session: Session) -> None:
    if session.engine is None:
        return
    for command in session.engine.drain():
        await session.client_ws.send_text(command.model_dump_json())


async def _publish(session: Session) -> None:
    snapshot = session.recognition.snapshot()
    await session.client_ws.send_text(
        TranscriptMessage(stream_id=session.stream_id, snapshot=snapshot).model_dump_json()
    )


async def _send_error(session: Session, detail: str) -> None:
    await session.client_ws.send_text(ErrorMessage(stream_id=session.stream_id, detail=detail).model_dump_json())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
