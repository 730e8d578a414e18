from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from fastapi import WebSocket

from common.config import GatewaySettings
from recognition.engine import RECOGNITION_VARIANTS, BridgeRecognitionEngine, get_recognition_factory
from recognition.session import RecognitionSession

logger = logging.getLogger(__name__)


@dataclass
class Session:
    stream_id: str
    client_ws: WebSocket
    recognition: RecognitionSession
    engine: BridgeRecognitionEngine | None = None


def build_recognition(capabilities: list[str], settings: GatewaySettings) -> tuple[RecognitionSession, BridgeRecognitionEngine | None]:
    """Create a recognition session for the variants the browser reported."""
    created: list[BridgeRecognitionEngine] = []

    def make_engine() -> BridgeRecognitionEngine:
        engine = BridgeRecognitionEngine()
        created.append(engine)
        return engine

    platform = {name: make_engine for name in RECOGNITION_VARIANTS if name in capabilities}
    recognition = RecognitionSession(
        get_recognition_factory(platform),
        lang=settings.recognition_lang,
        continuous=settings.continuous,
        interim_results=settings.interim_results,
    )
    return recognition, (created[0] if created else None)


class SessionManager:
    def __init__(self, max_sessions: int = 10, settings: GatewaySettings | None = None) -> None:
        self._max = max_sessions
        self._settings = settings or GatewaySettings()
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    async def create(self, stream_id: str, client_ws: WebSocket, capabilities: list[str] | None = None) -> Session:
        async with self._lock:
            if len(self._sessions) >= self._max:
                raise RuntimeError(f"Max sessions ({self._max}) reached")
            if stream_id in self._sessions:
                raise RuntimeError(f"Session {stream_id} already exists")
            recognition, engine = build_recognition(capabilities or [], self._settings)
            session = Session(stream_id=stream_id, client_ws=client_ws, recognition=recognition, engine=engine)
            self._sessions[stream_id] = session
            logger.info("Session created: %s (%d active)", stream_id, len(self._sessions))
            return session

    async def remove(self, stream_id: str) -> None:
        async with self._lock:
            session = self._sessions.pop(stream_id, None)
            if session is not None:
                session.recognition.close()
            logger.info("Session removed: %s (%d active)", stream_id, len(self._sessions))

    def get(self, stream_id: str) -> Session | None:
        return self._sessions.get(stream_id)

    @property
    def active_count(self) -> int:
        return len(self._sessions)
