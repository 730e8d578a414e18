from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# --- Speech-recognition events forwarded by the browser ---

class RecognitionAlternative(BaseModel):
    transcript: Optional[str] = None
    confidence: Optional[float] = None


class RecognitionResult(BaseModel):
    is_final: bool = False
    alternatives: Optional[list[Optional[RecognitionAlternative]]] = None

    @property
    def text(self) -> str:
        """Trimmed text of the top alternative; empty when missing."""
        if not self.alternatives:
            return ""
        top = self.alternatives[0]
        if top is None or not top.transcript:
            return ""
        return top.transcript.strip()


class RecognitionEvent(BaseModel):
    result_index: int = Field(default=0, ge=0)
    results: list[Optional[RecognitionResult]] = []


class RecognitionErrorEvent(BaseModel):
    error: Optional[str] = None


# --- WebSocket messages: browser ↔ gateway ---

class ClientMessageType(str, Enum):
    hello = "hello"
    start = "start"
    stop = "stop"
    result = "result"
    error = "error"
    end = "end"
    draft = "draft"


class HelloMessage(BaseModel):
    type: ClientMessageType = ClientMessageType.hello
    stream_id: str
    capabilities: list[str] = []


class ResultMessage(RecognitionEvent):
    type: ClientMessageType = ClientMessageType.result


class EngineErrorMessage(RecognitionErrorEvent):
    type: ClientMessageType = ClientMessageType.error


class EngineCommand(str, Enum):
    start = "start"
    stop = "stop"
    abort = "abort"


class ServerMessageType(str, Enum):
    command = "command"
    transcript = "transcript"
    clinical_data = "clinical_data"
    error = "error"


class CommandMessage(BaseModel):
    type: ServerMessageType = ServerMessageType.command
    command: EngineCommand
    lang: str = "en-US"
    continuous: bool = True
    interim_results: bool = True


class TranscriptSnapshot(BaseModel):
    is_listening: bool = False
    unavailable: bool = False
    error: Optional[str] = None
    interim_transcript: str = ""
    final_transcript: str = ""


class TranscriptMessage(BaseModel):
    type: ServerMessageType = ServerMessageType.transcript
    stream_id: str
    snapshot: TranscriptSnapshot


class ErrorMessage(BaseModel):
    type: ServerMessageType = ServerMessageType.error
    stream_id: str
    detail: str


# --- Clinical extraction request / response ---

class ExtractRequest(BaseModel):
    transcript: str = ""


class ClinicalData(BaseModel):
    symptoms: list[str] = []
    history: list[str] = []
    assessment: list[str] = []
    medications: list[str] = []
    plan: list[str] = []


class ClinicalDataMessage(BaseModel):
    type: ServerMessageType = ServerMessageType.clinical_data
    stream_id: str
    data: ClinicalData
