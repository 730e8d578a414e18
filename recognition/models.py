"""Internal state for transcript accumulation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TranscriptState:
    final_transcript: str = ""
    interim_transcript: str = ""


@dataclass(frozen=True)
class TranscriptSegments:
    final: str = ""
    interim: str = ""


class SessionStatus(str, Enum):
    idle = "idle"
    listening = "listening"
