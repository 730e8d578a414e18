from __future__ import annotations

import logging
from typing import Optional

from common.schemas import RecognitionErrorEvent, RecognitionEvent, TranscriptSnapshot
from recognition.accumulator import fold_event, on_session_end
from recognition.engine import EngineFactory, RecognitionEngine
from recognition.errors import EngineError, StartError, UnavailableError
from recognition.models import SessionStatus, TranscriptState

logger = logging.getLogger(__name__)

UNSUPPORTED_MESSAGE = "Speech recognition is not supported in this browser."
UNAVAILABLE_MESSAGE = "Speech recognition is not available."
START_FAILED_MESSAGE = "Unable to start speech recognition."
GENERIC_ENGINE_MESSAGE = "Speech recognition error occurred."


class RecognitionSession:
    """Owns one recognition engine and the transcript folded from its events.

    Moves between ``idle`` and ``listening``. Result events are only applied
    while listening; anything arriving after stop, end or error is dropped.
    """

    def __init__(
        self,
        factory: Optional[EngineFactory],
        lang: str = "en-US",
        continuous: bool = True,
        interim_results: bool = True,
    ) -> None:
        self.state = TranscriptState()
        self.status = SessionStatus.idle
        self.error: Optional[str] = None
        self.last_error: Optional[EngineError] = None
        self._engine: Optional[RecognitionEngine] = None
        self._unavailable = factory is None

        if factory is None:
            self.error = UNSUPPORTED_MESSAGE
            logger.warning("No speech recognition capability available")
            return

        engine = factory()
        engine.continuous = continuous
        engine.interim_results = interim_results
        engine.lang = lang
        engine.on_result = self._handle_result
        engine.on_error = self._handle_error
        engine.on_end = self._handle_end
        self._engine = engine

    @property
    def engine(self) -> Optional[RecognitionEngine]:
        return self._engine

    @property
    def is_listening(self) -> bool:
        return self.status is SessionStatus.listening

    @property
    def unavailable(self) -> bool:
        return self._unavailable

    @property
    def interim_transcript(self) -> str:
        return self.state.interim_transcript

    @property
    def final_transcript(self) -> str:
        return self.state.final_transcript

    def start_session(self) -> None:
        """Start listening.

        Raises UnavailableError when there is no engine and StartError when
        the engine refuses to start. Either way the session stays idle and
        ``error`` holds the message. Calling this while already listening
        does nothing.
        """
        if self.is_listening:
            logger.debug("start_session ignored: already listening")
            return

        if self._engine is None:
            if not self._unavailable:
                self.error = UNAVAILABLE_MESSAGE
            raise UnavailableError(self.error or UNAVAILABLE_MESSAGE)

        self.error = None
        try:
            self._engine.start()
        except Exception as exc:
            self.error = str(exc) or START_FAILED_MESSAGE
            logger.warning("Speech recognition failed to start: %s", self.error)
            raise StartError(self.error) from exc
        self.status = SessionStatus.listening

    def stop_session(self) -> None:
        if self._engine is None:
            return
        try:
            self._engine.stop()
        except Exception:
            logger.debug("Ignoring error from redundant stop", exc_info=True)
        self._finish()

    def close(self) -> None:
        """Detach handlers and release the engine.

        Handlers are removed before stop/abort so no callback can reach the
        session afterwards, even if the engine raises.
        """
        engine, self._engine = self._engine, None
        if engine is None:
            return
        engine.on_result = None
        engine.on_error = None
        engine.on_end = None
        try:
            engine.stop()
        except Exception:
            logger.debug("Ignoring error from stop during teardown", exc_info=True)
        try:
            engine.abort()
        except Exception:
            logger.debug("Ignoring error from abort during teardown", exc_info=True)
        self._finish()

    def snapshot(self) -> TranscriptSnapshot:
        return TranscriptSnapshot(
            is_listening=self.is_listening,
            unavailable=self._unavailable,
            error=self.error,
            interim_transcript=self.state.interim_transcript,
            final_transcript=self.state.final_transcript,
        )

    def _finish(self) -> None:
        self.status = SessionStatus.idle
        self.state = on_session_end(self.state)

    def _handle_result(self, event: RecognitionEvent) -> None:
        if not self.is_listening:
            logger.debug("Dropping result event received while idle")
            return
        self.state = fold_event(self.state, event)

    def _handle_error(self, event: RecognitionErrorEvent) -> None:
        if event.error:
            message = f"Speech recognition error: {event.error}"
        else:
            message = GENERIC_ENGINE_MESSAGE
        logger.warning("%s", message)
        self.error = message
        self.last_error = EngineError(message)
        self.status = SessionStatus.idle

    def _handle_end(self) -> None:
        self._finish()
