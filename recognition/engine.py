from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from common.schemas import (
    ClientMessageType,
    CommandMessage,
    EngineCommand,
    EngineErrorMessage,
    RecognitionErrorEvent,
    RecognitionEvent,
    ResultMessage,
)

logger = logging.getLogger(__name__)

# Checked in order; the first one the platform provides wins.
RECOGNITION_VARIANTS = ("SpeechRecognition", "webkitSpeechRecognition")

ResultHandler = Callable[[RecognitionEvent], None]
ErrorHandler = Callable[[RecognitionErrorEvent], None]
EndHandler = Callable[[], None]


class RecognitionEngine(Protocol):
    continuous: bool
    interim_results: bool
    lang: str
    on_result: Optional[ResultHandler]
    on_error: Optional[ErrorHandler]
    on_end: Optional[EndHandler]

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def abort(self) -> None: ...


EngineFactory = Callable[[], RecognitionEngine]


def get_recognition_factory(platform: Mapping[str, Optional[EngineFactory]]) -> Optional[EngineFactory]:
    """Return the engine constructor the platform provides, or None."""
    for name in RECOGNITION_VARIANTS:
        factory = platform.get(name)
        if factory is not None:
            logger.debug("Using recognition variant %s", name)
            return factory
    return None


class BridgeRecognitionEngine:
    """Recognition engine running in the connected browser.

    Commands are queued in ``outbox`` for the socket owner to send; events
    the browser reports are handed to :meth:`dispatch`.
    """

    def __init__(self, lang: str = "en-US", continuous: bool = True, interim_results: bool = True) -> None:
        self.lang = lang
        self.continuous = continuous
        self.interim_results = interim_results
        self.on_result: Optional[ResultHandler] = None
        self.on_error: Optional[ErrorHandler] = None
        self.on_end: Optional[EndHandler] = None
        self.outbox: list[CommandMessage] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            raise RuntimeError("Speech recognition has already started.")
        self._running = True
        self._send(EngineCommand.start)

    def stop(self) -> None:
        if not self._running:
            raise RuntimeError("Speech recognition is not running.")
        self._running = False
        self._send(EngineCommand.stop)

    def abort(self) -> None:
        if not self._running:
            raise RuntimeError("Speech recognition was never started.")
        self._running = False
        self._send(EngineCommand.abort)

    def drain(self) -> list[CommandMessage]:
        pending, self.outbox = self.outbox, []
        return pending

    def dispatch(self, message: dict[str, Any]) -> None:
        """Route one browser event to the registered handler."""
        kind = message.get("type")
        if kind == ClientMessageType.result:
            if self.on_result is not None:
                self.on_result(ResultMessage(**message))
        elif kind == ClientMessageType.error:
            self._running = False
            if self.on_error is not None:
                self.on_error(EngineErrorMessage(**message))
        elif kind == ClientMessageType.end:
            self._running = False
            if self.on_end is not None:
                self.on_end()
        else:
            raise ValueError(f"Unknown engine event: {kind!r}")

    def _send(self, command: EngineCommand) -> None:
        self.outbox.append(
            CommandMessage(
                command=command,
                lang=self.lang,
                continuous=self.continuous,
                interim_results=self.interim_results,
            )
        )
