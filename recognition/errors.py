from __future__ import annotations


class RecognitionError(RuntimeError):
    """Base class for recognition session failures.

    ``str(exc)`` is the message shown to the user.
    """


class UnavailableError(RecognitionError):
    """No speech-recognition capability exists for this session."""


class StartError(RecognitionError):
    """The engine rejected ``start()``; the caller may retry."""


class EngineError(RecognitionError):
    """Error reported by the engine while listening."""
