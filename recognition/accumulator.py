from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from common.schemas import RecognitionEvent, RecognitionResult
from recognition.models import TranscriptSegments, TranscriptState


def _join(left: str, right: str) -> str:
    return f"{left} {right}" if left else right


def map_transcript_segments(
    results: Sequence[Optional[RecognitionResult]],
    start_index: int = 0,
) -> TranscriptSegments:
    """Split the new part of a result batch into final and interim text.

    Entries before ``start_index`` were already reported by the engine and
    are skipped. Missing results and blank alternatives contribute nothing.
    """
    final = ""
    interim = ""
    for result in results[start_index:]:
        if result is None:
            continue
        text = result.text
        if not text:
            continue
        if result.is_final:
            final = _join(final, text)
        else:
            interim = _join(interim, text)
    return TranscriptSegments(final=final, interim=interim)


def fold_event(state: TranscriptState, event: RecognitionEvent) -> TranscriptState:
    """Apply one recognition event and return the new transcript state."""
    segments = map_transcript_segments(event.results, event.result_index)
    final_transcript = state.final_transcript
    if segments.final:
        if final_transcript:
            final_transcript = f"{final_transcript} {segments.final}".strip()
        else:
            final_transcript = segments.final
    return TranscriptState(
        final_transcript=final_transcript,
        interim_transcript=segments.interim,
    )


def on_session_end(state: TranscriptState) -> TranscriptState:
    return replace(state, interim_transcript="")
