# voice_intake/intake/reconciler.py
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Sequence, Tuple

from voice_intake.intake.state import TranscriptState


class TranscriptReconciler:
    """
    Merges recognition fragments into one authoritative transcript.

    Live recognition writes finalized segments (append-only) and a single
    provisional tail that every new result replaces. A file transcript
    replaces both at once. Only `authoritative_text` is ever handed to the
    AI pipeline, so summarization never sees half-recognized words.
    """

    @staticmethod
    def begin_session() -> TranscriptState:
        return TranscriptState()

    @staticmethod
    def append_final(state: TranscriptState, text: str) -> TranscriptState:
        return TranscriptState(
            finalized_text=state.finalized_text + text,
            provisional_text="",
        )

    @staticmethod
    def set_provisional(state: TranscriptState, text: str) -> TranscriptState:
        return replace(state, provisional_text=text)

    @staticmethod
    def apply_batch(
        state: TranscriptState,
        finalized: Iterable[str],
        provisional: str = "",
    ) -> TranscriptState:
        for segment in finalized:
            state = TranscriptReconciler.append_final(state, segment)
        return TranscriptReconciler.set_provisional(state, provisional)

    @staticmethod
    def replace_with(text: str) -> TranscriptState:
        return TranscriptState(finalized_text=text, provisional_text="")

    @staticmethod
    def close_session(state: TranscriptState) -> TranscriptState:
        """Drop the provisional tail; the engine will never finalize it now."""
        return replace(state, provisional_text="")

    @staticmethod
    def authoritative_text(state: TranscriptState) -> str:
        return state.finalized_text

    @staticmethod
    def is_blank(text: str | None) -> bool:
        return not (text or "").strip()


def split_results(results: Sequence[Tuple[str, bool]], start: int = 0) -> Tuple[List[str], str]:
    """
    Split an engine result list of (transcript, is_final) pairs, from `start`
    on, into the finalized segments and the concatenated provisional tail.
    """
    finalized: List[str] = []
    provisional = ""
    for transcript, is_final in results[start:]:
        if is_final:
            finalized.append(transcript)
        else:
            provisional += transcript
    return finalized, provisional
