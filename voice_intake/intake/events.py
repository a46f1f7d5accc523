# voice_intake/intake/events.py
"""
Typed events flowing from the capture adapters and the UI into the intake
state machine, plus the single-consumer channel that carries them.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterator, Optional, Union

from voice_intake.errors import RecognitionErrorKind
from voice_intake.intake.stages import InputMethod, IntakeStep


# Capture events (adapter -> state machine)

@dataclass(frozen=True)
class CaptureStarted:
    pass


@dataclass(frozen=True)
class PartialSegment:
    text: str


@dataclass(frozen=True)
class FinalSegment:
    text: str


@dataclass(frozen=True)
class CaptureFailed:
    kind: RecognitionErrorKind
    message: str


@dataclass(frozen=True)
class CaptureEnded:
    pass


@dataclass(frozen=True)
class TranscriptReady:
    """Whole transcript of an uploaded or recorded file."""

    text: str


# Pipeline events

@dataclass(frozen=True)
class LoadingChanged:
    loading: bool


@dataclass(frozen=True)
class SummaryReady:
    summary: str


@dataclass(frozen=True)
class DiagnosisReady:
    diagnosis: str


@dataclass(frozen=True)
class ErrorRaised:
    message: str


# UI events

@dataclass(frozen=True)
class PatientFieldChanged:
    name: str
    value: Optional[str]


@dataclass(frozen=True)
class TextEdited:
    text: str


@dataclass(frozen=True)
class InputMethodSelected:
    method: InputMethod
    advisory: str = ""


@dataclass(frozen=True)
class StepRequested:
    step: IntakeStep


@dataclass(frozen=True)
class Reset:
    pass


IntakeEvent = Union[
    CaptureStarted,
    PartialSegment,
    FinalSegment,
    CaptureFailed,
    CaptureEnded,
    TranscriptReady,
    LoadingChanged,
    SummaryReady,
    DiagnosisReady,
    ErrorRaised,
    PatientFieldChanged,
    TextEdited,
    InputMethodSelected,
    StepRequested,
    Reset,
]


class EventChannel:
    """
    FIFO queue with exactly one consumer. Producers may publish while the
    consumer is draining; those events are delivered in the same drain.
    """

    def __init__(self) -> None:
        self._queue: Deque[IntakeEvent] = deque()
        self._consumer: Optional[Callable[[], None]] = None

    def subscribe(self, consumer: Callable[[], None]) -> None:
        """Register the consumer, woken after every publish."""
        if self._consumer is not None:
            raise RuntimeError("EventChannel already has a consumer")
        self._consumer = consumer

    def publish(self, event: IntakeEvent) -> None:
        self._queue.append(event)
        if self._consumer is not None:
            self._consumer()

    def drain(self) -> Iterator[IntakeEvent]:
        while self._queue:
            yield self._queue.popleft()

    def clear(self) -> None:
        self._queue.clear()

    def __len__(self) -> int:
        return len(self._queue)
