# voice_intake/intake/machine.py
"""
Pure reducers for the five-step intake flow.

    1 patient info -> 2 voice input -> 3 confirm -> 4 submitted -> 5 clinician view

`reduce(state, event)` never mutates `state` and never performs I/O, so the
whole flow can be driven and asserted on without a UI.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, FrozenSet, Tuple, Type

from voice_intake.intake.events import (
    CaptureEnded,
    CaptureFailed,
    CaptureStarted,
    DiagnosisReady,
    ErrorRaised,
    FinalSegment,
    InputMethodSelected,
    IntakeEvent,
    LoadingChanged,
    PartialSegment,
    PatientFieldChanged,
    Reset,
    StepRequested,
    SummaryReady,
    TextEdited,
    TranscriptReady,
)
from voice_intake.intake.reconciler import TranscriptReconciler
from voice_intake.intake.stages import InputMethod, IntakeStep
from voice_intake.intake.state import IntakeState, UIState


# Allowed (from, to) pairs. Anything else, including skips, is refused.
TRANSITIONS: FrozenSet[Tuple[IntakeStep, IntakeStep]] = frozenset({
    (IntakeStep.PATIENT_INFO, IntakeStep.VOICE_INPUT),
    (IntakeStep.VOICE_INPUT, IntakeStep.PATIENT_INFO),
    (IntakeStep.VOICE_INPUT, IntakeStep.CONFIRM),
    (IntakeStep.CONFIRM, IntakeStep.VOICE_INPUT),
    (IntakeStep.CONFIRM, IntakeStep.SUBMITTED),
    (IntakeStep.SUBMITTED, IntakeStep.CLINICIAN_VIEW),
})


def initial_state(input_method: InputMethod = InputMethod.SPEECH) -> IntakeState:
    return IntakeState(ui=UIState(input_method=input_method))


def has_intake_text(state: IntakeState) -> bool:
    return any(
        not TranscriptReconciler.is_blank(text)
        for text in (
            state.content.editable_text,
            state.content.summary,
            state.transcript.display_text,
        )
    )


def can_transition(state: IntakeState, target: IntakeStep) -> bool:
    current = state.ui.current_step
    if (current, target) not in TRANSITIONS:
        return False
    if current == IntakeStep.PATIENT_INFO:
        return state.patient.is_complete()
    if current == IntakeStep.VOICE_INPUT and target == IntakeStep.CONFIRM:
        return has_intake_text(state)
    return True


def _with_ui(state: IntakeState, **changes) -> IntakeState:
    return replace(state, ui=replace(state.ui, **changes))


def _with_content(state: IntakeState, **changes) -> IntakeState:
    return replace(state, content=replace(state.content, **changes))


# ------------------------------------------------------------------
# Capture events
# ------------------------------------------------------------------

def _capture_started(state: IntakeState, event: CaptureStarted) -> IntakeState:
    state = replace(state, transcript=TranscriptReconciler.begin_session())
    return _with_ui(state, recording=True, error="")


def _final_segment(state: IntakeState, event: FinalSegment) -> IntakeState:
    return replace(
        state,
        transcript=TranscriptReconciler.append_final(state.transcript, event.text),
    )


def _partial_segment(state: IntakeState, event: PartialSegment) -> IntakeState:
    return replace(
        state,
        transcript=TranscriptReconciler.set_provisional(state.transcript, event.text),
    )


def _capture_failed(state: IntakeState, event: CaptureFailed) -> IntakeState:
    return _with_ui(state, recording=False, error=event.message)


def _capture_ended(state: IntakeState, event: CaptureEnded) -> IntakeState:
    state = replace(state, transcript=TranscriptReconciler.close_session(state.transcript))
    return _with_ui(state, recording=False)


def _transcript_ready(state: IntakeState, event: TranscriptReady) -> IntakeState:
    state = replace(state, transcript=TranscriptReconciler.replace_with(event.text))
    return _with_ui(state, error="")


# ------------------------------------------------------------------
# Pipeline events
# ------------------------------------------------------------------

def _loading_changed(state: IntakeState, event: LoadingChanged) -> IntakeState:
    return _with_ui(state, loading=event.loading)


def _summary_ready(state: IntakeState, event: SummaryReady) -> IntakeState:
    state = _with_ui(state, error="")
    if state.content.user_edited:
        return _with_content(state, summary=event.summary)
    return _with_content(state, summary=event.summary, editable_text=event.summary)


def _diagnosis_ready(state: IntakeState, event: DiagnosisReady) -> IntakeState:
    state = _with_ui(state, error="")
    return _with_content(state, diagnosis=event.diagnosis)


def _error_raised(state: IntakeState, event: ErrorRaised) -> IntakeState:
    return _with_ui(state, error=event.message)


# ------------------------------------------------------------------
# UI events
# ------------------------------------------------------------------

def _patient_field_changed(state: IntakeState, event: PatientFieldChanged) -> IntakeState:
    return replace(state, patient=state.patient.with_field(event.name, event.value))


def _text_edited(state: IntakeState, event: TextEdited) -> IntakeState:
    return _with_content(state, editable_text=event.text, user_edited=True)


def _input_method_selected(state: IntakeState, event: InputMethodSelected) -> IntakeState:
    return _with_ui(state, input_method=event.method, notice=event.advisory)


def _step_requested(state: IntakeState, event: StepRequested) -> IntakeState:
    if not can_transition(state, event.step):
        return state
    return _with_ui(state, current_step=event.step, error="")


def _reset(state: IntakeState, event: Reset) -> IntakeState:
    # The input method belongs to the platform, not to the intake.
    return initial_state(state.ui.input_method)


_REDUCERS: Dict[Type, Callable[[IntakeState, IntakeEvent], IntakeState]] = {
    CaptureStarted: _capture_started,
    FinalSegment: _final_segment,
    PartialSegment: _partial_segment,
    CaptureFailed: _capture_failed,
    CaptureEnded: _capture_ended,
    TranscriptReady: _transcript_ready,
    LoadingChanged: _loading_changed,
    SummaryReady: _summary_ready,
    DiagnosisReady: _diagnosis_ready,
    ErrorRaised: _error_raised,
    PatientFieldChanged: _patient_field_changed,
    TextEdited: _text_edited,
    InputMethodSelected: _input_method_selected,
    StepRequested: _step_requested,
    Reset: _reset,
}


def reduce(state: IntakeState, event: IntakeEvent) -> IntakeState:
    try:
        reducer = _REDUCERS[type(event)]
    except KeyError:
        raise TypeError(f"Unhandled intake event: {event!r}") from None
    return reducer(state, event)
