# voice_intake/intake/__init__.py
from .stages import Gender, InputMethod, IntakeStep, VisitType
from .state import IntakeState, PatientInfo, ReviewableContent, TranscriptState, UIState
from .machine import can_transition, initial_state, reduce
from .session import IntakeSession

__all__ = [
    "Gender",
    "InputMethod",
    "IntakeStep",
    "VisitType",
    "IntakeState",
    "PatientInfo",
    "ReviewableContent",
    "TranscriptState",
    "UIState",
    "can_transition",
    "initial_state",
    "reduce",
    "IntakeSession",
]
