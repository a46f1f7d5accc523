# voice_intake/intake/state.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from voice_intake.intake.stages import Gender, InputMethod, IntakeStep, VisitType


@dataclass(frozen=True)
class PatientInfo:
    visit_type: Optional[VisitType] = None
    last_name: str = ""
    first_name: str = ""
    gender: Optional[Gender] = None

    def is_complete(self) -> bool:
        return (
            self.visit_type is not None
            and bool(self.last_name)
            and bool(self.first_name)
            and self.gender is not None
        )

    def with_field(self, name: str, value) -> "PatientInfo":
        """
        Return a copy with one field set; enum fields accept their raw value.
        Raises ValueError for unknown fields or values outside the enum.
        """
        if name == "visit_type":
            value = VisitType(value) if value else None
        elif name == "gender":
            value = Gender(value) if value else None
        elif name in ("last_name", "first_name"):
            value = value or ""
        else:
            raise ValueError(f"Unknown patient field: {name!r}")
        return replace(self, **{name: value})


@dataclass(frozen=True)
class TranscriptState:
    """
    finalized_text is what the engine will not revise any more; it is the
    authoritative input for the AI calls. provisional_text is only shown.
    """

    finalized_text: str = ""
    provisional_text: str = ""

    @property
    def display_text(self) -> str:
        return self.finalized_text + self.provisional_text


@dataclass(frozen=True)
class ReviewableContent:
    summary: str = ""
    editable_text: str = ""
    diagnosis: Optional[str] = None
    # Set once the patient types into editable_text; summaries stop seeding it.
    user_edited: bool = False


@dataclass(frozen=True)
class UIState:
    current_step: IntakeStep = IntakeStep.PATIENT_INFO
    loading: bool = False
    recording: bool = False
    error: str = ""
    input_method: InputMethod = InputMethod.SPEECH
    # Advisory from platform detection; survives step changes, unlike error.
    notice: str = ""


@dataclass(frozen=True)
class IntakeState:
    """
    Everything one intake session knows. Never mutated in place: reducers
    return a new instance.
    """

    patient: PatientInfo = field(default_factory=PatientInfo)
    transcript: TranscriptState = field(default_factory=TranscriptState)
    content: ReviewableContent = field(default_factory=ReviewableContent)
    ui: UIState = field(default_factory=UIState)

    @property
    def intake_text(self) -> str:
        """Text the confirm/submit/clinician steps show and send on."""
        return (
            self.content.editable_text
            or self.content.summary
            or self.transcript.display_text
        )

