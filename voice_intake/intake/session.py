# voice_intake/intake/session.py
from __future__ import annotations

import logging
from typing import Callable, Optional

from voice_intake.config import MAX_AUDIO_BYTES
from voice_intake.errors import (
    CollaboratorError,
    DeviceError,
    InputValidationError,
    RecognitionError,
)
from voice_intake.intake import messages
from voice_intake.intake.capabilities import (
    CapabilityProvider,
    HeadlessCapabilityProvider,
    detect_input_method,
)
from voice_intake.intake.capture import (
    AudioDevice,
    AudioPayload,
    LiveRecognitionAdapter,
    RecognitionEngine,
    RecordingAdapter,
    ensure_uploadable,
)
from voice_intake.intake.events import (
    CaptureEnded,
    DiagnosisReady,
    ErrorRaised,
    EventChannel,
    InputMethodSelected,
    IntakeEvent,
    LoadingChanged,
    PatientFieldChanged,
    Reset,
    StepRequested,
    SummaryReady,
    TextEdited,
    TranscriptReady,
)
from voice_intake.intake.machine import can_transition, initial_state, reduce
from voice_intake.intake.pipeline import IntakePipeline, PipelineTransportError
from voice_intake.intake.reconciler import TranscriptReconciler
from voice_intake.intake.stages import InputMethod, IntakeStep
from voice_intake.intake.state import IntakeState

logger = logging.getLogger(__name__)

RecognitionFactory = Callable[[], Optional[RecognitionEngine]]


class IntakeSession:
    """
    One patient's pass through the intake flow.

    The session is the single consumer of the event channel: the capture
    adapters and the public methods below publish events, the session
    folds them into `state` through the reducers and runs the AI calls
    that follow from them. Everything happens on the caller's thread and
    every AI call is awaited before the next one can start; `loading` is
    the only lock.

    Typical use:
      - update_patient(...) then go_to_step(2)
      - toggle_voice_input() twice, or select_file(...), or edit_text(...)
      - go_to_step(3), go_to_step(4), go_to_step(5)
      - generate_diagnosis(), reset()
    """

    def __init__(
        self,
        pipeline: IntakePipeline,
        capabilities: Optional[CapabilityProvider] = None,
        recognition_factory: Optional[RecognitionFactory] = None,
        audio_device: Optional[AudioDevice] = None,
        max_audio_bytes: int = MAX_AUDIO_BYTES,
    ):
        self.pipeline = pipeline
        self.max_audio_bytes = max_audio_bytes
        self.detection = detect_input_method(capabilities or HeadlessCapabilityProvider())

        self.channel = EventChannel()
        self.state: IntakeState = initial_state(self.detection.input_method)
        self._pumping = False
        self._pending_summary: Optional[str] = None

        self._recognition_factory = recognition_factory
        self._live: Optional[LiveRecognitionAdapter] = None
        self.recorder = RecordingAdapter(audio_device, self.channel, self.upload_audio)

        self.channel.subscribe(self._pump)
        self.dispatch(InputMethodSelected(self.detection.input_method, self.detection.advisory))

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def dispatch(self, event: IntakeEvent) -> None:
        self.channel.publish(event)

    def _pump(self) -> None:
        if self._pumping:
            return
        self._pumping = True
        try:
            for event in self.channel.drain():
                self.state = reduce(self.state, event)
                if isinstance(event, CaptureEnded):
                    self._pending_summary = TranscriptReconciler.authoritative_text(
                        self.state.transcript
                    )
        finally:
            self._pumping = False

        pending, self._pending_summary = self._pending_summary, None
        if pending is not None:
            self.process_with_ai(pending)

    # ------------------------------------------------------------------
    # Step 1: patient info
    # ------------------------------------------------------------------

    def update_patient(self, **fields: Optional[str]) -> None:
        # All fields are validated before any is published.
        patient = self.state.patient
        for name, value in fields.items():
            patient = patient.with_field(name, value)
        for name, value in fields.items():
            self.dispatch(PatientFieldChanged(name, value))

    # ------------------------------------------------------------------
    # Step 2: voice / manual input
    # ------------------------------------------------------------------

    @property
    def capturing(self) -> bool:
        live = self._live is not None and self._live.listening
        return live or self.recorder.recording

    def toggle_voice_input(self) -> None:
        if self.state.ui.loading:
            return

        method = self.state.ui.input_method
        if method == InputMethod.SPEECH:
            self._toggle_live_recognition()
        elif method == InputMethod.UPLOAD:
            self._toggle_recording()

    def _toggle_live_recognition(self) -> None:
        adapter = self._live_adapter()
        if adapter is None:
            logger.warning("No speech recognition engine available; falling back to manual input")
            self.dispatch(InputMethodSelected(InputMethod.MANUAL, messages.MANUAL_FALLBACK_ADVISORY))
            return

        if adapter.listening:
            adapter.stop()
            return

        try:
            adapter.start()
        except RecognitionError as exc:
            logger.error("Speech recognition failed to start: %s", exc.kind.value)
            adapter.on_error(exc.kind.value)

    def _live_adapter(self) -> Optional[LiveRecognitionAdapter]:
        if self._live is None and self._recognition_factory is not None:
            engine = self._recognition_factory()
            if engine is not None:
                self._live = LiveRecognitionAdapter(engine, self.channel)
        return self._live

    def _toggle_recording(self) -> None:
        if self.recorder.recording:
            self.recorder.stop()
            return

        try:
            self.recorder.start()
        except DeviceError as exc:
            logger.error("Recording error: %s", exc)
            self.dispatch(ErrorRaised(messages.MIC_UNAVAILABLE))

    def push_audio_chunk(self, data: bytes) -> None:
        self.recorder.push_chunk(data)

    def select_file(self, filename: str, content_type: Optional[str], data: bytes) -> None:
        if self.state.ui.loading or self.recorder.recording:
            return
        try:
            self.recorder.select_file(filename, content_type, data)
        except InputValidationError as exc:
            self.dispatch(ErrorRaised(exc.message))

    def upload_audio(self, payload: AudioPayload) -> None:
        try:
            ensure_uploadable(payload, self.max_audio_bytes)
        except InputValidationError as exc:
            logger.warning("Audio rejected before upload: %d bytes", payload.size)
            self.dispatch(ErrorRaised(exc.message))
            return

        self.dispatch(LoadingChanged(True))
        try:
            transcript = self.pipeline.transcribe(payload)
        except PipelineTransportError as exc:
            logger.error("Audio upload failed: %s", exc)
            self.dispatch(ErrorRaised(messages.UPLOAD_FAILED))
            return
        except CollaboratorError as exc:
            logger.error("Transcription failed: %s", exc)
            self.dispatch(ErrorRaised(messages.TRANSCRIPTION_FAILED))
            return
        finally:
            self.dispatch(LoadingChanged(False))

        self.dispatch(TranscriptReady(transcript))
        self.process_with_ai(transcript)

    def process_with_ai(self, text: str) -> None:
        if TranscriptReconciler.is_blank(text):
            return

        self.dispatch(LoadingChanged(True))
        try:
            summary = self.pipeline.summarize(text)
        except CollaboratorError as exc:
            logger.error("Summarization failed: %s", exc)
            self.dispatch(ErrorRaised(messages.AI_PROCESSING_FAILED))
            return
        finally:
            self.dispatch(LoadingChanged(False))

        self.dispatch(SummaryReady(summary))

    def edit_text(self, text: str) -> None:
        self.dispatch(TextEdited(text))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def can_go_to(self, step: int) -> bool:
        """False for blocked transitions and for steps outside 1..5."""
        try:
            return can_transition(self.state, IntakeStep(step))
        except ValueError:
            return False

    def go_to_step(self, step: int) -> bool:
        """Request a transition; returns whether it was taken."""
        if not self.can_go_to(step):
            return False
        self.dispatch(StepRequested(IntakeStep(step)))
        return True

    # ------------------------------------------------------------------
    # Step 5: clinician view
    # ------------------------------------------------------------------

    def generate_diagnosis(self) -> None:
        if self.state.ui.loading or self.state.ui.current_step != IntakeStep.CLINICIAN_VIEW:
            return

        symptoms = self.state.intake_text
        if TranscriptReconciler.is_blank(symptoms):
            return

        self.dispatch(LoadingChanged(True))
        try:
            diagnosis = self.pipeline.diagnose(symptoms)
        except CollaboratorError as exc:
            logger.error("Diagnosis generation failed: %s", exc)
            self.dispatch(ErrorRaised(messages.DIAGNOSIS_FAILED))
            return
        finally:
            self.dispatch(LoadingChanged(False))

        self.dispatch(DiagnosisReady(diagnosis))

    def reset(self, input_method: Optional[InputMethod] = None) -> None:
        """
        Wipe the intake and return to step 1. Any capture in progress is
        discarded. Passing `input_method` is the only way to switch input
        pathways; otherwise the detected one is restored.
        """
        if self._live is not None:
            self._live.cancel()
            self._live = None
        self.recorder.abort()
        self.channel.clear()
        self._pending_summary = None

        self.dispatch(Reset())
        if input_method is None:
            self.dispatch(InputMethodSelected(self.detection.input_method, self.detection.advisory))
        else:
            self.dispatch(InputMethodSelected(input_method))
