# voice_intake/intake/capture.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from voice_intake.config import MAX_AUDIO_BYTES
from voice_intake.errors import DeviceError, InputValidationError, RecognitionErrorKind
from voice_intake.intake import messages
from voice_intake.intake.events import (
    CaptureEnded,
    CaptureFailed,
    CaptureStarted,
    EventChannel,
    FinalSegment,
    PartialSegment,
)
from voice_intake.intake.reconciler import split_results


RECOGNITION_LANGUAGE = "ja-JP"
RECORDING_FILENAME = "audio.wav"
RECORDING_CONTENT_TYPE = "audio/wav"


@dataclass(frozen=True)
class AudioPayload:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def ensure_uploadable(payload: AudioPayload, max_bytes: int = MAX_AUDIO_BYTES) -> AudioPayload:
    if payload.size > max_bytes:
        raise InputValidationError(messages.AUDIO_TOO_LARGE)
    return payload


def ensure_audio_file(content_type: Optional[str]) -> None:
    if not content_type or not content_type.startswith("audio/"):
        raise InputValidationError(messages.NOT_AUDIO_FILE)


# ----------------------------------------------------------------------
# Live recognition
# ----------------------------------------------------------------------

class RecognitionListener(ABC):
    """Callbacks a RecognitionEngine fires while it listens."""

    @abstractmethod
    def on_result(self, results: Sequence[Tuple[str, bool]], result_index: int = 0) -> None:
        ...

    @abstractmethod
    def on_error(self, code: str) -> None:
        ...

    @abstractmethod
    def on_end(self) -> None:
        ...


class RecognitionEngine(ABC):
    """
    A continuous speech-to-text engine with interim results. Results are
    reported as (transcript, is_final) pairs.
    """

    continuous: bool = True
    interim_results: bool = True
    language: str = RECOGNITION_LANGUAGE

    @abstractmethod
    def start(self, listener: RecognitionListener) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...


class ListeningState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


RECOGNITION_ADVISORIES = {
    RecognitionErrorKind.NOT_ALLOWED: messages.MIC_PERMISSION_DENIED,
    RecognitionErrorKind.NO_SPEECH: messages.NO_SPEECH_DETECTED,
    RecognitionErrorKind.OTHER: messages.RECOGNITION_FAILED,
}


class LiveRecognitionAdapter(RecognitionListener):
    """
    idle -> listening -> idle. Turns engine callbacks into typed events on
    the channel; it never touches intake state itself.
    """

    def __init__(self, engine: RecognitionEngine, channel: EventChannel):
        self.engine = engine
        self.channel = channel
        self.state = ListeningState.IDLE
        self._cancelled = False

    @property
    def listening(self) -> bool:
        return self.state == ListeningState.LISTENING

    def start(self) -> None:
        if self.listening:
            return
        self.engine.continuous = True
        self.engine.interim_results = True
        self.engine.language = RECOGNITION_LANGUAGE
        self.state = ListeningState.LISTENING
        self.channel.publish(CaptureStarted())
        self.engine.start(self)

    def stop(self) -> None:
        # The engine answers with on_end, which closes the capture session.
        if self.listening:
            self.engine.stop()

    def cancel(self) -> None:
        """Stop listening and ignore whatever the engine still reports."""
        self._cancelled = True
        if self.listening:
            self.state = ListeningState.IDLE
            self.engine.stop()

    def on_result(self, results: Sequence[Tuple[str, bool]], result_index: int = 0) -> None:
        if self._cancelled or not self.listening:
            return
        finalized, provisional = split_results(results, result_index)
        for segment in finalized:
            self.channel.publish(FinalSegment(segment))
        self.channel.publish(PartialSegment(provisional))

    def on_error(self, code: str) -> None:
        if self._cancelled:
            return
        kind = RecognitionErrorKind.from_code(code)
        self.state = ListeningState.IDLE
        self.channel.publish(CaptureFailed(kind, RECOGNITION_ADVISORIES[kind]))

    def on_end(self) -> None:
        if self._cancelled:
            return
        self.state = ListeningState.IDLE
        self.channel.publish(CaptureEnded())


# ----------------------------------------------------------------------
# Recording / file upload
# ----------------------------------------------------------------------

class AudioStream(ABC):
    """An acquired microphone; `release` stops every device track."""

    @abstractmethod
    def release(self) -> None:
        ...


class AudioDevice(ABC):
    @abstractmethod
    def acquire(self) -> AudioStream:
        """Open the microphone. Raises DeviceError when it is unavailable."""
        ...


class RecordingAdapter:
    """
    Microphone-to-file capture plus direct file selection. Completed audio
    goes to `on_audio`; the device is released on every exit path.
    """

    def __init__(
        self,
        device: Optional[AudioDevice],
        channel: EventChannel,
        on_audio: Callable[[AudioPayload], None],
    ):
        self.device = device
        self.channel = channel
        self.on_audio = on_audio
        self._stream: Optional[AudioStream] = None
        self._chunks: List[bytes] = []

    @property
    def recording(self) -> bool:
        return self._stream is not None

    def start(self) -> None:
        if self.recording:
            return
        if self.device is None:
            raise DeviceError(messages.MIC_UNAVAILABLE)

        stream = self.device.acquire()
        self._chunks = []
        self._stream = stream
        self.channel.publish(CaptureStarted())

    def push_chunk(self, data: bytes) -> None:
        if self.recording and data:
            self._chunks.append(data)

    def stop(self) -> None:
        if not self.recording:
            return
        stream = self._stream
        payload = AudioPayload(
            filename=RECORDING_FILENAME,
            content_type=RECORDING_CONTENT_TYPE,
            data=b"".join(self._chunks),
        )
        self._stream = None
        self._chunks = []
        try:
            self.channel.publish(CaptureEnded())
            self.on_audio(payload)
        finally:
            stream.release()

    def abort(self) -> None:
        """Drop an in-progress recording without sending it anywhere."""
        stream = self._stream
        self._stream = None
        self._chunks = []
        if stream is not None:
            stream.release()

    def select_file(self, filename: str, content_type: Optional[str], data: bytes) -> None:
        ensure_audio_file(content_type)
        self.on_audio(AudioPayload(filename=filename, content_type=content_type, data=data))
