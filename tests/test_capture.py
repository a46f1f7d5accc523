from __future__ import annotations

import pytest

from voice_intake.config import MAX_AUDIO_BYTES
from voice_intake.errors import DeviceError, InputValidationError, RecognitionErrorKind
from voice_intake.intake import messages
from voice_intake.intake.capture import (
    RECOGNITION_LANGUAGE,
    AudioPayload,
    LiveRecognitionAdapter,
    RecordingAdapter,
    ensure_uploadable,
)
from voice_intake.intake.events import (
    CaptureEnded,
    CaptureFailed,
    CaptureStarted,
    EventChannel,
    FinalSegment,
    PartialSegment,
)

from fakes import FakeAudioDevice


def drained(channel: EventChannel) -> list:
    return list(channel.drain())


def test_live_adapter_emits_finals_then_partial(engine) -> None:
    channel = EventChannel()
    adapter = LiveRecognitionAdapter(engine, channel)

    adapter.start()
    engine.emit([("a", True), ("b", True), ("c", False)])

    assert adapter.listening
    assert engine.language == RECOGNITION_LANGUAGE
    assert engine.continuous and engine.interim_results
    assert drained(channel) == [
        CaptureStarted(),
        FinalSegment("a"),
        FinalSegment("b"),
        PartialSegment("c"),
    ]


def test_live_adapter_stop_goes_idle_via_engine_end(engine) -> None:
    channel = EventChannel()
    adapter = LiveRecognitionAdapter(engine, channel)
    adapter.start()
    drained(channel)

    adapter.stop()

    assert not adapter.listening
    assert engine.stop_calls == 1
    assert drained(channel) == [CaptureEnded()]


@pytest.mark.parametrize(
    "code,kind,message",
    [
        ("not-allowed", RecognitionErrorKind.NOT_ALLOWED, messages.MIC_PERMISSION_DENIED),
        ("no-speech", RecognitionErrorKind.NO_SPEECH, messages.NO_SPEECH_DETECTED),
        ("network", RecognitionErrorKind.OTHER, messages.RECOGNITION_FAILED),
    ],
)
def test_live_adapter_maps_errors(engine, code, kind, message) -> None:
    channel = EventChannel()
    adapter = LiveRecognitionAdapter(engine, channel)
    adapter.start()
    drained(channel)

    engine.fail(code)

    assert not adapter.listening
    assert drained(channel) == [CaptureFailed(kind, message)]


def test_cancelled_adapter_ignores_late_callbacks(engine) -> None:
    channel = EventChannel()
    adapter = LiveRecognitionAdapter(engine, channel)
    adapter.start()
    drained(channel)

    adapter.cancel()
    engine.emit([("late", True)])
    engine.end()

    assert drained(channel) == []


def test_recording_assembles_chunks_and_releases_device() -> None:
    device = FakeAudioDevice()
    channel = EventChannel()
    received = []
    recorder = RecordingAdapter(device, channel, received.append)

    recorder.start()
    recorder.push_chunk(b"abc")
    recorder.push_chunk(b"")
    recorder.push_chunk(b"def")
    recorder.stop()

    assert received == [AudioPayload("audio.wav", "audio/wav", b"abcdef")]
    assert device.streams[0].released
    assert not recorder.recording
    assert drained(channel) == [CaptureStarted(), CaptureEnded()]


def test_recording_releases_device_when_upload_fails() -> None:
    device = FakeAudioDevice()

    def broken_upload(payload: AudioPayload) -> None:
        raise RuntimeError("network down")

    recorder = RecordingAdapter(device, EventChannel(), broken_upload)
    recorder.start()

    with pytest.raises(RuntimeError):
        recorder.stop()

    assert device.streams[0].released


def test_recording_without_device_raises_device_error() -> None:
    recorder = RecordingAdapter(FakeAudioDevice(available=False), EventChannel(), lambda p: None)

    with pytest.raises(DeviceError):
        recorder.start()

    assert not recorder.recording


def test_abort_discards_recording() -> None:
    device = FakeAudioDevice()
    received = []
    recorder = RecordingAdapter(device, EventChannel(), received.append)
    recorder.start()
    recorder.push_chunk(b"abc")

    recorder.abort()

    assert received == []
    assert device.streams[0].released


def test_select_file_rejects_non_audio() -> None:
    received = []
    recorder = RecordingAdapter(None, EventChannel(), received.append)

    with pytest.raises(InputValidationError) as excinfo:
        recorder.select_file("notes.txt", "text/plain", b"hello")

    assert excinfo.value.message == messages.NOT_AUDIO_FILE
    assert received == []


def test_select_file_passes_audio_through() -> None:
    received = []
    recorder = RecordingAdapter(None, EventChannel(), received.append)

    recorder.select_file("voice.m4a", "audio/mp4", b"m4a-bytes")

    assert received == [AudioPayload("voice.m4a", "audio/mp4", b"m4a-bytes")]


def test_upload_limit_boundary() -> None:
    exact = AudioPayload("a.wav", "audio/wav", bytes(MAX_AUDIO_BYTES))
    over = AudioPayload("a.wav", "audio/wav", bytes(MAX_AUDIO_BYTES + 1))

    assert ensure_uploadable(exact) is exact
    with pytest.raises(InputValidationError):
        ensure_uploadable(over)


def test_channel_allows_a_single_consumer() -> None:
    channel = EventChannel()
    channel.subscribe(lambda: None)

    with pytest.raises(RuntimeError):
        channel.subscribe(lambda: None)
