from __future__ import annotations

import base64
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from fakes import (
    FakeAudioDevice,
    FakeCapabilityProvider,
    FakeLLMClient,
    FakePipeline,
    FakeRecognitionEngine,
)
from voice_intake.api.routes import get_ai_service
from voice_intake.config import Settings
from voice_intake.intake import IntakeSession
from voice_intake.main import app
from voice_intake.services import ClinicalAIService


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def client(fake_llm, settings):
    app.dependency_overrides[get_ai_service] = lambda: ClinicalAIService(fake_llm, settings=settings)
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def basic_auth() -> Callable[[str, str], dict[str, str]]:
    def _make(username: str, password: str) -> dict[str, str]:
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {token}"}

    return _make


@pytest.fixture
def pipeline() -> FakePipeline:
    return FakePipeline()


@pytest.fixture
def engine() -> FakeRecognitionEngine:
    return FakeRecognitionEngine()


@pytest.fixture
def device() -> FakeAudioDevice:
    return FakeAudioDevice()


@pytest.fixture
def speech_session(pipeline, engine) -> IntakeSession:
    return IntakeSession(
        pipeline,
        capabilities=FakeCapabilityProvider(),
        recognition_factory=lambda: engine,
    )


@pytest.fixture
def upload_session(pipeline, device) -> IntakeSession:
    return IntakeSession(
        pipeline,
        capabilities=FakeCapabilityProvider(live_recognition=False),
        audio_device=device,
    )

