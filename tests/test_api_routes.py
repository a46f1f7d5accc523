from __future__ import annotations

from fastapi.testclient import TestClient

from voice_intake.api import routes
from voice_intake.api.routes import get_ai_service
from voice_intake.config import Settings
from voice_intake.main import app
from voice_intake.services import ClinicalAIService

from fakes import FakeLLMClient


def test_summarize_returns_summary(client, fake_llm) -> None:
    fake_llm.chat_reply = "症状：頭痛\n期間：2日\n程度：中等度\n関連情報：発熱あり"

    response = client.post("/api/summarize", json={"text": "2日前から頭が痛くて熱もあります"})

    assert response.status_code == 200
    payload = response.json()
    assert payload == {"success": True, "summary": fake_llm.chat_reply}

    messages = fake_llm.chat_calls[0]["messages"]
    assert messages[0]["role"] == "system"
    assert "関連情報" in messages[0]["content"]
    assert "2日前から頭が痛くて熱もあります" in messages[1]["content"]
    assert fake_llm.chat_calls[0]["max_tokens"] == 400


def test_summarize_rejects_empty_text(client, fake_llm) -> None:
    response = client.post("/api/summarize", json={"text": ""})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert fake_llm.chat_calls == []


def test_summarize_rejects_missing_text(client) -> None:
    response = client.post("/api/summarize", json={})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Text is required"}


def test_summarize_rejects_non_json_body(client) -> None:
    response = client.post(
        "/api/summarize",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_summarize_collaborator_failure_returns_500(client, fake_llm) -> None:
    fake_llm.error = RuntimeError("upstream exploded")

    response = client.post("/api/summarize", json={"text": "咳が出ます"})

    assert response.status_code == 500
    payload = response.json()
    assert payload["success"] is False
    assert "upstream exploded" in payload["error"]
    assert "Traceback" not in payload["error"]


def test_diagnose_returns_hedged_diagnosis(client, fake_llm) -> None:
    fake_llm.chat_reply = (
        "推測される疾患: インフルエンザの可能性\n\n根拠:\n- 38度の発熱\n- 頭痛\n\n"
        "推奨事項:\n- 迅速検査"
    )

    response = client.post("/api/diagnose", json={"symptoms": "38度の発熱と頭痛"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["diagnosis"]
    assert "可能性" in payload["diagnosis"]
    assert "38度の発熱と頭痛" in fake_llm.chat_calls[0]["messages"][1]["content"]
    assert fake_llm.chat_calls[0]["max_tokens"] == 600


def test_diagnose_adds_hedge_when_model_omits_it(client, fake_llm) -> None:
    fake_llm.chat_reply = "推測される疾患: 感冒"

    response = client.post("/api/diagnose", json={"symptoms": "38度の発熱と頭痛"})

    diagnosis = response.json()["diagnosis"]
    assert diagnosis.startswith("推測される疾患: 感冒")
    assert "可能性" in diagnosis


def test_diagnose_rejects_missing_symptoms(client) -> None:
    response = client.post("/api/diagnose", json={})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Symptoms are required"}


def test_transcribe_returns_transcript(client, fake_llm) -> None:
    fake_llm.transcript = "昨日から喉が痛いです"

    response = client.post(
        "/api/transcribe",
        files={"audio": ("audio.wav", b"RIFF-fake-wav", "audio/wav")},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "transcript": "昨日から喉が痛いです"}

    call = fake_llm.transcribe_calls[0]
    assert call["language"] == "ja"
    assert call["temperature"] == 0.2
    assert call["data"] == b"RIFF-fake-wav"
    assert call["content_type"] == "audio/wav"


def test_transcribe_requires_audio_field(client, fake_llm) -> None:
    response = client.post("/api/transcribe", data={"other": "value"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Audio file is required"}
    assert fake_llm.transcribe_calls == []


def test_transcribe_rejects_oversized_audio() -> None:
    fake_llm = FakeLLMClient()
    small_limit = Settings(_env_file=None, MAX_AUDIO_BYTES=8)
    app.dependency_overrides[get_ai_service] = lambda: ClinicalAIService(fake_llm, settings=small_limit)
    try:
        with TestClient(app) as test_client:
            response = test_client.post(
                "/api/transcribe",
                files={"audio": ("audio.wav", b"123456789", "audio/wav")},
            )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "too large" in response.json()["error"]
    assert fake_llm.transcribe_calls == []


def test_transcribe_collaborator_failure_returns_500(client, fake_llm) -> None:
    fake_llm.error = RuntimeError("whisper unavailable")

    response = client.post(
        "/api/transcribe",
        files={"audio": ("audio.wav", b"bytes", "audio/wav")},
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "whisper unavailable"}


def test_unconfigured_collaborator_returns_json_500(monkeypatch) -> None:
    def missing_key() -> None:
        raise RuntimeError("OPENAI_API_KEY is not set in environment (.env).")

    monkeypatch.setattr(routes, "OpenAILLMClient", missing_key)
    routes._default_service.cache_clear()
    app.dependency_overrides.clear()
    try:
        with TestClient(app) as test_client:
            response = test_client.post("/api/summarize", json={"text": "頭痛"})
    finally:
        routes._default_service.cache_clear()

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"success": False, "error": "AI service is not configured"}
