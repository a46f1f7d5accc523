# voice_intake/intake/pipeline.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from voice_intake.errors import CollaboratorError
from voice_intake.intake.capture import AudioPayload

logger = logging.getLogger(__name__)


class PipelineTransportError(CollaboratorError):
    """The request never produced a usable API response."""


class IntakePipeline(ABC):
    """
    The AI side of the intake as seen from the client: transcription,
    summarization and the diagnosis hint.
    """

    @abstractmethod
    def transcribe(self, audio: AudioPayload) -> str:
        ...

    @abstractmethod
    def summarize(self, text: str) -> str:
        ...

    @abstractmethod
    def diagnose(self, symptoms: str) -> str:
        ...


class HttpIntakePipeline(IntakePipeline):
    """
    Talks to the /api routes of this service over HTTP.

    `client` may be any httpx.Client (FastAPI's TestClient included); by
    default one is created for `base_url`.
    """

    def __init__(self, base_url: str = "http://127.0.0.1:8000", client: Optional[httpx.Client] = None):
        self.client = client or httpx.Client(base_url=base_url)

    def transcribe(self, audio: AudioPayload) -> str:
        data = self._post(
            "/api/transcribe",
            files={"audio": (audio.filename, audio.data, audio.content_type)},
        )
        return self._field(data, "transcript")

    def summarize(self, text: str) -> str:
        return self._field(self._post("/api/summarize", json={"text": text}), "summary")

    def diagnose(self, symptoms: str) -> str:
        return self._field(self._post("/api/diagnose", json={"symptoms": symptoms}), "diagnosis")

    def close(self) -> None:
        self.client.close()

    def _post(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self.client.post(path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("POST %s failed: %s", path, exc)
            raise PipelineTransportError(str(exc)) from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("POST %s returned non-JSON (status %s)", path, response.status_code)
            raise PipelineTransportError(f"Invalid response from {path}") from exc

        if not data.get("success"):
            error = data.get("error") or f"{path} failed with status {response.status_code}"
            logger.warning("POST %s unsuccessful: %s", path, error)
            raise CollaboratorError(error)
        return data

    @staticmethod
    def _field(data: Dict[str, Any], name: str) -> str:
        return data.get(name) or ""
