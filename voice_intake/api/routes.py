# voice_intake/api/routes.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from voice_intake.errors import CollaboratorError, InputValidationError
from voice_intake.llm import OpenAILLMClient
from voice_intake.services import ClinicalAIService
from .schemas import (
    DiagnoseRequest,
    DiagnoseResponse,
    SummarizeRequest,
    SummarizeResponse,
    TranscribeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def _default_service() -> ClinicalAIService:
    return ClinicalAIService(OpenAILLMClient())


def get_ai_service() -> ClinicalAIService:
    """
    FastAPI dependency; tests swap it through app.dependency_overrides.

    A collaborator that cannot be built (no API key) answers like any other
    collaborator failure.
    """
    try:
        return _default_service()
    except RuntimeError as exc:
        logger.error("AI service unavailable: %s", exc)
        raise CollaboratorError("AI service is not configured") from exc


@router.post(
    "/transcribe",
    response_model=TranscribeResponse,
    response_model_exclude_none=True,
)
def transcribe(
    audio: Optional[UploadFile] = File(None),
    service: ClinicalAIService = Depends(get_ai_service),
) -> TranscribeResponse:
    logger.info("Transcribe request received")

    if audio is None:
        raise InputValidationError("Audio file is required")

    # Reject before buffering when the multipart parser already knows the size.
    if audio.size is not None:
        service.ensure_audio_size(audio.size)

    data = audio.file.read()
    transcript = service.transcribe(
        filename=audio.filename or "audio.wav",
        data=data,
        content_type=audio.content_type or "application/octet-stream",
    )
    return TranscribeResponse(success=True, transcript=transcript)


@router.post(
    "/summarize",
    response_model=SummarizeResponse,
    response_model_exclude_none=True,
)
def summarize(
    payload: SummarizeRequest,
    service: ClinicalAIService = Depends(get_ai_service),
) -> SummarizeResponse:
    if not payload.text or not payload.text.strip():
        raise InputValidationError("Text is required")

    logger.info("Summarize request received: %d chars", len(payload.text))
    summary = service.summarize(payload.text)
    return SummarizeResponse(success=True, summary=summary)


@router.post(
    "/diagnose",
    response_model=DiagnoseResponse,
    response_model_exclude_none=True,
)
def diagnose(
    payload: DiagnoseRequest,
    service: ClinicalAIService = Depends(get_ai_service),
) -> DiagnoseResponse:
    if not payload.symptoms or not payload.symptoms.strip():
        raise InputValidationError("Symptoms are required")

    logger.info("Diagnosis request received")
    diagnosis = service.diagnose(payload.symptoms)
    return DiagnoseResponse(success=True, diagnosis=diagnosis)
