# voice_intake/services/clinical_ai.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from voice_intake.config import Settings, get_settings
from voice_intake.errors import CollaboratorError, InputValidationError
from voice_intake.llm import LLMClient
from voice_intake.services.prompts import (
    DIAGNOSIS_DISCLAIMER,
    DIAGNOSIS_SYSTEM_PROMPT,
    DIAGNOSIS_USER_TEMPLATE,
    HEDGE_MARKER,
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_USER_TEMPLATE,
)

logger = logging.getLogger(__name__)


def ensure_hedged(diagnosis: str) -> str:
    """
    Guarantee the probabilistic phrasing the clinician view relies on.
    """
    text = diagnosis.strip()
    if HEDGE_MARKER in text:
        return text
    if not text:
        return DIAGNOSIS_DISCLAIMER
    return f"{text}\n\n{DIAGNOSIS_DISCLAIMER}"


class ClinicalAIService:
    """
    Server-side pass-through to the AI collaborator:
      - audio transcription (language pinned, low temperature)
      - structured clinical summary
      - differential-diagnosis hint for the physician

    Any failure of the collaborator is re-raised as CollaboratorError so the
    API layer can answer with a 500 envelope.
    """

    def __init__(self, llm_client: LLMClient, settings: Optional[Settings] = None):
        self.llm_client = llm_client
        self.settings = settings or get_settings()

    def ensure_audio_size(self, size: int) -> None:
        if size > self.settings.max_audio_bytes:
            raise InputValidationError("Audio file too large (max 25MB)")

    def transcribe(self, filename: str, data: bytes, content_type: str) -> str:
        self.ensure_audio_size(len(data))
        logger.info(
            "Audio file details: name=%s type=%s size=%d",
            filename,
            content_type,
            len(data),
        )
        try:
            transcript = self.llm_client.transcribe(
                filename=filename,
                data=data,
                content_type=content_type,
                language=self.settings.transcription_language,
                temperature=self.settings.transcription_temperature,
            )
        except Exception as exc:
            logger.exception("Transcription error")
            raise CollaboratorError(str(exc) or "Internal server error") from exc

        logger.info("Transcription completed: %d chars", len(transcript))
        return transcript

    def summarize(self, text: str) -> str:
        messages = [
            {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
            {"role": "user", "content": SUMMARY_USER_TEMPLATE.format(text=text)},
        ]
        summary = self._complete(
            messages,
            max_tokens=self.settings.summary_max_tokens,
            what="Summarization",
        )
        logger.info("Text summarized successfully")
        return summary

    def diagnose(self, symptoms: str) -> str:
        messages = [
            {"role": "system", "content": DIAGNOSIS_SYSTEM_PROMPT},
            {"role": "user", "content": DIAGNOSIS_USER_TEMPLATE.format(symptoms=symptoms)},
        ]
        raw = self._complete(
            messages,
            max_tokens=self.settings.diagnosis_max_tokens,
            what="Diagnosis",
        )
        logger.info("Diagnosis generated successfully")
        return ensure_hedged(raw)

    def _complete(self, messages: List[Dict[str, str]], max_tokens: int, what: str) -> str:
        try:
            return self.llm_client.chat(
                messages,
                temperature=self.settings.completion_temperature,
                max_tokens=max_tokens,
            )
        except Exception as exc:
            logger.exception("%s error", what)
            raise CollaboratorError(str(exc) or "Internal server error") from exc
