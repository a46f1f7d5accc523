# voice_intake/llm/client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Dict, Optional

from openai import OpenAI

from voice_intake.config import get_settings


class LLMClient(ABC):
    """
    Simple abstraction so we can swap providers if needed.
    """

    @abstractmethod
    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.3,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        messages: list of {"role": "system"|"user"|"assistant", "content": "..."}
        returns: assistant content as a string
        """
        ...

    @abstractmethod
    def transcribe(
        self,
        filename: str,
        data: bytes,
        content_type: str,
        language: str,
        temperature: float = 0.2,
        model: Optional[str] = None,
    ) -> str:
        """
        Speech-to-text for one complete audio file; returns the plain transcript.
        """
        ...


class OpenAILLMClient(LLMClient):
    """
    OpenAI implementation using the official Python client.
    """

    def __init__(self, model: Optional[str] = None, transcription_model: Optional[str] = None):
        settings = get_settings()
        if not settings.openai_api_key:
            raise RuntimeError(
                "OPENAI_API_KEY is not set in environment (.env)."
            )

        self.client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
        self.default_model = model or settings.llm_model
        self.transcription_model = transcription_model or settings.transcription_model

    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.3,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        kwargs = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        completion = self.client.chat.completions.create(
            model=model or self.default_model,
            messages=messages,
            temperature=temperature,
            **kwargs,
        )
        content = completion.choices[0].message.content
        return content or ""

    def transcribe(
        self,
        filename: str,
        data: bytes,
        content_type: str,
        language: str,
        temperature: float = 0.2,
        model: Optional[str] = None,
    ) -> str:
        transcription = self.client.audio.transcriptions.create(
            file=(filename, data, content_type),
            model=model or self.transcription_model,
            language=language,
            response_format="json",
            temperature=temperature,
        )
        return transcription.text or ""
