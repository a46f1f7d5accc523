# voice_intake/api/schemas.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ApiEnvelope(BaseModel):
    success: bool = True
    error: Optional[str] = None


class TranscribeResponse(ApiEnvelope):
    transcript: Optional[str] = None


class SummarizeRequest(BaseModel):
    text: Optional[str] = None


class SummarizeResponse(ApiEnvelope):
    summary: Optional[str] = None


class DiagnoseRequest(BaseModel):
    symptoms: Optional[str] = None


class DiagnoseResponse(ApiEnvelope):
    diagnosis: Optional[str] = None
