# voice_intake/errors.py
from __future__ import annotations

from enum import Enum


class IntakeError(Exception):
    """
    Base class for every error the intake service raises on purpose.

    `status_code` is only meaningful for errors that cross the HTTP
    boundary; client-side errors end up as an advisory message instead.
    """

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(IntakeError):
    """Missing required field, non-audio file or oversized payload."""

    status_code = 400


class CollaboratorError(IntakeError):
    """The AI service (or the HTTP hop to it) failed."""

    status_code = 500


class DeviceError(IntakeError):
    """Microphone unavailable or permission denied."""


class RecognitionErrorKind(str, Enum):
    NOT_ALLOWED = "not-allowed"
    NO_SPEECH = "no-speech"
    OTHER = "other"

    @classmethod
    def from_code(cls, code: str | None) -> "RecognitionErrorKind":
        for kind in cls:
            if kind.value == code:
                return kind
        return cls.OTHER


class RecognitionError(IntakeError):
    def __init__(self, kind: RecognitionErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class AuthError(IntakeError):
    status_code = 401
