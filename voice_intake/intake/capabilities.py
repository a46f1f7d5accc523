# voice_intake/intake/capabilities.py
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable

from voice_intake.intake import messages
from voice_intake.intake.stages import InputMethod

_IOS_RE = re.compile(r"iPad|iPhone|iPod")
_SAFARI_RE = re.compile(r"Safari")
_CHROME_RE = re.compile(r"Chrome")

SPEECH_RECOGNITION_FEATURES = frozenset({"SpeechRecognition", "webkitSpeechRecognition"})


class CapabilityProvider(ABC):
    """
    What the detector needs to know about the client platform.
    """

    @abstractmethod
    def user_agent(self) -> str:
        ...

    @abstractmethod
    def supports_live_recognition(self) -> bool:
        ...


class BrowserCapabilityProvider(CapabilityProvider):
    """
    Built from what a browser reports: its user agent and the names of the
    globals it exposes.
    """

    def __init__(self, user_agent: str, features: Iterable[str] = ()):
        self._user_agent = user_agent or ""
        self._features = frozenset(features)

    def user_agent(self) -> str:
        return self._user_agent

    def supports_live_recognition(self) -> bool:
        return bool(self._features & SPEECH_RECOGNITION_FEATURES)


class HeadlessCapabilityProvider(CapabilityProvider):
    """A server or terminal host: no browser, no live speech engine."""

    def user_agent(self) -> str:
        return ""

    def supports_live_recognition(self) -> bool:
        return False


@dataclass(frozen=True)
class Detection:
    input_method: InputMethod
    advisory: str = ""


def is_ios_safari(user_agent: str) -> bool:
    return (
        bool(_IOS_RE.search(user_agent))
        and bool(_SAFARI_RE.search(user_agent))
        and not _CHROME_RE.search(user_agent)
    )


def detect_input_method(provider: CapabilityProvider) -> Detection:
    """
    One-shot classification into speech or upload. Never picks manual.
    """
    if is_ios_safari(provider.user_agent()):
        return Detection(InputMethod.UPLOAD, messages.IOS_SAFARI_ADVISORY)
    if not provider.supports_live_recognition():
        return Detection(InputMethod.UPLOAD, messages.UPLOAD_ONLY_ADVISORY)
    return Detection(InputMethod.SPEECH)
