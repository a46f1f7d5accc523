# voice_intake/services/__init__.py
from .clinical_ai import ClinicalAIService, ensure_hedged

__all__ = ["ClinicalAIService", "ensure_hedged"]
