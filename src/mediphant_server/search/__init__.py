"""
Search Package

Retrieval-and-synthesis pipeline: lexical fallback, vector/fallback
orchestration, answer synthesis and the FAQ service tying them together.
"""

from .lexical import LexicalFallbackSearch
from .models import (
    CredentialState,
    FAQResult,
    NeedsFallback,
    OrchestratorMode,
    SearchMatch,
    VectorHit,
)
from .orchestrator import OrchestratorConfig, SearchOrchestrator
from .service import FAQService
from .synthesizer import AnswerSynthesizer, NO_INFORMATION_ANSWER, CONSULT_SUFFIX

__all__ = [
    "LexicalFallbackSearch",
    "CredentialState",
    "FAQResult",
    "NeedsFallback",
    "OrchestratorMode",
    "SearchMatch",
    "VectorHit",
    "OrchestratorConfig",
    "SearchOrchestrator",
    "FAQService",
    "AnswerSynthesizer",
    "NO_INFORMATION_ANSWER",
    "CONSULT_SUFFIX",
]
