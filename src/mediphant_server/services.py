"""
Service Container

Builds the process-wide services once at startup. The application stores the
container on `app.state` and route dependencies read it from there, so there
is no hidden module-level state and tests can build isolated containers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import Settings, settings as default_settings
from .core.rate_limiter import RateLimiter
from .corpus.chunker import load_corpus
from .llm.client import LLMClient, LLMError
from .search.lexical import LexicalFallbackSearch
from .search.orchestrator import (
    OrchestratorConfig,
    SearchOrchestrator,
    VectorClientFactory,
    vector_clients_from,
)
from .search.service import FAQService
from .search.synthesizer import AnswerSynthesizer
from .sessions.history import BoundedHistoryLog

logger = logging.getLogger("mediphant.services")


@dataclass
class Services:
    faq: FAQService
    rate_limiter: RateLimiter
    history: BoundedHistoryLog
    sweep_interval_seconds: float = 300.0


def _build_llm_client(settings: Settings) -> Optional[LLMClient]:
    if settings.openai_api_key is None:
        logger.info("No generative credentials, answers use deterministic synthesis")
        return None
    try:
        return LLMClient(
            api_key=settings.openai_api_key.get_secret_value(),
            model=settings.chat_model,
            base_url=settings.openai_base_url,
            timeout=settings.upstream_timeout_seconds,
        )
    except LLMError:
        logger.info("No generative credentials, answers use deterministic synthesis")
        return None


def build_services(
    settings: Optional[Settings] = None,
    client_factory: Optional[VectorClientFactory] = None,
    llm: Optional[LLMClient] = None,
) -> Services:
    """
    Construct every shared service from `settings`.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration. Defaults to the global settings.

    client_factory : Optional[VectorClientFactory]
        Builds the embedding and vector-index clients when both credentials
        exist. Defaults to clients configured from `settings`.

    llm : Optional[LLMClient]
        Generative client. Built from `settings` when omitted; no client is
        used when no credential is configured.
    """
    settings = settings or default_settings

    if client_factory is None:
        client_factory = lambda: vector_clients_from(settings)

    chunks = load_corpus(settings.corpus_path)
    orchestrator = SearchOrchestrator(
        fallback=LexicalFallbackSearch(chunks),
        config=OrchestratorConfig.from_settings(settings),
        client_factory=client_factory,
    )

    if llm is None:
        llm = _build_llm_client(settings)

    return Services(
        faq=FAQService(orchestrator, AnswerSynthesizer(llm)),
        rate_limiter=RateLimiter(
            window_seconds=settings.rate_limit_window_seconds,
            max_requests=settings.rate_limit_max_requests,
        ),
        history=BoundedHistoryLog(max_items=settings.history_max_items),
        sweep_interval_seconds=settings.rate_limit_sweep_interval_seconds,
    )
