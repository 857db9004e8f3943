"""
Search Orchestrator

Chooses between vector search and the lexical fallback, and degrades from the
former to the latter when the external services misbehave.

State Machine
-------------
VECTOR_READY  --(any embedding / vector-index failure)-->  FALLBACK_ONLY

- The initial state is VECTOR_READY only when both credentials are present
  and the clients construct cleanly.
- The transition applies to the orchestrator instance, not just the failing
  request, and is one-way: there is no automatic recovery.
- The request that triggered the downgrade is still answered, via the
  fallback, so callers always receive a result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, List, Optional, Tuple

from .lexical import LexicalFallbackSearch
from .models import (
    MAX_MATCHES,
    CredentialState,
    NeedsFallback,
    OrchestratorMode,
    SearchMatch,
    VectorHit,
    VectorOutcome,
)
from ..config import Settings, settings as global_settings
from ..core.errors import UpstreamServiceError
from ..embeddings.embedder import Embedder
from ..embeddings.vector_index import PineconeIndex

logger = logging.getLogger("mediphant.search")


# ---------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Which external credentials are available. Deterministically selects the
    initial mode: both PRESENT is required for VECTOR_READY.
    """

    embedding_credential: CredentialState = CredentialState.ABSENT
    vector_credential: CredentialState = CredentialState.ABSENT

    @property
    def vector_capable(self) -> bool:
        return (
            self.embedding_credential is CredentialState.PRESENT
            and self.vector_credential is CredentialState.PRESENT
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OrchestratorConfig":
        return cls(
            embedding_credential=_credential_state(settings.openai_api_key),
            vector_credential=_credential_state(settings.pinecone_api_key),
        )


def _credential_state(secret) -> CredentialState:
    if secret is not None and secret.get_secret_value():
        return CredentialState.PRESENT
    return CredentialState.ABSENT


VectorClients = Tuple[Embedder, PineconeIndex]
VectorClientFactory = Callable[[], VectorClients]


def vector_clients_from(settings: Settings) -> VectorClients:
    """Build the embedding and vector-index clients from `settings`."""
    embedder = Embedder(
        api_key=_secret_value(settings.openai_api_key),
        model=settings.embedding_model,
        base_url=settings.openai_base_url,
        timeout=settings.upstream_timeout_seconds,
    )
    index = PineconeIndex(
        api_key=_secret_value(settings.pinecone_api_key),
        index_name=settings.pinecone_index,
        host=settings.pinecone_host,
        control_url=settings.pinecone_control_url,
        timeout=settings.upstream_timeout_seconds,
    )
    return embedder, index


def _secret_value(secret) -> Optional[str]:
    return secret.get_secret_value() if secret is not None else None


# ---------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------

class SearchOrchestrator:
    """
    Dispatches queries to the vector path or the lexical fallback.

    One instance is created per process and shared across requests. The
    mode is written under a lock and read without one; a downgrade is
    visible to every request that starts after it.
    """

    def __init__(
        self,
        fallback: LexicalFallbackSearch,
        config: OrchestratorConfig,
        client_factory: Optional[VectorClientFactory] = None,
        top_k: int = MAX_MATCHES,
    ) -> None:
        """
        Parameters
        ----------
        fallback : LexicalFallbackSearch
            Scorer over the corpus snapshot.

        config : OrchestratorConfig
            Credential availability; selects the initial mode.

        client_factory : Optional[VectorClientFactory]
            Builds (embedder, vector index). Only called when `config` is
            vector-capable. Defaults to clients built from global settings.

        top_k : int
            Maximum number of matches per query.
        """
        if client_factory is None:
            client_factory = lambda: vector_clients_from(global_settings)

        self._fallback = fallback
        self._top_k = top_k
        self._lock = Lock()
        self._embedder: Optional[Embedder] = None
        self._vector_index: Optional[PineconeIndex] = None
        self._mode = OrchestratorMode.FALLBACK_ONLY

        if not config.vector_capable:
            logger.warning("Missing API credentials, using in-memory fallback search")
            return

        try:
            self._embedder, self._vector_index = client_factory()
        except Exception as exc:
            logger.error(
                "Failed to initialize external search clients (%s), using fallback",
                type(exc).__name__,
            )
            return

        self._mode = OrchestratorMode.VECTOR_READY
        logger.info("Vector search enabled")

    @property
    def mode(self) -> OrchestratorMode:
        return self._mode

    async def search(self, query: str) -> List[SearchMatch]:
        """
        Return up to `top_k` matches for `query`, never raising for upstream
        failures.
        """
        if self._mode is OrchestratorMode.FALLBACK_ONLY:
            return self._fallback.search(query, self._top_k)

        outcome = await self._search_vector(query)
        if isinstance(outcome, VectorHit):
            return list(outcome.matches)

        self._downgrade(outcome.reason)
        return self._fallback.search(query, self._top_k)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _search_vector(self, query: str) -> VectorOutcome:
        try:
            embeddings = await self._embedder.embed([query])
            if not embeddings:
                return NeedsFallback("embedding provider returned no vector")

            neighbours = await self._vector_index.query(embeddings[0], top_k=self._top_k)
        except UpstreamServiceError as exc:
            return NeedsFallback(type(exc).__name__)
        except Exception as exc:
            logger.exception("Unexpected failure in vector search client")
            return NeedsFallback(f"unexpected {type(exc).__name__}")

        matches = tuple(
            SearchMatch(text=n.text, score=n.score)
            for n in neighbours[: self._top_k]
            if n.text
        )
        return VectorHit(matches)

    def _downgrade(self, reason: str) -> None:
        with self._lock:
            if self._mode is OrchestratorMode.FALLBACK_ONLY:
                return
            self._mode = OrchestratorMode.FALLBACK_ONLY
        logger.warning("Vector search failed (%s), switching to fallback search", reason)
