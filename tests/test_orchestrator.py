"""
Search orchestrator tests: initial mode selection, vector path mapping and
the one-way downgrade to fallback search.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from mediphant_server.corpus.chunker import load_corpus
from mediphant_server.embeddings.embedder import Embedder, EmbeddingError
from mediphant_server.embeddings.models import VectorMatch
from mediphant_server.embeddings.vector_index import PineconeIndex, VectorIndexError
from mediphant_server.search.lexical import LexicalFallbackSearch
from mediphant_server.search.models import CredentialState, OrchestratorMode
from mediphant_server.search.orchestrator import OrchestratorConfig, SearchOrchestrator

READY = OrchestratorConfig(
    embedding_credential=CredentialState.PRESENT,
    vector_credential=CredentialState.PRESENT,
)


@pytest.fixture
def fallback():
    return LexicalFallbackSearch(load_corpus())


@pytest.fixture
def mock_embedder():
    mock = AsyncMock(spec=Embedder)
    mock.embed.return_value = [[0.1] * 8]
    return mock


@pytest.fixture
def mock_index():
    mock = AsyncMock(spec=PineconeIndex)
    mock.query.return_value = [
        VectorMatch(id="chunk-1", score=0.91, text="Vector passage one"),
        VectorMatch(id="chunk-7", score=0.85, text=""),
        VectorMatch(id="chunk-2", score=0.80, text="Vector passage two"),
    ]
    return mock


@pytest.fixture
def orchestrator(fallback, mock_embedder, mock_index):
    return SearchOrchestrator(
        fallback=fallback,
        config=READY,
        client_factory=lambda: (mock_embedder, mock_index),
    )


class TestInitialMode:

    def test_vector_ready_with_both_credentials(self, orchestrator):
        assert orchestrator.mode is OrchestratorMode.VECTOR_READY

    @pytest.mark.parametrize(
        "embedding, vector",
        [
            (CredentialState.ABSENT, CredentialState.PRESENT),
            (CredentialState.PRESENT, CredentialState.ABSENT),
            (CredentialState.ABSENT, CredentialState.ABSENT),
        ],
    )
    def test_missing_credential_forces_fallback(self, fallback, embedding, vector):
        factory = MagicMock()
        orch = SearchOrchestrator(
            fallback=fallback,
            config=OrchestratorConfig(embedding_credential=embedding, vector_credential=vector),
            client_factory=factory,
        )

        assert orch.mode is OrchestratorMode.FALLBACK_ONLY
        factory.assert_not_called()

    def test_client_construction_failure_forces_fallback(self, fallback):
        def broken_factory():
            raise RuntimeError("cannot build client")

        orch = SearchOrchestrator(fallback=fallback, config=READY, client_factory=broken_factory)

        assert orch.mode is OrchestratorMode.FALLBACK_ONLY

    def test_config_from_settings(self):
        from pydantic import SecretStr
        from mediphant_server.config import Settings

        settings = Settings(
            _env_file=None,
            openai_api_key=SecretStr("sk-test"),
            pinecone_api_key=None,
        )
        config = OrchestratorConfig.from_settings(settings)

        assert config.embedding_credential is CredentialState.PRESENT
        assert config.vector_credential is CredentialState.ABSENT
        assert config.vector_capable is False


class TestVectorPath:

    @pytest.mark.asyncio
    async def test_maps_neighbours_and_drops_empty_text(self, orchestrator, mock_embedder, mock_index):
        matches = await orchestrator.search("anything")

        assert [(m.text, m.score) for m in matches] == [
            ("Vector passage one", 0.91),
            ("Vector passage two", 0.80),
        ]
        mock_embedder.embed.assert_awaited_once_with(["anything"])
        mock_index.query.assert_awaited_once_with([0.1] * 8, top_k=3)
        assert orchestrator.mode is OrchestratorMode.VECTOR_READY


class TestDowngrade:

    @pytest.mark.asyncio
    async def test_embedding_failure_falls_back_for_same_request(
        self, orchestrator, fallback, mock_embedder, mock_index
    ):
        mock_embedder.embed.side_effect = EmbeddingError("quota exceeded")

        matches = await orchestrator.search("medication adherence diabetes")

        assert matches == fallback.search("medication adherence diabetes")
        assert orchestrator.mode is OrchestratorMode.FALLBACK_ONLY
        mock_index.query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_vector_query_failure_downgrades(self, orchestrator, mock_index):
        mock_index.query.side_effect = VectorIndexError("timeout")

        matches = await orchestrator.search("medication")

        assert matches
        assert orchestrator.mode is OrchestratorMode.FALLBACK_ONLY

    @pytest.mark.asyncio
    async def test_unexpected_client_exception_downgrades(self, orchestrator, mock_embedder):
        mock_embedder.embed.side_effect = KeyError("surprise")

        matches = await orchestrator.search("medication")

        assert matches
        assert orchestrator.mode is OrchestratorMode.FALLBACK_ONLY

    @pytest.mark.asyncio
    async def test_downgrade_is_sticky_after_recovery(
        self, orchestrator, fallback, mock_embedder, mock_index
    ):
        mock_embedder.embed.side_effect = EmbeddingError("down")
        await orchestrator.search("medication")

        # Dependency is healthy again; the orchestrator must not go back
        mock_embedder.embed.side_effect = None
        matches = await orchestrator.search("pill organizer reminders")

        assert matches == fallback.search("pill organizer reminders")
        assert orchestrator.mode is OrchestratorMode.FALLBACK_ONLY
        mock_embedder.embed.assert_awaited_once()
        mock_index.query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fallback_only_never_calls_clients(self, fallback):
        factory = MagicMock()
        orch = SearchOrchestrator(fallback=fallback, config=OrchestratorConfig(), client_factory=factory)

        matches = await orch.search("zzxxyy nonexistent")

        assert matches == []
        factory.assert_not_called()
