"""
Embedding Client

This module implements the embedding client used by both the offline indexing
job and the live query path. It talks to the OpenAI embeddings API (or any
compatible provider) and is responsible for:

- Efficient batching of text inputs
- Bounded request timeouts
- Network, transport and response-shape error isolation

Every failure surfaces as EmbeddingError, an UpstreamServiceError. Callers
decide what a failure means (abort indexing, or downgrade to fallback search);
the client never retries.
"""

from __future__ import annotations

from typing import List, Sequence, Optional
import logging
import httpx

from ..config import settings
from ..core.errors import UpstreamServiceError

logger = logging.getLogger("mediphant.embedder")


class EmbeddingError(UpstreamServiceError):
    """Raised when embedding generation fails."""


class Embedder:
    """
    Asynchronous embedding generator for batches of text.

    The class is stateless apart from its configuration and is safe to reuse
    across concurrent requests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize an Embedder.

        Parameters
        ----------
        api_key : Optional[str]
            Override for the OpenAI API key. Defaults to settings.openai_api_key.

        model : Optional[str]
            Override for the embedding model. Defaults to settings.embedding_model.

        base_url : Optional[str]
            API base URL. Defaults to settings.openai_base_url.

        timeout : Optional[float]
            HTTP timeout per request. Defaults to settings.upstream_timeout_seconds.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport, used by tests.

        Raises
        ------
        EmbeddingError
            If no API key is available.
        """
        if api_key is None and settings.openai_api_key is not None:
            api_key = settings.openai_api_key.get_secret_value()
        if not api_key:
            raise EmbeddingError("Embedding API key is not configured.")

        self.api_key = api_key
        self.model = model or settings.embedding_model
        self.url = (base_url or settings.openai_base_url).rstrip("/") + "/embeddings"
        self.timeout = timeout if timeout is not None else settings.upstream_timeout_seconds
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(
        self,
        texts: Sequence[str],
        batch_size: int = 20,
    ) -> List[List[float]]:
        """
        Generate embeddings for a sequence of input texts.

        Parameters
        ----------
        texts : Sequence[str]
            Input text strings.

        batch_size : int
            Maximum batch size per request.

        Returns
        -------
        List[List[float]]
            One embedding per input text, in input order.

        Raises
        ------
        EmbeddingError
            If any batch fails, times out, or the response is malformed.
        """
        if not texts:
            return []

        all_embeddings: List[List[float]] = []
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            for start in range(0, len(texts), batch_size):
                batch = list(texts[start : start + batch_size])
                payload = {
                    "model": self.model,
                    "input": batch,
                }

                try:
                    response = await client.post(
                        self.url,
                        json=payload,
                        headers=headers,
                    )
                    response.raise_for_status()
                    data = response.json()
                except (httpx.HTTPError, ValueError) as exc:
                    logger.error(
                        "Embedding request failed (%s): batch size=%d",
                        type(exc).__name__,
                        len(batch),
                    )
                    raise EmbeddingError(
                        f"Embedding generation failed: {type(exc).__name__}"
                    ) from exc

                embeddings = self._extract_embeddings(data)
                if len(embeddings) != len(batch):
                    raise EmbeddingError(
                        f"Embedding count mismatch: sent {len(batch)}, "
                        f"received {len(embeddings)}."
                    )
                all_embeddings.extend(embeddings)

        return all_embeddings

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"embedding": [...]}, ... ] }

        Raises
        ------
        EmbeddingError
            If the API returns unexpected structure.
        """
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingError("'data' field must be a list.")

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingError(
                    f"Malformed embedding record at index {index}."
                )

            emb = record["embedding"]
            if not isinstance(emb, list) or not emb or not all(
                isinstance(x, (float, int)) for x in emb
            ):
                raise EmbeddingError(
                    f"Invalid embedding vector at index {index}: must be float list."
                )

            embeddings.append([float(x) for x in emb])

        return embeddings
