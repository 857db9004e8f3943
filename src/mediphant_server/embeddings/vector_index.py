"""
Pinecone Vector Index Client

A thin asynchronous client for the Pinecone REST API, covering exactly what
the service needs:

- describe_stats: connectivity / health check for the indexing job
- upsert: batched writes of chunk vectors
- query: top-k similarity search for live requests

Every call is bounded by a timeout. Transport errors, non-2xx responses and
malformed bodies raise VectorIndexError, an UpstreamServiceError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .models import VectorMatch, VectorRecord
from ..config import settings
from ..core.errors import UpstreamServiceError

logger = logging.getLogger("mediphant.vector_index")

API_VERSION = "2024-07"


class VectorIndexError(UpstreamServiceError):
    """Raised when a vector index call fails."""

    def __init__(self, message: str, upserted: int = 0) -> None:
        super().__init__(message)
        self.upserted = upserted


class PineconeIndex:
    """
    Client for a single Pinecone index.

    The data-plane host is taken from configuration when given, otherwise it
    is resolved once through the control plane and cached.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        index_name: Optional[str] = None,
        host: Optional[str] = None,
        control_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if api_key is None and settings.pinecone_api_key is not None:
            api_key = settings.pinecone_api_key.get_secret_value()
        if not api_key:
            raise VectorIndexError("Vector index API key is not configured.")

        self._api_key = api_key
        self.index_name = index_name or settings.pinecone_index
        self._host = _normalize_host(host or settings.pinecone_host)
        self._control_url = (control_url or settings.pinecone_control_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.upstream_timeout_seconds
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def describe_stats(self) -> Dict[str, Any]:
        """Return the index statistics document (dimension, vector counts)."""
        async with self._client() as client:
            return await self._data_call(client, "/describe_index_stats", {})

    async def query(
        self,
        vector: Sequence[float],
        top_k: int = 3,
    ) -> List[VectorMatch]:
        """
        Return the `top_k` nearest neighbours of `vector`, in backend order.

        Raises
        ------
        VectorIndexError
            On any failure, including a malformed response body.
        """
        payload = {
            "vector": list(vector),
            "topK": top_k,
            "includeMetadata": True,
        }
        async with self._client() as client:
            data = await self._data_call(client, "/query", payload)

        raw_matches = data.get("matches") or []
        if not isinstance(raw_matches, list):
            raise VectorIndexError("Query response 'matches' must be a list.")

        matches: List[VectorMatch] = []
        for raw in raw_matches:
            if not isinstance(raw, dict):
                raise VectorIndexError("Malformed match in query response.")
            metadata = raw.get("metadata") or {}
            text = metadata.get("text") if isinstance(metadata, dict) else None
            matches.append(
                VectorMatch(
                    id=str(raw.get("id", "")),
                    score=float(raw.get("score") or 0.0),
                    text=text if isinstance(text, str) else "",
                )
            )
        return matches

    async def upsert(
        self,
        records: Sequence[VectorRecord],
        batch_size: int = 100,
    ) -> int:
        """
        Write records in batches and return the number upserted.

        Raises
        ------
        VectorIndexError
            On the first failing batch. Its `upserted` attribute holds the
            number of vectors written by earlier batches.
        """
        if not records:
            return 0

        upserted = 0
        async with self._client() as client:
            for start in range(0, len(records), batch_size):
                batch = records[start : start + batch_size]
                payload = {"vectors": [r.model_dump() for r in batch]}
                try:
                    data = await self._data_call(client, "/vectors/upsert", payload)
                except VectorIndexError as exc:
                    raise VectorIndexError(str(exc), upserted=upserted) from exc
                upserted += int(data.get("upsertedCount", len(batch)))

        return upserted

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Api-Key": self._api_key,
                "X-Pinecone-API-Version": API_VERSION,
            },
        )

    async def _resolve_host(self, client: httpx.AsyncClient) -> str:
        if self._host:
            return self._host

        data = await self._call(
            client, "GET", f"{self._control_url}/indexes/{self.index_name}"
        )
        host = data.get("host")
        if not isinstance(host, str) or not host:
            raise VectorIndexError("Index description did not include a host.")

        self._host = _normalize_host(host)
        logger.info("Resolved vector index host for %s", self.index_name)
        return self._host

    async def _data_call(
        self,
        client: httpx.AsyncClient,
        path: str,
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        host = await self._resolve_host(client)
        return await self._call(client, "POST", f"{host}{path}", payload)

    @staticmethod
    async def _call(
        client: httpx.AsyncClient,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await client.request(method, url, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "Vector index request failed (%s): %s %s",
                type(exc).__name__,
                method,
                httpx.URL(url).path,
            )
            raise VectorIndexError(
                f"Vector index call failed: {type(exc).__name__}"
            ) from exc

        if not isinstance(data, dict):
            raise VectorIndexError("Vector index response must be a JSON object.")
        return data


def _normalize_host(host: Optional[str]) -> Optional[str]:
    if not host:
        return None
    host = host.rstrip("/")
    if not host.startswith(("http://", "https://")):
        host = f"https://{host}"
    return host
