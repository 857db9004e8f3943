"""
Vector Index Data Models

Wire-level shapes exchanged with the vector backend: records written by the
indexing job and matches returned by similarity queries.
"""

from __future__ import annotations

from typing import List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict

from ..corpus.models import Chunk


class VectorRecord(BaseModel):
    """
    One vector to upsert, with the chunk text carried as metadata so queries
    can return passages without a second lookup.
    """

    id: str = Field(..., min_length=1)

    values: List[float] = Field(..., min_length=1)

    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_chunk(cls, chunk: Chunk, values: List[float]) -> "VectorRecord":
        return cls(
            id=chunk.id,
            values=values,
            metadata={
                "text": chunk.text,
                "source": chunk.source_ref,
                "chunk_index": chunk.ordinal,
            },
        )


class VectorMatch(BaseModel):
    """A single similarity-query hit. `text` is empty when metadata lacks it."""

    id: str
    score: float = 0.0
    text: str = ""

    model_config = ConfigDict(extra="forbid", frozen=True)
