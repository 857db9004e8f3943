"""
Corpus Data Models

Each Chunk is one retrievable line of the knowledge corpus. The same chunk
list backs both the vector index (via the indexing job) and the in-memory
fallback search.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, ConfigDict


class Chunk(BaseModel):
    """
    A single corpus chunk.

    `ordinal` is the zero-based position in the document and is the tie-break
    key for fallback ranking.
    """

    id: str = Field(..., min_length=1)

    text: str = Field(..., min_length=1)

    source_ref: str = Field(
        ...,
        min_length=1,
        description="Name of the corpus document this chunk came from.",
    )

    ordinal: int = Field(..., ge=0)

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )
