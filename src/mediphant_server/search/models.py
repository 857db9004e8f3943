"""
Search Domain Models

Value types flowing through the retrieval-and-synthesis pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from pydantic import BaseModel, Field, ConfigDict

MAX_MATCHES = 3


class SearchMatch(BaseModel):
    """
    One retrieved passage.

    `score` lies in [0, 1] on the fallback path; on the vector path it is the
    backend's native similarity value.
    """

    text: str = Field(..., min_length=1)
    score: float

    model_config = ConfigDict(extra="forbid", frozen=True)


class FAQResult(BaseModel):
    """Final answer plus the passages it was built from (at most three)."""

    answer: str
    matches: List[SearchMatch] = Field(default_factory=list, max_length=MAX_MATCHES)

    model_config = ConfigDict(extra="forbid", frozen=True)


class OrchestratorMode(str, Enum):
    VECTOR_READY = "vector_ready"
    FALLBACK_ONLY = "fallback_only"


class CredentialState(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


# ---------------------------------------------------------------------
# Vector path outcomes
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class VectorHit:
    """The vector path produced a result (possibly empty)."""
    matches: Tuple[SearchMatch, ...]


@dataclass(frozen=True)
class NeedsFallback:
    """The vector path could not serve the request."""
    reason: str


VectorOutcome = Union[VectorHit, NeedsFallback]
