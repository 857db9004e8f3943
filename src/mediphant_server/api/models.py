"""
API Models

This module defines the Pydantic models used for request/response validation
across the FAQ, interaction and history endpoints.

Design Goals
------------
- Strong typing
- Safe defaults (no shared mutable state)
- Wire field names match the existing web and mobile clients (camelCase
  where those clients expect it)
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Tuple

from pydantic import BaseModel, Field, ConfigDict, field_validator

from ..interactions.rules import InteractionResult
from ..search.models import FAQResult
from ..sessions.history import HistoryItem

MEDICATION_NAME_PATTERN = r"^[a-zA-Z0-9\s\-\.]+$"
MAX_MEDICATION_LENGTH = 100


# ---------------------------------------------------------------------
# FAQ Models
# ---------------------------------------------------------------------

class SearchMatchOut(BaseModel):
    text: str
    score: float


class FAQResponse(BaseModel):
    """
    FAQ answer payload. `matches` holds at most three passages, best first.
    """
    answer: str
    matches: List[SearchMatchOut] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: FAQResult) -> "FAQResponse":
        return cls(
            answer=result.answer,
            matches=[SearchMatchOut(text=m.text, score=m.score) for m in result.matches],
        )


# ---------------------------------------------------------------------
# Interaction Models
# ---------------------------------------------------------------------

class InteractionRequest(BaseModel):
    """
    Medication pair to check. Names are trimmed before validation.
    """
    medA: str = Field(..., min_length=1, max_length=MAX_MEDICATION_LENGTH, pattern=MEDICATION_NAME_PATTERN)
    medB: str = Field(..., min_length=1, max_length=MAX_MEDICATION_LENGTH, pattern=MEDICATION_NAME_PATTERN)

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("medB")
    @classmethod
    def medications_differ(cls, value: str, info):
        med_a = info.data.get("medA")
        if med_a is not None and med_a.lower() == value.lower():
            raise ValueError("Please provide two different medications")
        return value


class InteractionResponse(BaseModel):
    pair: Tuple[str, str]
    isPotentiallyRisky: bool
    reason: str
    advice: str

    @classmethod
    def from_result(cls, result: InteractionResult) -> "InteractionResponse":
        return cls(
            pair=result.pair,
            isPotentiallyRisky=result.is_potentially_risky,
            reason=result.reason,
            advice=result.advice,
        )


# ---------------------------------------------------------------------
# History Models
# ---------------------------------------------------------------------

class HistoryItemOut(BaseModel):
    id: str
    medA: str
    medB: str
    isPotentiallyRisky: bool
    reason: str
    timestamp: datetime

    @classmethod
    def from_item(cls, item: HistoryItem) -> "HistoryItemOut":
        return cls(
            id=item.id,
            medA=item.med_a,
            medB=item.med_b,
            isPotentiallyRisky=item.is_risky,
            reason=item.reason,
            timestamp=item.timestamp,
        )


class HistoryResponse(BaseModel):
    history: List[HistoryItemOut] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
