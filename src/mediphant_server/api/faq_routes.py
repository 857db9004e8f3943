"""
FAQ Routes

Question answering over the medication-safety corpus. Requests are admitted by
the shared rate limiter, searched through the orchestrator (vector search or
lexical fallback) and answered by the synthesizer.

Failure Semantics
-----------------
- Missing or blank `q`            -> 400
- Rate limit exceeded             -> 429 with Retry-After
- Upstream service failures       -> recovered internally, still 200
- Anything unexpected             -> 500 with a safe answer and no matches
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from .dependencies import enforce_rate_limit, get_faq_service
from .models import FAQResponse
from ..core.errors import InternalError, ValidationError
from ..search.service import FAQService

logger = logging.getLogger("mediphant.api.faq")

router = APIRouter(prefix="/api", tags=["faq"])

QUERY_REQUIRED = 'Query parameter "q" is required'

SAFE_ERROR_ANSWER = (
    "Sorry, I encountered an error processing your request. "
    "Please consult with a healthcare professional."
)


@router.get(
    "/faq",
    response_model=FAQResponse,
    summary="Answer a medication-safety question",
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(enforce_rate_limit)],
)
async def faq(
    service: Annotated[FAQService, Depends(get_faq_service)],
    q: Annotated[Optional[str], Query()] = None,
) -> FAQResponse:
    """
    Answer `q` from the corpus.

    Returns
    -------
    FAQResponse
        Answer text plus up to three supporting passages, best first.
    """
    query = (q or "").strip()
    if not query:
        raise ValidationError("Missing FAQ query", public_message=QUERY_REQUIRED)

    try:
        result = await service.answer(query)
    except Exception as exc:
        raise InternalError(
            f"FAQ request failed: {type(exc).__name__}",
            extra={"answer": SAFE_ERROR_ANSWER, "matches": []},
        ) from exc

    return FAQResponse.from_result(result)
