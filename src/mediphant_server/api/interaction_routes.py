"""
Interaction Routes

Checks a medication pair against the static interaction table and records the
check in the recent-activity log.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from .dependencies import enforce_rate_limit, get_history_log
from .models import InteractionRequest, InteractionResponse
from ..interactions.rules import check_interaction
from ..sessions.history import BoundedHistoryLog

router = APIRouter(prefix="/api", tags=["interactions"])


@router.post(
    "/interactions",
    response_model=InteractionResponse,
    summary="Check a medication pair for known interactions",
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(enforce_rate_limit)],
)
async def interactions(
    req: InteractionRequest,
    history: Annotated[BoundedHistoryLog, Depends(get_history_log)],
) -> InteractionResponse:
    result = check_interaction(req.medA, req.medB)
    history.record(req.medA, req.medB, result.is_potentially_risky, result.reason)
    return InteractionResponse.from_result(result)
