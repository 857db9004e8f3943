from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_history_log
from .models import HistoryItemOut, HistoryResponse, MessageResponse
from ..sessions.history import BoundedHistoryLog

router = APIRouter(prefix="/api", tags=["history"])


@router.get("/history", response_model=HistoryResponse)
def list_history(
    history: Annotated[BoundedHistoryLog, Depends(get_history_log)],
) -> HistoryResponse:
    """Recent interaction checks, newest first."""
    return HistoryResponse(history=[HistoryItemOut.from_item(i) for i in history.list()])


@router.delete("/history", response_model=MessageResponse)
def clear_history(
    history: Annotated[BoundedHistoryLog, Depends(get_history_log)],
) -> MessageResponse:
    history.clear()
    return MessageResponse(message="History cleared successfully")
