from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_faq_service
from ..search.service import FAQService

router = APIRouter(tags=["health"])

@router.get("/health")
def health(service: Annotated[FAQService, Depends(get_faq_service)]):
    return {"status": "ok", "search_mode": service.orchestrator.mode.value}
