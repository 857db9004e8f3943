from typing import Annotated

from fastapi import Depends, Request

from ..core.errors import RateLimitExceeded
from ..core.rate_limiter import RateLimiter
from ..search.service import FAQService
from ..services import Services
from ..sessions.history import BoundedHistoryLog


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_faq_service(services: Annotated[Services, Depends(get_services)]) -> FAQService:
    return services.faq


def get_rate_limiter(services: Annotated[Services, Depends(get_services)]) -> RateLimiter:
    return services.rate_limiter


def get_history_log(services: Annotated[Services, Depends(get_services)]) -> BoundedHistoryLog:
    return services.history


def client_identity(request: Request) -> str:
    """
    Best-effort client address: first X-Forwarded-For hop, then X-Real-IP,
    then the socket peer.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(
    client: Annotated[str, Depends(client_identity)],
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> str:
    """Admit the request or raise RateLimitExceeded. Returns the client key."""
    if not limiter.is_allowed(client):
        raise RateLimitExceeded(
            retry_after=limiter.retry_after(client),
            message=f"Rate limit exceeded for client {client}",
        )
    return client
