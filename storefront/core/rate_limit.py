"""
Rate limiting

SlowAPI limiter shared by the auth and checkout routers. Counters are kept
in process memory; RATE_LIMIT_ENABLED=false turns every limit into a no-op.
"""
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from storefront.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 60


def client_key(request: Request) -> str:
    """Limiter key: the first X-Forwarded-For hop when proxied, else the peer address."""
    first_hop = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    return first_hop or get_remote_address(request)


limiter = Limiter(
    key_func=client_key,
    enabled=settings.RATE_LIMIT_ENABLED,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
)


def _retry_after(exc: RateLimitExceeded) -> int:
    limit = getattr(exc, "limit", None)
    if limit is None or getattr(limit, "limit", None) is None:
        return DEFAULT_RETRY_AFTER
    return int(limit.limit.get_expiry())


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 with the window length in seconds as Retry-After."""
    retry_after = _retry_after(exc)
    logger.warning(f"Rate limit {exc.detail} hit by {client_key(request)} on {request.url.path}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": f"Too many requests. Please wait {retry_after} seconds and try again.",
            "retry_after": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )
