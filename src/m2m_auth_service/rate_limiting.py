import logging

from fastapi import FastAPI, Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from m2m_auth_service.config import settings

logger = logging.getLogger(__name__)

TOKEN_LIMIT = settings.RATE_LIMIT_TOKEN

# Create a limiter instance
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",  # "moving-window" is more accurate but more resource-intensive
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Custom handler for rate limit exceeded exceptions"""
    logger.warning(f"Rate limit exceeded: {get_remote_address(request)} - {request.url.path}")
    retry_after = 60
    limit = getattr(exc, "limit", None)
    if limit is not None and getattr(limit, "limit", None) is not None:
        retry_after = limit.limit.get_expiry()
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests", "retry_after": retry_after},
        headers={"Retry-After": str(retry_after)},
    )


def setup_rate_limiting(app: FastAPI) -> None:
    """Configure rate limiting for the FastAPI application"""
    app.state.limiter = limiter

    if limiter.enabled:
        logger.info(f"Rate limiting is enabled: Token={TOKEN_LIMIT}")
    else:
        logger.info("Rate limiting is disabled")

    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
