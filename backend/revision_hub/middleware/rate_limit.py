"""
Rate Limiting Middleware

Prevents abuse and ensures fair resource usage using SlowAPI.

Usage:
    from revision_hub.middleware.rate_limit import limiter, get_rate_limit
    from revision_hub.enums import RateLimitType

    @router.post("")
    @limiter.limit(get_rate_limit(RateLimitType.REVIEW))
    async def submit_review(request: Request, ...):
        ...

Rate limit configurations (from settings):
- DEFAULT: General API endpoints (100/minute)
- REVIEW: Review submission and undo (60/minute)
- ANALYTICS: Streak and activity endpoints (30/minute)
"""

import logging

from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from revision_hub.config import settings
from revision_hub.enums import RateLimitType

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """
    Get client identifier for rate limiting.

    Uses X-Forwarded-For header if behind a proxy,
    otherwise falls back to direct IP address.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address or identifier
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First IP in the chain is the original client
        return forwarded_for.split(",")[0].strip()

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


def setup_rate_limiting(app: FastAPI, enabled: bool = True) -> None:
    """
    Configure rate limiting on the FastAPI app.

    Args:
        app: FastAPI application instance
        enabled: Whether to enable rate limiting
    """
    limiter.enabled = enabled

    # Route decorators look the limiter up on app state even when disabled
    app.state.limiter = limiter

    if not enabled:
        logger.info("Rate limiting disabled")
        return

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    logger.info("Rate limiting enabled")


def get_rate_limit(rate_limit_type: RateLimitType) -> str:
    """
    Get rate limit string for an endpoint type.

    Args:
        rate_limit_type: RateLimitType enum value

    Returns:
        Rate limit string (e.g., "60/minute")
    """
    return settings.get_rate_limit(rate_limit_type)
