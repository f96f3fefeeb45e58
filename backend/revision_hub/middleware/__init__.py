"""
Middleware Package

Provides FastAPI middleware for:
- Rate limiting
- Error handling

Rate limiting usage:
    from revision_hub.middleware import limiter, get_rate_limit
    from revision_hub.enums import RateLimitType

    @limiter.limit(get_rate_limit(RateLimitType.REVIEW))
    async def my_endpoint(request: Request):
        ...
"""

from revision_hub.middleware.error_handling import (
    ErrorHandlingMiddleware,
    ItemNotFoundError,
    NothingToUndoError,
    PersistenceError,
    ReviewValidationError,
    ServiceError,
    setup_error_handling,
)
from revision_hub.middleware.rate_limit import get_rate_limit, limiter, setup_rate_limiting

__all__ = [
    "setup_rate_limiting",
    "limiter",
    "get_rate_limit",
    "setup_error_handling",
    "ErrorHandlingMiddleware",
    "ServiceError",
    "ReviewValidationError",
    "ItemNotFoundError",
    "NothingToUndoError",
    "PersistenceError",
]
