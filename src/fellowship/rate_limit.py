"""Rate limiting for public endpoints using slowapi.

Submissions are limited per client address. The limit string is read from
config on each request so it can be changed without re-decorating routes.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from fellowship.config import config
from fellowship.logging_config import get_logger

logger = get_logger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    enabled=config["rate_limit_enabled"],
    storage_uri="memory://",
)


def submission_rate_limit() -> str:
    """Limit applied to public form submissions, e.g. "30/minute" """
    return config["submission_rate_limit"]


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    logger.warning(
        f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}"
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": {
                "success": False,
                "message": "Too many requests. Please try again later.",
                "code": "RATE_LIMIT_EXCEEDED",
            }
        },
    )
