#!/usr/bin/env python3
"""Fellowship registration server - form administration and public self-registration"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from fellowship.config import config
from fellowship.logging_config import get_logger, setup_logging
from fellowship.rate_limit import limiter, rate_limit_exceeded_handler
from fellowship.routers.health import health
from fellowship.routers.registration import router as registration_router

# Configure logging (INFO -> stdout, WARNING/ERROR -> stderr)
setup_logging()
logger = get_logger(__name__)


app = FastAPI(
    title="Fellowship Registration",
    description="Membership management API - shareable self-registration forms with capacity and expiry limits",
    version="1.0.0",
    license_info={
        "name": "MIT",
    },
)

# Behind a reverse proxy request.client must reflect the original caller,
# both for rate limiting and for the address stored on submission receipts
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config["frontend_url"].rstrip("/")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.include_router(health)
app.include_router(registration_router)


if __name__ == "__main__":
    port = config.get("port")
    logger.info(f"Starting fellowship registration server on 0.0.0.0:{port}")
    logger.info("Health check available at /api/health")

    if not config.get("jwt_secret"):
        logger.warning("JWT_SECRET is not set; admin endpoints will reject every token")

    try:
        uvicorn.run(
            app, host="0.0.0.0", port=port, log_level=config["log_level"].lower()
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise
