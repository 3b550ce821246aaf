"""API middleware for rate limiting and CORS"""
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi.middleware.cors import CORSMiddleware

from lumin.config import CORS_ORIGINS, DEFAULT_RATE_LIMIT, RATE_LIMIT_ENABLED

logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


def setup_cors(app):
    """Configure CORS middleware"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info(f"CORS configured for origins: {CORS_ORIGINS}")


def setup_rate_limiting(app):
    """Attach the limiter; the 429 handler is registered with the other error handlers"""
    app.state.limiter = limiter
    if RATE_LIMIT_ENABLED:
        logger.info(f"Rate limiting configured: {DEFAULT_RATE_LIMIT} per IP")
    else:
        logger.info("Rate limiting disabled (RATE_LIMIT_ENABLED=false)")
