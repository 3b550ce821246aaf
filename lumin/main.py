"""Main entry point for the LUMIN API server"""
import logging

import uvicorn

from lumin.config import validate_config, LOG_LEVEL, API_HOST, API_PORT
from lumin.observability.sentry_config import init_sentry

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


def main() -> None:
    """Validate configuration, initialize error tracking and serve the API"""
    logger.info("Validating configuration...")
    validate_config()

    # Sentry must be initialized before the app is created
    init_sentry()

    from lumin.api.server import create_api_application
    app = create_api_application()

    logger.info(f"Starting API server on {API_HOST}:{API_PORT}")
    uvicorn.run(app, host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
