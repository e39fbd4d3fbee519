"""
Echo Path Service - Entry Point

Serves the path endpoint the map client talks to. The service returns the
endpoints it receives, so the client-side synchronization can be exercised
without a routing backend.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import load_config, ConfigurationError
from .api.routes import router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown."""
    logger.info("=" * 60)
    logger.info("ECHO PATH SERVICE - STARTING")
    logger.info("=" * 60)

    try:
        config = load_config()
        logger.info("Configuration loaded successfully")
        logger.info(f"  strategy: {config.strategy}")
        logger.info(f"  path service URL: {config.path_service_url}")
        logger.info(f"  timeout: {config.path_service_timeout_s}s")
        logger.info(f"Server ready on {config.backend_host}:{config.backend_port}")

        app.state.config = config

        yield

    except ConfigurationError as e:
        logger.error("=" * 60)
        logger.error("CONFIGURATION ERROR")
        logger.error("=" * 60)
        logger.error(str(e))
        logger.error("See config.yaml and .env.example for the available settings.")
        sys.exit(1)

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    try:
        config = load_config()
    except ConfigurationError:
        # Let lifespan handle the error with better messaging
        config = None

    app = FastAPI(
        title="Echo Path Service",
        description="Returns the requested endpoints as a two-point path",
        version="1.0.0",
        lifespan=lifespan,
    )

    # The map page is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins if config else ["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = load_config()

    uvicorn.run(
        "pathsync.main:app",
        host=config.backend_host,
        port=config.backend_port,
        reload=False,
    )
