"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries (must be set before importing them)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

# Try to use uvloop for better performance (Unix only)
try:
    import uvloop
    uvloop.install()
    _UVLOOP_ENABLED = True
except ImportError:
    _UVLOOP_ENABLED = False

from app.api import router
from app.api.deps import EVENT_LOG_NAMES
from app.config import get_settings
from app.market_defaults import get_market_defaults
from app.services import MarketDataGateway
from app.storage import EventLog, cache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting %s v%s...", settings.app_name, settings.app_version)
    logger.info(f"Event loop: {'uvloop' if _UVLOOP_ENABLED else 'asyncio'}")

    # Initialize Redis cache with timeout
    try:
        await asyncio.wait_for(cache.init_cache(), timeout=10)
        if cache.is_cache_available():
            logger.info("Redis cache initialized")
        else:
            logger.warning("Redis cache unavailable - running without caching")
    except asyncio.TimeoutError:
        logger.warning("Redis cache initialization timed out - running without caching")

    defaults = get_market_defaults()
    gateway = MarketDataGateway.from_settings(defaults, settings)

    app.state.market_defaults = defaults
    app.state.gateway = gateway
    app.state.event_logs = {
        name: EventLog(settings.data_dir / f"{name}.jsonl") for name in EVENT_LOG_NAMES
    }
    logger.info("Analytics logs in %s", settings.data_dir)

    yield

    # Shutdown
    logger.info("Shutting down...")
    await gateway.close()
    await cache.close_cache()
    logger.info("Shutdown complete")


# Create FastAPI app with orjson for faster JSON serialization
app = FastAPI(
    title="VaultSignal",
    description="Bitcoin and MSTR market data, indicators and composite signal",
    version=get_settings().app_version,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include REST routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "event_loop": "uvloop" if _UVLOOP_ENABLED else "asyncio",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "cache": await cache.ping()}


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
