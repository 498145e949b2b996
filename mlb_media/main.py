from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from typing import Optional

from mlb_media.api.videos import router as videos_router
from mlb_media.core.config import settings, VERSION
from mlb_media.middleware.error_handler import register_exception_handlers
from mlb_media.services.video_service import VideoService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def create_app(service: Optional[VideoService] = None) -> FastAPI:
    """
    Build the application around a single VideoService instance.

    Args:
        service: Pre-built service (tests inject one with fake collaborators)
    """
    app = FastAPI(
        title="MLB Media Block API",
        description="Imports MLB.com video metadata for the editor",
        version=VERSION
    )
    app.state.video_service = service or VideoService()

    # Error handling (registers the outermost middleware)
    register_exception_handlers(app)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-MLB-Video-Slug"],
    )

    app.include_router(videos_router)

    @app.on_event("startup")
    async def startup_event():
        """Connect the cache on startup."""
        logger.info("Starting MLB Media Block API")
        cache = app.state.video_service.cache
        if cache.redis_client is None and not await cache.connect():
            logger.warning("Redis unavailable; imports will run uncached until it comes back")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Release the cache connection on shutdown."""
        logger.info("Shutting down MLB Media Block API")
        await app.state.video_service.cache.disconnect()

    @app.get("/health")
    async def health_check():
        cache_health = await app.state.video_service.cache.health_check()
        return {
            "status": "healthy" if cache_health["status"] == "healthy" else "degraded",
            "cache": cache_health
        }

    return app


app = create_app()
