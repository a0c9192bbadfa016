"""FastAPI application for Group Browser.

This module provides the main application setup and router configuration.
All route handlers are organized in the api/routers/ directory.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import ConfigManager
from services import GroupQueryService
from api.routers import system_router, groups_router
from api.dependencies import set_service, set_config_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    config_manager: ConfigManager = app.state.config_manager
    config = config_manager.get_config()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    service = GroupQueryService.from_config(config)
    await service.store.initialize()

    # Set dependencies for routers
    set_config_manager(config_manager)
    set_service(service)

    logger.info(
        f"Group Browser API started (db={service.store.db_path}, "
        f"cache ttl={service.cache.ttl_seconds}s)"
    )

    yield

    # Cleanup on shutdown
    service.cache.clear()
    set_service(None)
    logger.info("Group Browser API shutting down")


def create_app(config_manager: Optional[ConfigManager] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config_manager: Configuration source; defaults to ~/.groupbrowser.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Group Browser",
        description="API for browsing vector groups of near-duplicate ad creatives",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.config_manager = config_manager or ConfigManager()

    # Configure CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(system_router)
    application.include_router(groups_router)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.config_manager.get_config()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
