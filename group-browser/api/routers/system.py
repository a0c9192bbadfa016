"""System router for Group Browser.

This module provides the health endpoint.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies import get_config, get_service
from config import ConfigManager
from services import GroupQueryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])

API_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    version: str
    configured: bool
    database_exists: bool = False
    cache_entries: int = 0
    cache_ttl_seconds: float = 0


@router.get("/health", response_model=HealthResponse)
async def health_check(
    config: ConfigManager = Depends(get_config),
    service: GroupQueryService = Depends(get_service),
):
    """Check API health, database presence and cache occupancy."""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        configured=config.is_configured(),
        database_exists=service.store.db_path.exists(),
        cache_entries=len(service.cache),
        cache_ttl_seconds=service.cache.ttl_seconds,
    )
