"""Shared dependencies for API routers."""

from typing import Optional
from fastapi import HTTPException
from api.schemas import ErrorDetail
from config import ConfigManager
from services import GroupQueryService
from services.errors import (
    Cancelled,
    DanglingReference,
    GroupQueryError,
    InvalidFilter,
    TenantNotFound,
    UpstreamUnavailable,
)

# Global instances - set by main.py lifespan
_service: Optional[GroupQueryService] = None
_config_manager: Optional[ConfigManager] = None

# HTTP status per error type; anything else in the taxonomy is a 500
_STATUS_CODES = {
    InvalidFilter: 400,
    TenantNotFound: 404,
    DanglingReference: 404,
    UpstreamUnavailable: 503,
    Cancelled: 504,
}


def set_service(service: Optional[GroupQueryService]) -> None:
    """Set the global query service (called from main.py lifespan)."""
    global _service
    _service = service


def set_config_manager(config_manager: Optional[ConfigManager]) -> None:
    """Set the global config manager instance (called from main.py lifespan)."""
    global _config_manager
    _config_manager = config_manager


def get_service() -> GroupQueryService:
    """Dependency for getting the group query service."""
    if _service is None:
        raise HTTPException(status_code=503, detail="Query service not initialized")
    return _service


def get_config() -> ConfigManager:
    """Dependency for getting the config manager."""
    if _config_manager is None:
        raise HTTPException(status_code=503, detail="Config not initialized")
    return _config_manager


def to_http_exception(error: GroupQueryError) -> HTTPException:
    """Translate a query error into the HTTP error the client sees."""
    status_code = 500
    for error_type, code in _STATUS_CODES.items():
        if isinstance(error, error_type):
            status_code = code
            break

    detail = ErrorDetail(
        error=type(error).__name__,
        message=str(error),
        retryable=error.retryable,
        field=getattr(error, "field", None),
    )
    return HTTPException(status_code=status_code, detail=detail.model_dump(exclude_none=True))
