"""API Routers for Group Browser."""

from .system import router as system_router
from .groups import router as groups_router

__all__ = [
    "system_router",
    "groups_router",
]
