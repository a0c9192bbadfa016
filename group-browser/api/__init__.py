"""Group Browser - API Module.

This module provides the FastAPI application for the
group browsing REST API.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
