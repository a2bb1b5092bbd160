"""
HomeServices - FastAPI Backend.

REST API for the home-services marketplace.
"""

from .main import app, create_app, main
from .dependencies import (
    AppContext,
    Settings,
    get_settings,
    get_db,
    get_context,
)

__all__ = [
    "app",
    "create_app",
    "main",
    "AppContext",
    "Settings",
    "get_settings",
    "get_db",
    "get_context",
]
