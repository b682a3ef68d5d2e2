"""Core app configuration, credential store and password hashing."""

from app.core.config import get_settings, settings
from app.core.store import get_store

__all__ = ["get_settings", "settings", "get_store"]
