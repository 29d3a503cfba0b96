"""Core app configuration, database and security primitives."""

from cloudcore.core.config import get_settings, settings
from cloudcore.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
