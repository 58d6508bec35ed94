from .settings import Settings, get_settings
from .database import DatabaseManager, lifespan

__all__ = [
    "Settings",
    "get_settings",
    "DatabaseManager",
    "lifespan",
]
