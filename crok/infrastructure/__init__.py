"""Infrastructure module for the application."""

from .config import get_settings
from .database.session import async_session, create_tables, local_session

__all__ = [
    "async_session",
    "create_tables",
    "get_settings",
    "local_session",
]
