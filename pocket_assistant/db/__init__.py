"""Database models and session management."""

from .models import Base, Note, Reminder, Media, Recurrence, MediaKind
from .session import get_session, init_db, close_db, is_initialized
from .store import Store

__all__ = [
    "Base",
    "Note",
    "Reminder",
    "Media",
    "Recurrence",
    "MediaKind",
    "Store",
    "get_session",
    "init_db",
    "close_db",
    "is_initialized",
]
