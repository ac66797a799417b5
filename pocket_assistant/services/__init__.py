"""Services for the personal assistant."""

from .notes import NoteService
from .media import MediaService
from .reminders import ReminderService
from .account import AccountService

__all__ = ["NoteService", "MediaService", "ReminderService", "AccountService"]
