"""Reminder management service."""

import logging
from datetime import timedelta
from typing import List, Optional

from pocket_assistant.config import get
from pocket_assistant.db import Store, Recurrence
from pocket_assistant.errors import NotFound, ValidationError
from pocket_assistant.timeutil import utcnow

logger = logging.getLogger(__name__)


def parse_recurrence(value: Optional[str]) -> Optional[str]:
    """Normalize a recurrence keyword. None, "" and "none" mean no recurrence."""
    if value is None or value.strip().lower() in ("", "none"):
        return None
    try:
        return Recurrence(value.strip().lower()).value
    except ValueError:
        raise ValidationError(
            f"Unknown recurrence '{value}'. Use: "
            + ", ".join(r.value for r in Recurrence)
        ) from None


class ReminderService:
    """Create, edit, list and delete reminders, arming their timers via the scheduler."""

    def __init__(self, scheduler=None, store: Store = None):
        self.scheduler = scheduler
        self.store = store or Store()
        self.min_minutes = get("reminders.min_minutes", 1)
        self.max_minutes = get("reminders.max_minutes", 1440)

    def create(self, owner_id: str, minutes: int, text: str, recurrence: str = None) -> dict:
        """Create a reminder due ``minutes`` from now and arm it."""
        self._validate(minutes, text)
        recurrence = parse_recurrence(recurrence)

        now = utcnow()
        reminder = self.store.insert("reminder", {
            "owner_id": owner_id,
            "text": text.strip(),
            "due_at": now + timedelta(minutes=minutes),
            "completed": False,
            "recurrence": recurrence,
            "created_at": now,
        })
        logger.info(f"Created reminder #{reminder['id']} for owner {owner_id} due {reminder['due_at']} UTC")

        self._arm(reminder)
        return reminder

    def edit(self, owner_id: str, reminder_id: int, minutes: int, text: str, recurrence: str = None) -> dict:
        """Reset a reminder's text and deadline and re-arm it.

        Without an explicit recurrence, ``reminders.edit_default_recurrence``
        applies (daily unless configured otherwise).
        """
        self._validate(minutes, text)
        if recurrence is None:
            recurrence = get("reminders.edit_default_recurrence", Recurrence.DAILY.value)
        recurrence = parse_recurrence(recurrence)

        reminder = self.store.find_by_id("reminder", reminder_id, owner_id)
        if not reminder:
            raise NotFound("reminder", reminder_id)

        reminder["text"] = text.strip()
        reminder["due_at"] = utcnow() + timedelta(minutes=minutes)
        reminder["recurrence"] = recurrence
        reminder["completed"] = False
        reminder = self.store.update("reminder", reminder)

        self._arm(reminder)
        return reminder

    def get(self, owner_id: str, reminder_id: int) -> Optional[dict]:
        return self.store.find_by_id("reminder", reminder_id, owner_id)

    def list_active(self, owner_id: str) -> List[dict]:
        """Uncompleted reminders, soonest first."""
        return self.store.list("reminder", owner_id, order_by="due_at", completed=False)

    def list(self, owner_id: str) -> List[dict]:
        return self.store.list("reminder", owner_id, order_by="due_at")

    def delete(self, owner_id: str, reminder_id: int) -> int:
        """Delete a reminder and cancel its timers. Returns rows removed."""
        count = self.store.delete_by_id("reminder", reminder_id, owner_id)
        if count and self.scheduler:
            self.scheduler.cancel(reminder_id)
        return count

    def _arm(self, reminder: dict):
        if self.scheduler:
            self.scheduler.arm(reminder)

    def _validate(self, minutes: int, text: str):
        if not isinstance(minutes, int) or not self.min_minutes <= minutes <= self.max_minutes:
            raise ValidationError(
                f"Please give a time between {self.min_minutes} and {self.max_minutes} minutes"
            )
        if not text or not text.strip():
            raise ValidationError("Reminder text must not be empty")
