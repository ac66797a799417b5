"""Reminder timers: pre-notification, firing, recurrence and restart recovery.

Each armed reminder owns up to two one-shot jobs on the bot's JobQueue. The
scheduler keeps them in a registry keyed by reminder id so that editing or
deleting a reminder cancels the timers armed for its previous deadline.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from apscheduler.jobstores.base import JobLookupError

from pocket_assistant.db import Store, Recurrence, is_initialized
from pocket_assistant.errors import TransportError
from pocket_assistant.timeutil import utcnow

logger = logging.getLogger(__name__)

RECURRENCE_STEPS = {
    Recurrence.DAILY.value: timedelta(days=1),
    Recurrence.WEEKLY.value: timedelta(days=7),
}


def next_occurrence(due_at: datetime, recurrence: str, now: datetime = None) -> datetime:
    """Advance ``due_at`` by one recurrence step, then by further whole steps
    until it lies in the future."""
    step = RECURRENCE_STEPS[recurrence]
    now = now or utcnow()
    due_at = due_at + step
    while due_at <= now:
        due_at += step
    return due_at


class ReminderScheduler:
    """Arms reminders on a python-telegram-bot JobQueue and runs their lifecycle."""

    def __init__(self, job_queue, notifier, store: Store = None, pre_notify_minutes: int = 5):
        self.job_queue = job_queue
        self.notifier = notifier
        self.store = store or Store()
        self.pre_notify = timedelta(minutes=pre_notify_minutes)
        self._jobs: Dict[int, List] = {}

    def arm(self, reminder: dict):
        """Schedule the pre-notification (when far enough ahead) and the firing."""
        reminder_id = reminder["id"]
        self.cancel(reminder_id)

        time_until = reminder["due_at"] - utcnow()
        data = {
            "reminder_id": reminder_id,
            "owner_id": reminder["owner_id"],
            "due_at": reminder["due_at"],
        }

        jobs = []
        if time_until > self.pre_notify:
            jobs.append(self.job_queue.run_once(
                self._pre_notify_job,
                when=(time_until - self.pre_notify).total_seconds(),
                data=data,
                name=f"reminder_{reminder_id}_pre",
            ))

        jobs.append(self.job_queue.run_once(
            self._fire_job,
            when=max(time_until.total_seconds(), 0),
            data=data,
            name=f"reminder_{reminder_id}",
        ))
        self._jobs[reminder_id] = jobs

        logger.info(f"Armed reminder #{reminder_id} for {reminder['due_at']} UTC")

    def cancel(self, reminder_id: int) -> int:
        """Remove every timer armed for a reminder. Returns how many were removed."""
        jobs = self._jobs.pop(reminder_id, [])
        cancelled = 0
        for job in jobs:
            if job.removed:
                continue
            try:
                job.schedule_removal()
                cancelled += 1
            except JobLookupError:
                # Already handed to the executor
                pass
        if cancelled:
            logger.info(f"Cancelled {cancelled} timer(s) for reminder #{reminder_id}")
        return cancelled

    def cancel_all(self, reminder_ids: Iterable[int]) -> int:
        return sum(self.cancel(reminder_id) for reminder_id in reminder_ids)

    def active_jobs(self, reminder_id: int) -> List:
        return list(self._jobs.get(reminder_id, []))

    def recover(self) -> int:
        """Re-arm every uncompleted reminder after a restart.

        Overdue reminders fire immediately, once.
        """
        if not is_initialized():
            logger.warning("Database unavailable, no reminders recovered")
            return 0

        try:
            pending = self.store.pending_reminders()
        except Exception as e:
            logger.error(f"Could not load pending reminders for recovery: {e}")
            return 0

        for reminder in pending:
            self.arm(reminder)

        logger.info(f"Recovered {len(pending)} pending reminder(s)")
        return len(pending)

    async def send_pre_notification(self, reminder_id: int, owner_id: str, due_at: datetime):
        reminder = self._load_current(reminder_id, owner_id, due_at)
        if reminder is None:
            return

        minutes = int(self.pre_notify.total_seconds() // 60)
        try:
            await self.notifier.send(owner_id, f"⏳ {minutes} minutes until: {reminder['text']}")
            logger.info(f"Sent pre-notification for reminder #{reminder_id}")
        except TransportError as e:
            logger.warning(f"Pre-notification for reminder #{reminder_id} not delivered: {e}")

    async def fire(self, reminder_id: int, owner_id: str, due_at: datetime):
        """Deliver a due reminder, then complete it or schedule its next occurrence."""
        reminder = self._load_current(reminder_id, owner_id, due_at)
        if reminder is None:
            return

        try:
            await self.notifier.send(owner_id, f"⏰ Reminder: {reminder['text']}")
            logger.info(f"Sent reminder #{reminder_id} to owner {owner_id}")
        except TransportError as e:
            logger.error(f"Failed to deliver reminder #{reminder_id}: {e}")

        # An edit or delete may have been committed while sending
        reminder = self._load_current(reminder_id, owner_id, due_at)
        if reminder is None:
            return

        if reminder["recurrence"] in RECURRENCE_STEPS:
            reminder["due_at"] = next_occurrence(reminder["due_at"], reminder["recurrence"])
            reminder = self.store.update("reminder", reminder)
            self.arm(reminder)
            logger.info(f"Rescheduled {reminder['recurrence']} reminder #{reminder_id} for {reminder['due_at']} UTC")
        else:
            reminder["completed"] = True
            self.store.update("reminder", reminder)

    def _load_current(self, reminder_id: int, owner_id: str, due_at: datetime):
        """The stored reminder, or None when the timer no longer applies to it."""
        reminder = self.store.find_by_id("reminder", reminder_id, owner_id)
        if reminder is None:
            logger.info(f"Reminder #{reminder_id} no longer exists, dropping timer")
            return None
        if reminder["completed"]:
            logger.info(f"Reminder #{reminder_id} already completed, dropping timer")
            return None
        if reminder["due_at"] != due_at:
            logger.info(f"Reminder #{reminder_id} was rescheduled, dropping stale timer")
            return None
        return reminder

    def _forget(self, job):
        jobs = self._jobs.get(job.data["reminder_id"])
        if jobs and job in jobs:
            jobs.remove(job)
            if not jobs:
                del self._jobs[job.data["reminder_id"]]

    async def _pre_notify_job(self, context):
        self._forget(context.job)
        try:
            await self.send_pre_notification(**context.job.data)
        except Exception as e:
            logger.error(f"Error in pre-notification for reminder #{context.job.data['reminder_id']}: {e}")

    async def _fire_job(self, context):
        self._forget(context.job)
        try:
            await self.fire(**context.job.data)
        except Exception as e:
            logger.exception(f"Error firing reminder #{context.job.data['reminder_id']}: {e}")
