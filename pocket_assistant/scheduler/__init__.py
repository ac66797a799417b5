"""Reminder scheduling."""

from .jobs import ReminderScheduler, next_occurrence

__all__ = ["ReminderScheduler", "next_occurrence"]
