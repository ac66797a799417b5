"""Pocket Assistant - a Telegram bot for notes, reminders and media."""

__version__ = "1.0.0"
