"""Telegram command and message handlers."""
