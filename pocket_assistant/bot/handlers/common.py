"""Helpers shared by the command handlers."""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from pocket_assistant.errors import NotFound, StoreUnavailable, TransportError, ValidationError

logger = logging.getLogger(__name__)


def owner_id_of(update: Update) -> str:
    """Owner identity for the user behind an update."""
    return str(update.effective_user.id)


def get_scheduler(context: ContextTypes.DEFAULT_TYPE):
    return context.bot_data.get("reminder_scheduler")


def get_notifier(context: ContextTypes.DEFAULT_TYPE):
    return context.bot_data["notifier"]


async def report_error(update: Update, error: Exception, action: str):
    """Turn an exception raised while handling a command into a reply."""
    if isinstance(error, (ValidationError, NotFound)):
        text = str(error)
    else:
        if isinstance(error, (StoreUnavailable, TransportError)):
            logger.error(f"Error {action}: {error}")
        else:
            logger.exception(f"Unexpected error {action}: {error}")
        text = f"Sorry, something went wrong while {action}. Please try again later."

    await update.effective_message.reply_text(text)


def is_allowed(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    """Apply ``telegram.allowed_user_ids`` to updates that cannot carry a filter."""
    allowed = context.bot_data.get("allowed_user_ids")
    return not allowed or update.effective_user.id in allowed
