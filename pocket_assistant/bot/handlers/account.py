"""Handlers for statistics, export, clearing and deleting records."""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from pocket_assistant.bot import parsing
from pocket_assistant.bot.formatting import format_stats
from pocket_assistant.services import AccountService, MediaService, NoteService, ReminderService

from .common import get_notifier, get_scheduler, owner_id_of, report_error

logger = logging.getLogger(__name__)

KIND_LABELS = {
    "note": "Note",
    "reminder": "Reminder",
    "media": "Media",
}


async def stats(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /stats command."""
    try:
        result = AccountService().stats(owner_id_of(update))
        await update.message.reply_text(format_stats(result))

    except Exception as e:
        await report_error(update, e, "collecting statistics")


async def export_data(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /export command."""
    path = None
    try:
        owner_id = owner_id_of(update)
        path = AccountService().write_export(owner_id)
        await get_notifier(context).send_file(owner_id, path, "export.json")
        await update.message.reply_text("📤 Your data has been exported")

    except Exception as e:
        await report_error(update, e, "exporting your data")

    finally:
        if path is not None:
            path.unlink(missing_ok=True)


async def clear_data(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /clear command."""
    try:
        owner_id = owner_id_of(update)
        reminder_ids = [r["id"] for r in ReminderService().list(owner_id)]

        counts = AccountService().clear_all(owner_id)

        scheduler = get_scheduler(context)
        if scheduler:
            scheduler.cancel_all(reminder_ids)

        logger.info(f"Cleared data for owner {owner_id}: {counts}")
        await update.message.reply_text("🗑 All your data has been deleted")

    except Exception as e:
        await report_error(update, e, "clearing your data")


async def delete_item(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /delete command."""
    try:
        kind, record_id = parsing.parse_delete(context.args or [])
        owner_id = owner_id_of(update)

        if kind == "note":
            count = NoteService().delete(owner_id, record_id)
        elif kind == "reminder":
            count = ReminderService(scheduler=get_scheduler(context)).delete(owner_id, record_id)
        else:
            count = MediaService().delete(owner_id, record_id)

        label = KIND_LABELS[kind]
        if count:
            await update.message.reply_text(f"✅ {label} #{record_id} deleted")
        else:
            await update.message.reply_text(f"{label} #{record_id} not found, nothing deleted")

    except Exception as e:
        await report_error(update, e, "deleting the record")
