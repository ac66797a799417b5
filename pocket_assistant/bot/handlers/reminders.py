"""Reminder command handlers."""

from telegram import Update
from telegram.ext import ContextTypes

from pocket_assistant.bot import parsing
from pocket_assistant.bot.formatting import format_reminder, format_reminder_list
from pocket_assistant.services import ReminderService

from .common import get_scheduler, owner_id_of, report_error


async def add_reminder(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /remind command."""
    try:
        args = parsing.parse_remind(context.args or [])
        service = ReminderService(scheduler=get_scheduler(context))
        reminder = service.create(owner_id_of(update), args.minutes, args.text, args.recurrence)

        await update.message.reply_text(format_reminder(reminder, header="✅ Reminder set:"))

    except Exception as e:
        await report_error(update, e, "setting the reminder")


async def edit_reminder(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /editreminder command."""
    try:
        reminder_id, args = parsing.parse_edit_reminder(context.args or [])
        service = ReminderService(scheduler=get_scheduler(context))
        reminder = service.edit(owner_id_of(update), reminder_id, args.minutes, args.text, args.recurrence)

        await update.message.reply_text(format_reminder(reminder, header="✏️ Reminder updated:"))

    except Exception as e:
        await report_error(update, e, "editing the reminder")


async def list_reminders(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /reminders command."""
    try:
        reminders = ReminderService().list_active(owner_id_of(update))
        await update.message.reply_text(format_reminder_list(reminders))

    except Exception as e:
        await report_error(update, e, "loading your reminders")
