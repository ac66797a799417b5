"""Note command handlers."""

from telegram import Update
from telegram.ext import ContextTypes

from pocket_assistant.bot import parsing
from pocket_assistant.bot.formatting import format_note, format_note_list
from pocket_assistant.services import NoteService

from .common import owner_id_of, report_error


async def add_note(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /note command."""
    try:
        args = parsing.parse_note(context.args or [])
        note = NoteService().create(
            owner_id_of(update),
            args.title,
            args.content,
            category=args.category,
            tags=args.tags,
        )
        await update.message.reply_text(format_note(note, header="📝 Note created:", show_edited=False))

    except Exception as e:
        await report_error(update, e, "creating the note")


async def edit_note(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /editnote command."""
    try:
        note_id, args = parsing.parse_edit_note(context.args or [])
        note = NoteService().edit(
            owner_id_of(update),
            note_id,
            args.title,
            args.content,
            category=args.category,
            tags=args.tags,
        )
        await update.message.reply_text(format_note(note, header="✏️ Note updated:"))

    except Exception as e:
        await report_error(update, e, "editing the note")


async def list_notes(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /notes command."""
    try:
        notes = NoteService().list(owner_id_of(update))
        await update.message.reply_text(format_note_list(notes))

    except Exception as e:
        await report_error(update, e, "loading your notes")


async def search_notes(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /search command."""
    try:
        query = parsing.parse_search(context.args or [])
        notes = NoteService().search(owner_id_of(update), query)

        if not notes:
            await update.message.reply_text(f"No notes match \"{query}\"")
            return

        await update.message.reply_text(format_note_list(notes, title=f"🔍 Results for \"{query}\""))

    except Exception as e:
        await report_error(update, e, "searching your notes")
