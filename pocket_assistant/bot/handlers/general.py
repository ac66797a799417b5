"""General bot commands."""

from telegram import ReplyKeyboardMarkup, Update
from telegram.ext import ContextTypes

from . import account, media, notes, reminders

MAIN_KEYBOARD = [
    ["📝 New note", "📋 My notes"],
    ["🔍 Search notes", "✏️ Edit note"],
    ["⏰ New reminder", "📅 My reminders"],
    ["📸 My media", "📊 Statistics"],
    ["📤 Export", "🗑 Clear"],
    ["❓ Help"],
]

HELP_TEXT = """
Available commands:

/start - Show the main keyboard
/help - Show this help

Notes:
/note <title> <content> [#category] [tags:a,b] - Create a note
/editnote <id> <title> <content> [#category] [tags:a,b] - Edit a note
/notes - List your notes
/search <query> - Search your notes

Reminders:
/remind <minutes> <text> [daily|weekly] - Set a reminder (1-1440 minutes)
/editreminder <id> <minutes> <text> [daily|weekly] - Edit a reminder
/reminders - List active reminders

Media:
Send a photo, video, document or voice message to save it
/media - List saved media

Your data:
/stats - Usage statistics
/export - Download all your data as JSON
Send an export file with the caption /import to restore it
/delete <note|reminder|media> <id> - Delete one record
/clear - Delete all your data
"""

# Keyboard buttons that only explain the matching command
BUTTON_HINTS = {
    "📝 New note": "Send: /note <title> <content> [#category]",
    "🔍 Search notes": "Send: /search <query>",
    "✏️ Edit note": "Send: /editnote <id> <title> <content> [#category]",
    "⏰ New reminder": "Send: /remind <minutes> <text> [daily|weekly]",
    "🗑 Clear": "This deletes all your notes, reminders and media. Send /clear to confirm.",
}


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hello! I'm your personal assistant. Choose an action:",
        reply_markup=ReplyKeyboardMarkup(MAIN_KEYBOARD, resize_keyboard=True),
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(HELP_TEXT.strip())


async def unknown_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle unknown commands."""
    await update.message.reply_text(
        f"Unknown command: {update.message.text}\n"
        "Type /help to see available commands."
    )


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle keyboard buttons and other plain text messages."""
    text = update.message.text.strip()

    actions = {
        "📋 My notes": notes.list_notes,
        "📅 My reminders": reminders.list_reminders,
        "📸 My media": media.list_media,
        "📊 Statistics": account.stats,
        "📤 Export": account.export_data,
        "❓ Help": help_command,
    }

    if text in actions:
        context.args = []
        await actions[text](update, context)
    elif text in BUTTON_HINTS:
        await update.message.reply_text(BUTTON_HINTS[text])
    elif set(text.lower().split()) & {"hi", "hello", "hey"}:
        await update.message.reply_text("Hello! How can I help you today?")
    else:
        await update.message.reply_text("Got it. Type /help to see what I can do.")
