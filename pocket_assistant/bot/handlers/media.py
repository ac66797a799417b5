"""Handlers for photos, videos, documents and voice messages."""

import json
import logging

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import ContextTypes

from pocket_assistant.bot.formatting import format_media_list
from pocket_assistant.errors import ValidationError
from pocket_assistant.services import AccountService, MediaService

from .common import get_notifier, get_scheduler, is_allowed, owner_id_of, report_error

logger = logging.getLogger(__name__)

DOWNLOAD_PREFIX = "download_media_"
IMPORT_CAPTION = "/import"

SAVED_MESSAGES = {
    "photo": "📸 Photo saved!",
    "video": "🎥 Video saved!",
    "document": "📄 Document saved!",
    "voice": "🎤 Voice message saved!",
}


def download_keyboard(media_id: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("⬇️ Download", callback_data=f"{DOWNLOAD_PREFIX}{media_id}")]
    ])


async def _save(update: Update, kind: str, file_reference: str, caption=None, file_name=None, mime_type=None):
    try:
        media = MediaService().record(
            owner_id_of(update),
            file_reference,
            kind,
            caption=caption,
            file_name=file_name,
            mime_type=mime_type,
        )
        await update.message.reply_text(SAVED_MESSAGES[kind], reply_markup=download_keyboard(media["id"]))

    except Exception as e:
        await report_error(update, e, f"saving the {kind}")


async def handle_photo(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Save the largest size of a received photo."""
    message = update.message
    await _save(update, "photo", message.photo[-1].file_id, caption=message.caption)


async def handle_video(update: Update, context: ContextTypes.DEFAULT_TYPE):
    message = update.message
    video = message.video
    await _save(
        update, "video", video.file_id,
        caption=message.caption, file_name=video.file_name, mime_type=video.mime_type,
    )


async def handle_document(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Save a document, or import an export file sent with the /import caption."""
    message = update.message
    document = message.document

    if (message.caption or "").strip().lower() == IMPORT_CAPTION:
        await import_data(update, context)
        return

    await _save(
        update, "document", document.file_id,
        caption=message.caption, file_name=document.file_name, mime_type=document.mime_type,
    )


async def handle_voice(update: Update, context: ContextTypes.DEFAULT_TYPE):
    message = update.message
    await _save(update, "voice", message.voice.file_id, mime_type=message.voice.mime_type)


async def list_media(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /media command."""
    try:
        media = MediaService().list(owner_id_of(update))
        await update.message.reply_text(format_media_list(media))

    except Exception as e:
        await report_error(update, e, "loading your media")


async def download_media(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Send a saved file back when its Download button is pressed."""
    query = update.callback_query
    await query.answer()

    if not is_allowed(update, context):
        logger.warning(f"Ignoring download request from unauthorized user {update.effective_user.id}")
        return

    try:
        media_id = int(query.data[len(DOWNLOAD_PREFIX):])
    except ValueError:
        logger.warning(f"Malformed download callback: {query.data}")
        return

    try:
        owner_id = owner_id_of(update)
        media = MediaService().get(owner_id, media_id)
        if not media:
            await query.message.reply_text(f"Media #{media_id} not found")
            return

        notifier = get_notifier(context)
        link = await notifier.resolve_file_link(media["file_reference"])
        await notifier.send_file(owner_id, link, media["file_name"] or f"media_{media_id}")

    except Exception as e:
        await report_error(update, e, "downloading the file")


async def import_data(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Restore notes, reminders and media from an uploaded export file."""
    try:
        owner_id = owner_id_of(update)
        content = await get_notifier(context).download(update.message.document.file_id)
        try:
            document = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise ValidationError("That file is not a valid export (expected JSON)") from None

        created = AccountService().import_document(owner_id, document)

        scheduler = get_scheduler(context)
        if scheduler:
            for reminder in created["reminder"]:
                if not reminder["completed"]:
                    scheduler.arm(reminder)

        await update.message.reply_text(
            "📥 Import complete:\n"
            f"Notes: {len(created['note'])}\n"
            f"Reminders: {len(created['reminder'])}\n"
            f"Media: {len(created['media'])}"
        )

    except Exception as e:
        await report_error(update, e, "importing your data")
