"""Main Telegram bot setup and runner."""

import logging
import logging.handlers
from pathlib import Path

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from pocket_assistant.config import get, get_bot_token
from pocket_assistant.db import close_db, init_db
from pocket_assistant.scheduler import ReminderScheduler

from .handlers import account, general, media, notes, reminders
from .notifier import Notifier

logger = logging.getLogger(__name__)


def setup_scheduler(app: Application) -> ReminderScheduler:
    """Create the notifier and reminder scheduler and re-arm stored reminders."""
    notifier = Notifier(
        app.bot,
        attempts=get("notifications.retry_attempts", 2),
        backoff=get("notifications.retry_backoff", 1.0),
    )
    scheduler = ReminderScheduler(
        app.job_queue,
        notifier,
        pre_notify_minutes=get("reminders.pre_notify_minutes", 5),
    )

    app.bot_data["notifier"] = notifier
    app.bot_data["reminder_scheduler"] = scheduler

    scheduler.recover()
    logger.info("Scheduler setup complete")
    return scheduler


async def shutdown(app: Application):
    close_db()
    logger.info("Database closed")


def create_bot() -> Application:
    """Create and configure the Telegram bot application."""
    token = get_bot_token()
    if not token:
        raise ValueError(
            "Telegram bot token not configured. "
            "Get one from @BotFather and add it to config.yaml or TELEGRAM_BOT_TOKEN"
        )

    # A broken database does not stop the bot; commands then report a failure
    db_path = get("database.path", "data/assistant.db")
    try:
        init_db(db_path)
        logger.info(f"Database initialized at {db_path}")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    # Create application
    app = Application.builder().token(token).post_shutdown(shutdown).build()

    # Restrict to configured users, if any
    allowed_users = get("telegram.allowed_user_ids") or []
    user_filter = filters.User(user_id=allowed_users) if allowed_users else filters.ALL
    # CallbackQueryHandler takes no filters; the download callback checks this itself
    app.bot_data["allowed_user_ids"] = allowed_users

    # General commands
    app.add_handler(CommandHandler("start", general.start, filters=user_filter))
    app.add_handler(CommandHandler("help", general.help_command, filters=user_filter))

    # Note commands
    app.add_handler(CommandHandler("note", notes.add_note, filters=user_filter))
    app.add_handler(CommandHandler("editnote", notes.edit_note, filters=user_filter))
    app.add_handler(CommandHandler("notes", notes.list_notes, filters=user_filter))
    app.add_handler(CommandHandler("search", notes.search_notes, filters=user_filter))

    # Reminder commands
    app.add_handler(CommandHandler("remind", reminders.add_reminder, filters=user_filter))
    app.add_handler(CommandHandler("editreminder", reminders.edit_reminder, filters=user_filter))
    app.add_handler(CommandHandler("reminders", reminders.list_reminders, filters=user_filter))

    # Media
    app.add_handler(CommandHandler("media", media.list_media, filters=user_filter))
    app.add_handler(MessageHandler(filters.PHOTO & user_filter, media.handle_photo))
    app.add_handler(MessageHandler(filters.VIDEO & user_filter, media.handle_video))
    app.add_handler(MessageHandler(filters.Document.ALL & user_filter, media.handle_document))
    app.add_handler(MessageHandler(filters.VOICE & user_filter, media.handle_voice))
    app.add_handler(CallbackQueryHandler(media.download_media, pattern=rf"^{media.DOWNLOAD_PREFIX}"))

    # Account commands
    app.add_handler(CommandHandler("stats", account.stats, filters=user_filter))
    app.add_handler(CommandHandler("export", account.export_data, filters=user_filter))
    app.add_handler(CommandHandler("clear", account.clear_data, filters=user_filter))
    app.add_handler(CommandHandler("delete", account.delete_item, filters=user_filter))

    # Handle unknown commands
    app.add_handler(MessageHandler(
        filters.COMMAND & user_filter,
        general.unknown_command
    ))

    # Keyboard buttons and other text
    app.add_handler(MessageHandler(
        filters.TEXT & ~filters.COMMAND & user_filter,
        general.handle_message
    ))

    # Error handler
    app.add_error_handler(error_handler)

    # Reminder timers, including reminders stored before this start
    setup_scheduler(app)

    return app


async def error_handler(update, context):
    """Handle errors in the bot."""
    logger.error(f"Update {update} caused error: {context.error}", exc_info=context.error)

    if update and getattr(update, "effective_message", None):
        await update.effective_message.reply_text(
            "Sorry, something went wrong. Please try again later."
        )


def run_bot():
    """Run the bot."""
    # Setup logging
    log_file = get("logging.file", "logs/assistant.log")
    log_level = get("logging.level", "INFO")

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    # Time-based rotating file handler (keep logs for 24 hours)
    file_handler = logging.handlers.TimedRotatingFileHandler(
        log_file,
        when='midnight',  # Rotate at midnight
        interval=1,       # Every 1 day
        backupCount=1     # Keep only 1 backup (24 hours worth)
    )
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            file_handler,
            logging.StreamHandler(),
        ],
    )
    # PTB logs every polling request through httpx at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info("Starting Pocket Assistant bot...")

    app = create_bot()

    app.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    run_bot()
