"""Outbound messages to users, with a bounded retry on transient Telegram errors."""

import logging
from pathlib import Path

from telegram.error import BadRequest, NetworkError, RetryAfter, TelegramError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocket_assistant.errors import TransportError

logger = logging.getLogger(__name__)

# TimedOut is a NetworkError. So is BadRequest, which is permanent
_retried_exceptions = (NetworkError, RetryAfter)


class Notifier:
    """Send capability handed to the services and the reminder scheduler."""

    def __init__(self, bot, attempts: int = 2, backoff: float = 1.0):
        self.bot = bot
        self.attempts = attempts
        self.backoff = backoff

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            retry=retry_if_exception_type(_retried_exceptions) & retry_if_not_exception_type(BadRequest),
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=self.backoff),
        )

    async def send(self, owner_id: str, text: str, reply_markup=None):
        """Send a text message to the owner's private chat."""
        try:
            async for attempt in self._retrying():
                with attempt:
                    return await self.bot.send_message(
                        chat_id=owner_id,
                        text=text,
                        reply_markup=reply_markup,
                    )
        except TelegramError as e:
            logger.error(f"Failed to send message to {owner_id}: {e.__class__.__name__}: {e}")
            raise TransportError(f"Could not send message: {e}") from e

    async def send_file(self, owner_id: str, path_or_url, display_name: str):
        """Send a local file or a URL as a document attachment."""
        try:
            async for attempt in self._retrying():
                with attempt:
                    if isinstance(path_or_url, Path):
                        with open(path_or_url, "rb") as f:
                            return await self.bot.send_document(
                                chat_id=owner_id,
                                document=f,
                                filename=display_name,
                            )
                    return await self.bot.send_document(
                        chat_id=owner_id,
                        document=path_or_url,
                        filename=display_name,
                    )
        except TelegramError as e:
            logger.error(f"Failed to send file {display_name} to {owner_id}: {e.__class__.__name__}: {e}")
            raise TransportError(f"Could not send file: {e}") from e

    async def resolve_file_link(self, file_reference: str) -> str:
        """Download URL for a Telegram file id."""
        try:
            async for attempt in self._retrying():
                with attempt:
                    telegram_file = await self.bot.get_file(file_reference)
                    return telegram_file.file_path
        except TelegramError as e:
            logger.error(f"Failed to resolve file {file_reference}: {e.__class__.__name__}: {e}")
            raise TransportError(f"Could not resolve file: {e}") from e

    async def download(self, file_reference: str) -> bytes:
        """Fetch a file's contents from Telegram."""
        try:
            async for attempt in self._retrying():
                with attempt:
                    telegram_file = await self.bot.get_file(file_reference)
                    return bytes(await telegram_file.download_as_bytearray())
        except TelegramError as e:
            logger.error(f"Failed to download file {file_reference}: {e.__class__.__name__}: {e}")
            raise TransportError(f"Could not download file: {e}") from e
