"""Media metadata service."""

import logging
from typing import List, Optional

from pocket_assistant.db import Store, MediaKind
from pocket_assistant.errors import ValidationError
from pocket_assistant.timeutil import utcnow

logger = logging.getLogger(__name__)


class MediaService:
    """Record metadata for files users send. Only Telegram's file reference is kept."""

    def __init__(self, store: Store = None):
        self.store = store or Store()

    def record(
        self,
        owner_id: str,
        file_reference: str,
        kind: str,
        caption: str = None,
        file_name: str = None,
        mime_type: str = None,
    ) -> dict:
        if not file_reference:
            raise ValidationError("Missing file reference")
        try:
            kind = MediaKind(kind).value
        except ValueError:
            raise ValidationError(f"Unsupported media type: {kind}") from None

        media = self.store.insert("media", {
            "owner_id": owner_id,
            "file_reference": file_reference,
            "kind": kind,
            "caption": caption or None,
            "file_name": file_name or None,
            "mime_type": mime_type or None,
            "uploaded_at": utcnow(),
        })
        logger.info(f"Recorded {kind} #{media['id']} for owner {owner_id}")
        return media

    def get(self, owner_id: str, media_id: int) -> Optional[dict]:
        return self.store.find_by_id("media", media_id, owner_id)

    def list(self, owner_id: str) -> List[dict]:
        """Most recent uploads first."""
        return self.store.list("media", owner_id, order_by="uploaded_at", descending=True)

    def delete(self, owner_id: str, media_id: int) -> int:
        return self.store.delete_by_id("media", media_id, owner_id)
