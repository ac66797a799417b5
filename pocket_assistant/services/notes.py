"""Note management service."""

import logging
from typing import List, Optional

from pocket_assistant.db import Store
from pocket_assistant.errors import NotFound, ValidationError
from pocket_assistant.timeutil import utcnow

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "content", "category")


def join_tags(tags: Optional[List[str]]) -> Optional[str]:
    """Store tags comma-separated, dropping blanks and repeats."""
    if not tags:
        return None
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return ",".join(seen) if seen else None


def split_tags(tags: Optional[str]) -> List[str]:
    return tags.split(",") if tags else []


class NoteService:
    """Manage an owner's notes."""

    def __init__(self, store: Store = None):
        self.store = store or Store()

    def create(
        self,
        owner_id: str,
        title: str,
        content: str,
        category: str = None,
        tags: List[str] = None,
    ) -> dict:
        """Create a new note."""
        self._validate(title, content)

        now = utcnow()
        note = self.store.insert("note", {
            "owner_id": owner_id,
            "title": title.strip(),
            "content": content.strip(),
            "category": category or None,
            "tags": join_tags(tags),
            "created_at": now,
            "last_edited_at": now,
        })
        logger.info(f"Created note #{note['id']} for owner {owner_id}")
        return note

    def edit(
        self,
        owner_id: str,
        note_id: int,
        title: str,
        content: str,
        category: str = None,
        tags: List[str] = None,
    ) -> dict:
        """Overwrite a note's title, content and category.

        An omitted category clears it. Tags are only replaced when given.
        """
        self._validate(title, content)

        note = self.store.find_by_id("note", note_id, owner_id)
        if not note:
            raise NotFound("note", note_id)

        note["title"] = title.strip()
        note["content"] = content.strip()
        note["category"] = category or None
        if tags is not None:
            note["tags"] = join_tags(tags)
        note["last_edited_at"] = max(utcnow(), note["created_at"])

        return self.store.update("note", note)

    def get(self, owner_id: str, note_id: int) -> Optional[dict]:
        return self.store.find_by_id("note", note_id, owner_id)

    def list(self, owner_id: str) -> List[dict]:
        """All of the owner's notes, newest first."""
        return self.store.list("note", owner_id, order_by="created_at", descending=True)

    def search(self, owner_id: str, query: str) -> List[dict]:
        """Case-sensitive substring search over title, content and category."""
        if not query or not query.strip():
            raise ValidationError("Usage: /search <query>")
        return self.store.search(
            "note", owner_id, query.strip(), SEARCH_FIELDS,
            order_by="created_at", descending=True,
        )

    def delete(self, owner_id: str, note_id: int) -> int:
        """Delete a note. Returns the number of notes removed (0 or 1)."""
        return self.store.delete_by_id("note", note_id, owner_id)

    @staticmethod
    def _validate(title: str, content: str):
        if not title or not title.strip():
            raise ValidationError("Note title must not be empty")
        if not content or not content.strip():
            raise ValidationError("Note content must not be empty")
