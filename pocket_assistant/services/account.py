"""Account-wide operations: statistics, export, import and clearing."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List

import pytz
from dateutil import parser as date_parser

from pocket_assistant.config import get
from pocket_assistant.db import Store
from pocket_assistant.errors import ValidationError
from pocket_assistant.timeutil import utcnow

logger = logging.getLogger(__name__)

KINDS = ("note", "reminder", "media")

# Export document key for each entity kind
SECTIONS = {
    "note": "notes",
    "reminder": "reminders",
    "media": "media",
}

TIMESTAMP_FIELDS = {
    "note": ("created_at", "last_edited_at"),
    "reminder": ("due_at", "created_at"),
    "media": ("uploaded_at",),
}


def serialize_record(record: dict) -> dict:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in record.items()
    }


class AccountService:
    """Operations spanning all of an owner's notes, reminders and media."""

    def __init__(self, store: Store = None):
        self.store = store or Store()

    def stats(self, owner_id: str) -> dict:
        return {
            "notes": self.store.count("note", owner_id),
            "reminders": self.store.count("reminder", owner_id),
            "media": self.store.count("media", owner_id),
            "categories": self.store.group_by_category(owner_id),
        }

    def export_all(self, owner_id: str) -> dict:
        """Snapshot of everything the owner has stored."""
        document = {
            SECTIONS[kind]: [serialize_record(r) for r in self.store.list(kind, owner_id)]
            for kind in KINDS
        }
        document["exportedAt"] = utcnow().isoformat()
        return document

    def write_export(self, owner_id: str, directory: str = None) -> Path:
        """Write the export document to a transient JSON file and return its path.

        The caller is responsible for removing the file.
        """
        directory = Path(directory or get("export.directory") or ".")
        directory.mkdir(parents=True, exist_ok=True)

        path = directory / f"export_{owner_id}_{utcnow().strftime('%Y%m%d%H%M%S%f')}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.export_all(owner_id), f, ensure_ascii=False, indent=2)

        logger.info(f"Wrote export for owner {owner_id} to {path}")
        return path

    def import_document(self, owner_id: str, document: dict) -> Dict[str, List[dict]]:
        """Recreate the records of an export document under ``owner_id``.

        Field values are kept as exported; ids are assigned anew. Returns the
        created records per kind. Nothing is written unless every entry is valid.
        """
        if not isinstance(document, dict) or not any(s in document for s in SECTIONS.values()):
            raise ValidationError("Not an export document")

        items = []
        for kind in KINDS:
            for item in document.get(SECTIONS[kind]) or []:
                fields = self._import_fields(kind, item)
                fields["owner_id"] = owner_id
                items.append((kind, fields))

        created = {kind: [] for kind in KINDS}
        for (kind, _), record in zip(items, self.store.insert_many(items)):
            created[kind].append(record)

        logger.info(
            f"Imported {len(created['note'])} notes, {len(created['reminder'])} reminders, "
            f"{len(created['media'])} media for owner {owner_id}"
        )
        return created

    def clear_all(self, owner_id: str) -> Dict[str, int]:
        """Delete all notes, reminders and media of the owner.

        Each kind is deleted independently. Kinds deleted before a failure stay
        deleted; the first error is raised once every kind has been attempted.
        """
        counts = {}
        errors = []
        for kind in KINDS:
            try:
                counts[kind] = self.store.delete_all_for_owner(kind, owner_id)
            except Exception as e:
                logger.error(f"Failed to clear {kind} records for owner {owner_id}: {e}")
                errors.append(e)

        if errors:
            raise errors[0]
        return counts

    @staticmethod
    def _import_fields(kind: str, item: dict) -> dict:
        if not isinstance(item, dict):
            raise ValidationError(f"Malformed {kind} entry in export document")

        columns = Store.columns(kind)
        fields = {k: v for k, v in item.items() if k in columns and k not in ("id", "owner_id")}
        missing = [
            key for key in Store.required_columns(kind)
            if key != "owner_id" and fields.get(key) in (None, "")
        ]
        if missing:
            raise ValidationError(f"{kind.capitalize()} entry in export document is missing: {', '.join(missing)}")

        for key in TIMESTAMP_FIELDS[kind]:
            if isinstance(fields.get(key), str):
                try:
                    value = date_parser.isoparse(fields[key])
                except ValueError:
                    raise ValidationError(f"Invalid timestamp in {kind} entry: {fields[key]}") from None
                if value.tzinfo is not None:
                    value = value.astimezone(pytz.UTC).replace(tzinfo=None)
                fields[key] = value
        return fields
