"""Owner-scoped persistence for notes, reminders and media.

Every method opens its own short session, so a record's fields are always
written in a single transaction. Records are returned as plain dicts of
column values; nothing returned here is bound to a session.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_

from pocket_assistant.errors import NotFound
from .models import Note, Reminder, Media
from .session import get_session

logger = logging.getLogger(__name__)

MODELS = {
    "note": Note,
    "reminder": Reminder,
    "media": Media,
}


def _model(kind: str):
    try:
        return MODELS[kind]
    except KeyError:
        raise ValueError(f"Unknown entity kind: {kind}") from None


def to_record(obj) -> Dict[str, Any]:
    """Column values of a model instance as a dict."""
    return {column.name: getattr(obj, column.name) for column in obj.__table__.columns}


class Store:
    """Direct CRUD against the three record tables."""

    @staticmethod
    def columns(kind: str) -> List[str]:
        return [column.name for column in _model(kind).__table__.columns]

    @staticmethod
    def required_columns(kind: str) -> List[str]:
        """Columns that must be supplied on insert (non-nullable, no default)."""
        return [
            column.name
            for column in _model(kind).__table__.columns
            if not column.nullable and column.default is None and not column.primary_key
        ]

    def insert(self, kind: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        model = _model(kind)
        with get_session() as session:
            obj = model(**fields)
            session.add(obj)
            session.flush()
            return to_record(obj)

    def insert_many(self, items: Iterable[Tuple[str, Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """Insert ``(kind, fields)`` pairs in one transaction; all or nothing."""
        with get_session() as session:
            objs = []
            for kind, fields in items:
                obj = _model(kind)(**fields)
                session.add(obj)
                objs.append(obj)
            session.flush()
            return [to_record(obj) for obj in objs]

    def update(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Write every field of ``record`` back to the row it identifies."""
        model = _model(kind)
        with get_session() as session:
            obj = (
                session.query(model)
                .filter(model.id == record["id"], model.owner_id == record["owner_id"])
                .first()
            )
            if obj is None:
                raise NotFound(kind, record["id"])

            for key, value in record.items():
                if key in ("id", "owner_id"):
                    continue
                setattr(obj, key, value)

            session.flush()
            return to_record(obj)

    def delete_by_id(self, kind: str, record_id: int, owner_id: str) -> int:
        model = _model(kind)
        with get_session() as session:
            return (
                session.query(model)
                .filter(model.id == record_id, model.owner_id == owner_id)
                .delete(synchronize_session=False)
            )

    def delete_all_for_owner(self, kind: str, owner_id: str) -> int:
        model = _model(kind)
        with get_session() as session:
            count = (
                session.query(model)
                .filter(model.owner_id == owner_id)
                .delete(synchronize_session=False)
            )
        logger.info(f"Deleted {count} {kind} record(s) for owner {owner_id}")
        return count

    def find_by_id(self, kind: str, record_id: int, owner_id: str) -> Optional[Dict[str, Any]]:
        model = _model(kind)
        with get_session() as session:
            obj = (
                session.query(model)
                .filter(model.id == record_id, model.owner_id == owner_id)
                .first()
            )
            return to_record(obj) if obj else None

    def list(
        self,
        kind: str,
        owner_id: str,
        order_by: str = "id",
        descending: bool = False,
        **filters,
    ) -> List[Dict[str, Any]]:
        """List an owner's records, optionally filtered by exact column values."""
        model = _model(kind)
        with get_session() as session:
            query = session.query(model).filter(model.owner_id == owner_id)
            for column, value in filters.items():
                query = query.filter(getattr(model, column) == value)
            query = query.order_by(*self._ordering(model, order_by, descending))
            return [to_record(obj) for obj in query.all()]

    def search(
        self,
        kind: str,
        owner_id: str,
        substring: str,
        fields: Iterable[str],
        order_by: str = "id",
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """Records where any of ``fields`` contains ``substring``.

        instr() is used rather than LIKE, which SQLite matches case-insensitively.
        """
        model = _model(kind)
        with get_session() as session:
            matches = [func.instr(getattr(model, field), substring) > 0 for field in fields]
            query = (
                session.query(model)
                .filter(model.owner_id == owner_id, or_(*matches))
                .order_by(*self._ordering(model, order_by, descending))
            )
            return [to_record(obj) for obj in query.all()]

    def count(self, kind: str, owner_id: str) -> int:
        model = _model(kind)
        with get_session() as session:
            return (
                session.query(func.count(model.id))
                .filter(model.owner_id == owner_id)
                .scalar()
            )

    def group_by_category(self, owner_id: str) -> Dict[str, int]:
        """Note counts per category, skipping notes without one."""
        with get_session() as session:
            rows = (
                session.query(Note.category, func.count(Note.id))
                .filter(
                    Note.owner_id == owner_id,
                    Note.category.isnot(None),
                    Note.category != "",
                )
                .group_by(Note.category)
                .order_by(Note.category)
                .all()
            )
            return {category: count for category, count in rows}

    def pending_reminders(self) -> List[Dict[str, Any]]:
        """Uncompleted reminders of every owner, soonest first."""
        with get_session() as session:
            reminders = (
                session.query(Reminder)
                .filter(Reminder.completed == False)
                .order_by(Reminder.due_at.asc())
                .all()
            )
            return [to_record(r) for r in reminders]

    @staticmethod
    def _ordering(model, order_by: str, descending: bool):
        column = getattr(model, order_by)
        # id breaks ties between rows created within the same clock tick
        if descending:
            return column.desc(), model.id.desc()
        return column.asc(), model.id.asc()
