"""SQLAlchemy database models."""

import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.orm import declarative_base

from pocket_assistant.timeutil import utcnow

Base = declarative_base()


class Recurrence(enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class MediaKind(enum.Enum):
    PHOTO = "photo"
    VIDEO = "video"
    DOCUMENT = "document"
    VOICE = "voice"


class Note(Base):
    """Free-form notes."""
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(200), nullable=True)
    tags = Column(String(500), nullable=True)  # Comma-separated tags
    created_at = Column(DateTime, default=utcnow)
    last_edited_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Note(id={self.id}, owner={self.owner_id}, title='{self.title[:30]}')>"


class Reminder(Base):
    """Timed reminders."""
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    text = Column(Text, nullable=False)
    due_at = Column(DateTime, nullable=False)
    completed = Column(Boolean, default=False)
    recurrence = Column(String(20), nullable=True)  # daily, weekly
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Reminder(id={self.id}, due_at={self.due_at}, completed={self.completed})>"


class Media(Base):
    """Metadata of files received from users. The payload stays on Telegram."""
    __tablename__ = "media"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    file_reference = Column(String(255), nullable=False)  # Telegram file_id
    kind = Column(String(20), nullable=False)  # photo, video, document, voice
    caption = Column(Text, nullable=True)
    file_name = Column(String(500), nullable=True)
    mime_type = Column(String(200), nullable=True)
    uploaded_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Media(id={self.id}, kind={self.kind}, owner={self.owner_id})>"
