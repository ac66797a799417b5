"""Database session management."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from contextlib import contextmanager
from pathlib import Path

from pocket_assistant.errors import StoreUnavailable
from .models import Base

_engine = None
_SessionLocal = None


def init_db(db_path: str):
    """Initialize the database."""
    global _engine, _SessionLocal

    # Ensure directory exists
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    # Create tables
    Base.metadata.create_all(engine)

    _engine = engine
    _SessionLocal = sessionmaker(bind=_engine)

    return _engine


def close_db():
    """Dispose of the engine. Subsequent sessions raise StoreUnavailable."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def is_initialized() -> bool:
    return _SessionLocal is not None


@contextmanager
def get_session():
    """Get a database session as a context manager."""
    if _SessionLocal is None:
        raise StoreUnavailable("Database not initialized. Call init_db() first.")

    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
