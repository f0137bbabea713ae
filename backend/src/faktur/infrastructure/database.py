"""
Database configuration and session management with SQLAlchemy.

Holds the daily invoice sequence counters, the only state that outlives a
single invoice document.

Design Decisions:
- Synchronous engine; the calculation core never suspends mid-operation
- Key/value table mirrors the counter store interface directly
- Explicit transaction management
- Session-per-operation pattern
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from faktur.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class SequenceCounter(Base):
    """
    Last issued sequence number for one calendar day.

    Keys look like "sequence_20240305"; values are integer strings.
    """
    __tablename__ = "sequence_counters"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(String(32))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


# Engine and session factory (initialized lazily)
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(
            settings.database_url,
            echo=settings.debug,
        )
        logger.info(f"Database engine created for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory for creating database sessions."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


@contextmanager
def get_session(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    Get a database session for one operation.

    Usage:
        with get_session() as session:
            session.add(record)
            session.commit()
    """
    session = (factory or get_session_factory())()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """
    Initialize database tables.

    Call this on application startup to ensure tables exist.
    """
    Base.metadata.create_all(engine or get_engine())
    logger.info("Database tables initialized")


def close_db() -> None:
    """Close database connections on shutdown."""
    global _engine, _session_factory
    if _engine:
        _engine.dispose()
        _engine = None
        _session_factory = None
    logger.info("Database connections closed")
