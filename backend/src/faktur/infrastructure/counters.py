"""
Key/value storage for invoice sequence counters.

The invoice number generator reads and writes its daily counters through
this interface, so it can run against memory in tests and against the
database in the application.

Design Decisions:
- Abstract store interface for multiple backends
- Values are integer strings, matching the persisted counter format
- increment() is the only read-modify-write; backends make it atomic
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from .database import SequenceCounter, get_session

logger = logging.getLogger(__name__)


def _parse_count(value: str | None) -> int:
    """Stored counter value as an int; missing or corrupt values count as 0."""
    try:
        return int(value or "0")
    except ValueError:
        logger.warning(f"Corrupt counter value {value!r}, restarting at 0")
        return 0


class CounterStore(ABC):
    """Abstract interface for counter storage backends."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix."""
        pass

    def increment(self, key: str) -> int:
        """Add one to the counter under key, persist it and return it."""
        count = _parse_count(self.get(key)) + 1
        self.set(key, str(count))
        return count

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix. Returns the number deleted."""
        return sum(1 for key in self.keys(prefix) if self.delete(key))


class InMemoryCounterStore(CounterStore):
    """
    Dictionary-backed store for tests and throwaway sessions.

    Counters are lost when the process exits.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> bool:
        return self._values.pop(key, None) is not None

    def keys(self, prefix: str = "") -> list[str]:
        return [key for key in self._values if key.startswith(prefix)]


class SqlCounterStore(CounterStore):
    """
    Store backed by the sequence_counters table.

    Each call runs in its own session; increment() reads and writes in a
    single transaction with a row lock where the database supports one.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        """
        Initialize SQL store.

        Args:
            session_factory: Session factory. Uses the application database if None.
        """
        self.session_factory = session_factory

    def get(self, key: str) -> str | None:
        with get_session(self.session_factory) as session:
            row = session.get(SequenceCounter, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with get_session(self.session_factory) as session:
            session.merge(SequenceCounter(key=key, value=value))
            session.commit()

    def delete(self, key: str) -> bool:
        with get_session(self.session_factory) as session:
            row = session.get(SequenceCounter, key)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def keys(self, prefix: str = "") -> list[str]:
        with get_session(self.session_factory) as session:
            stmt = select(SequenceCounter.key).where(SequenceCounter.key.startswith(prefix, autoescape=True))
            return list(session.scalars(stmt))

    def increment(self, key: str) -> int:
        with get_session(self.session_factory) as session:
            stmt = select(SequenceCounter).where(SequenceCounter.key == key).with_for_update()
            row = session.scalars(stmt).first()

            if row is None:
                count = 1
                session.add(SequenceCounter(key=key, value=str(count)))
            else:
                count = _parse_count(row.value) + 1
                row.value = str(count)

            session.commit()
            return count
