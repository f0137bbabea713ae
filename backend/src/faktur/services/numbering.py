"""
Invoice number generation.

Numbers look like INVC-20240305-001: a prefix, the issue date and a
three-digit sequence that restarts at 1 every day. Every call also purges
counters of days older than the retention window.

Design Decisions:
- Counter storage is injected, so the generator runs without a database
- The current date comes from an injected callable for deterministic tests
- Retention compares YYYYMMDD strings lexically, which matches date order
- Uniqueness holds only within one day and only while the store survives
"""

import logging
from collections.abc import Callable
from datetime import date, timedelta

from faktur.infrastructure.counters import CounterStore

logger = logging.getLogger(__name__)


SEQUENCE_KEY_PREFIX = "sequence_"
SEQUENCE_WIDTH = 3

DEFAULT_PREFIX = "INVC"
DEFAULT_RETENTION_DAYS = 30


def sequence_key(day: date) -> str:
    """Counter key for a calendar day: sequence_YYYYMMDD."""
    return f"{SEQUENCE_KEY_PREFIX}{day:%Y%m%d}"


class InvoiceNumberGenerator:
    """
    Issues date-scoped invoice numbers from a persistent counter store.

    Example:
        generator = InvoiceNumberGenerator(
            store=InMemoryCounterStore(),
            today=lambda: date(2024, 3, 5),
        )
        generator.generate()  # "INVC-20240305-001"
        generator.generate()  # "INVC-20240305-002"
    """

    def __init__(
        self,
        store: CounterStore,
        prefix: str = DEFAULT_PREFIX,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        today: Callable[[], date] = date.today,
    ) -> None:
        """
        Initialize generator.

        Args:
            store: Counter storage backend
            prefix: Leading part of every generated number
            retention_days: Counters older than this many days are purged
            today: Source of the current date
        """
        if retention_days < 1:
            raise ValueError(f"retention_days must be at least 1, got {retention_days}")

        self.store = store
        self.prefix = prefix
        self.retention_days = retention_days
        self.today = today

    def generate(self) -> str:
        """
        Issue the next invoice number for today.

        The counter is persisted before the number is returned, then old
        counters are purged.

        Returns:
            Number formatted as PREFIX-YYYYMMDD-NNN
        """
        day = self.today()
        sequence = self.store.increment(sequence_key(day))

        self.purge_expired(day)

        invoice_number = f"{self.prefix}-{day:%Y%m%d}-{sequence:0{SEQUENCE_WIDTH}d}"
        logger.info(f"Generated invoice number {invoice_number}")
        return invoice_number

    def purge_expired(self, day: date | None = None) -> int:
        """
        Delete counters of days before the retention cutoff.

        Args:
            day: Reference date; defaults to today

        Returns:
            Number of counters deleted
        """
        reference = day or self.today()
        cutoff = f"{reference - timedelta(days=self.retention_days):%Y%m%d}"

        deleted = 0
        for key in self.store.keys(SEQUENCE_KEY_PREFIX):
            if key[len(SEQUENCE_KEY_PREFIX):] < cutoff and self.store.delete(key):
                deleted += 1

        if deleted:
            logger.info(f"Purged {deleted} sequence counter(s) older than {cutoff}")
        return deleted
