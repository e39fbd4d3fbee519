"""
History of synchronization attempts.
In-memory, bounded; the oldest records are dropped first.
"""

from typing import Optional
from collections import OrderedDict

from ..models.history import SyncOutcome, SyncRecord


class SyncHistory:
    """
    Bounded in-memory log of path requests issued by a controller.

    Keyed by sequence number, so each request appears once with its final
    outcome (applied, discarded as stale, or failed).
    """

    def __init__(self, max_entries: int = 100):
        """
        Initialize the history.

        Args:
            max_entries: Maximum number of records to keep (oldest are dropped)
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self._store: OrderedDict[int, SyncRecord] = OrderedDict()

    def add_record(self, record: SyncRecord) -> None:
        """Store a record, replacing any earlier one with the same sequence number."""
        self._store[record.sequence] = record
        self._store.move_to_end(record.sequence)

        while len(self._store) > self.max_entries:
            self._store.popitem(last=False)

    def get_record(self, sequence: int) -> Optional[SyncRecord]:
        return self._store.get(sequence)

    def list_records(
        self,
        limit: int = 50,
        offset: int = 0,
        outcome: Optional[SyncOutcome] = None,
    ) -> list[SyncRecord]:
        """
        List records, newest first.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            outcome: Only return records with this outcome
        """
        records = list(reversed(self._store.values()))

        if outcome is not None:
            records = [r for r in records if r.outcome == outcome]

        return records[offset : offset + limit]

    def count(self, outcome: Optional[SyncOutcome] = None) -> int:
        if outcome is None:
            return len(self._store)

        return sum(1 for r in self._store.values() if r.outcome == outcome)

    def clear(self) -> None:
        """Clear all records (useful for testing)."""
        self._store.clear()
