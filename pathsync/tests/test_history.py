"""
Test synchronization history storage.
"""

from datetime import datetime, timedelta, timezone

from ..models.geometry import Coordinate, EndpointRole, Path, PathRequest
from ..models.history import SyncOutcome, SyncRecord
from ..storage.history import SyncHistory


def create_test_record(sequence: int, outcome: SyncOutcome = SyncOutcome.APPLIED) -> SyncRecord:
    """Helper to create a test history record."""
    source = Coordinate.of(48.012653, 7.835194)
    target = Coordinate.of(48.011, 7.82)
    issued_at = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc) + timedelta(seconds=sequence)

    return SyncRecord(
        sequence=sequence,
        role=EndpointRole.TARGET,
        strategy="remote",
        request=PathRequest(source=source, target=target, sequence=sequence),
        outcome=outcome,
        path=Path.straight(source, target) if outcome == SyncOutcome.APPLIED else None,
        error="Connection refused" if outcome == SyncOutcome.FAILED else None,
        issued_at=issued_at,
        completed_at=issued_at + timedelta(milliseconds=250),
    )


def test_history_initialization():
    """Test SyncHistory initialization."""
    print("\n=== Testing History Initialization ===")

    history = SyncHistory(max_entries=50)
    assert history.max_entries == 50
    assert history.count() == 0
    assert history.list_records() == []

    try:
        SyncHistory(max_entries=0)
    except ValueError:
        pass
    else:
        raise AssertionError("Zero-capacity history should be rejected")

    print("✓ History initialized correctly")


def test_add_and_get_record():
    """Test adding and retrieving records."""
    print("\n=== Testing add_record / get_record ===")

    history = SyncHistory()
    record = create_test_record(1)
    history.add_record(record)

    assert history.count() == 1
    assert history.get_record(1) is record
    assert history.get_record(99) is None
    assert record.duration_seconds == 0.25

    print("✓ Records stored and retrieved")


def test_list_records_newest_first():
    """Test listing order, pagination and outcome filter."""
    print("\n=== Testing list_records ===")

    history = SyncHistory()
    outcomes = [
        SyncOutcome.APPLIED,
        SyncOutcome.FAILED,
        SyncOutcome.APPLIED,
        SyncOutcome.DISCARDED,
        SyncOutcome.APPLIED,
    ]
    for i, outcome in enumerate(outcomes, start=1):
        history.add_record(create_test_record(i, outcome))

    assert [r.sequence for r in history.list_records()] == [5, 4, 3, 2, 1]
    assert [r.sequence for r in history.list_records(limit=2)] == [5, 4]
    assert [r.sequence for r in history.list_records(limit=2, offset=2)] == [3, 2]
    assert [r.sequence for r in history.list_records(outcome=SyncOutcome.APPLIED)] == [5, 3, 1]

    assert history.count(SyncOutcome.APPLIED) == 3
    assert history.count(SyncOutcome.FAILED) == 1
    assert history.list_records(limit=1)[0].sequence == 5

    print("✓ Listing and counting work")


def test_max_entries_limit():
    """Test that the oldest records are dropped first."""
    print("\n=== Testing max_entries Limit ===")

    history = SyncHistory(max_entries=3)
    for i in range(1, 6):
        history.add_record(create_test_record(i))

    assert history.count() == 3
    assert history.get_record(1) is None
    assert history.get_record(2) is None
    assert [r.sequence for r in history.list_records()] == [5, 4, 3]

    print("✓ Oldest records dropped at capacity")


def test_duplicate_sequence():
    """Test that re-adding a sequence number replaces the earlier record."""
    print("\n=== Testing Duplicate Sequence ===")

    history = SyncHistory()
    history.add_record(create_test_record(1, SyncOutcome.FAILED))
    history.add_record(create_test_record(2))
    history.add_record(create_test_record(1, SyncOutcome.APPLIED))

    assert history.count() == 2
    assert history.get_record(1).outcome == SyncOutcome.APPLIED
    assert history.list_records(limit=1)[0].sequence == 1

    print("✓ Duplicate sequence numbers handled")


def test_clear():
    """Test clearing the history."""
    print("\n=== Testing clear ===")

    history = SyncHistory()
    for i in range(1, 4):
        history.add_record(create_test_record(i))
    history.clear()

    assert history.count() == 0
    assert history.list_records() == []

    print("✓ History cleared")


def run_all_tests():
    """Run all history storage tests."""
    print("\n" + "=" * 60)
    print("SYNC HISTORY STORAGE - TEST SUITE")
    print("=" * 60)

    test_history_initialization()
    test_add_and_get_record()
    test_list_records_newest_first()
    test_max_entries_limit()
    test_duplicate_sequence()
    test_clear()

    print("\n" + "=" * 60)
    print("✅ ALL HISTORY STORAGE TESTS PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
