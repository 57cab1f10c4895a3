"""Tests for creation-to-merge duration calculation."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstats.durations import (
    annotate_durations,
    compute_duration_record,
    elapsed,
    parse_timestamp,
    round_half_up,
)
from prstats.errors import DataValidationError, InvalidIntervalError, MalformedTimestampError
from prstats.models import WorkItem


def _item(
    number: int = 1,
    merged: bool = True,
    created: str = "2024-01-08T09:00:00Z",
    merged_at: str | None = "2024-01-08T19:00:00Z",
) -> WorkItem:
    return WorkItem(
        id=f"org/app#{number}",
        number=number,
        creator="alice",
        state="closed",
        merged=merged,
        created_at=parse_timestamp(created),
        merged_at=parse_timestamp(merged_at) if merged_at else None,
        repository="org/app",
    )


def test_elapsed_friday_to_monday_subtracts_saturday_and_sunday():
    """Verify a Friday-to-Monday interval loses 48 hours for the two weekend day-steps."""
    assert elapsed("2024-01-05T10:00:00Z", "2024-01-08T10:00:00Z") == (72.0, 24.0)


def test_elapsed_weekday_interval_keeps_all_hours():
    """Verify business hours equal wall-clock hours when no day-step lands on a weekend."""
    assert elapsed("2024-01-08T09:00:00Z", "2024-01-10T15:30:00Z") == (54.5, 54.5)


def test_elapsed_single_weekend_day_step_subtracts_24_hours():
    """Verify one weekend day-step removes exactly 24 hours."""
    total, business = elapsed("2024-01-06T12:00:00Z", "2024-01-07T13:00:00Z")

    assert total == 25.0
    assert total - business == pytest.approx(24.0)


def test_elapsed_day_steps_are_anchored_at_start_not_midnight():
    """Verify a Friday-night start only examines the Friday step, even though Saturday is crossed."""
    assert elapsed("2024-01-05T23:00:00Z", "2024-01-06T23:30:00Z") == (24.5, 24.5)


def test_elapsed_partial_day_on_weekend_is_not_subtracted():
    """Verify intervals shorter than one day never subtract weekend hours."""
    assert elapsed("2024-01-06T10:00:00Z", "2024-01-06T20:00:00Z") == (10.0, 10.0)


def test_elapsed_rounds_half_up_to_one_decimal():
    """Verify 9 minutes (0.15 hours) rounds half-up to 0.2."""
    assert elapsed("2024-01-08T09:00:00Z", "2024-01-08T09:09:00Z") == (0.2, 0.2)


def test_elapsed_zero_length_interval():
    """Verify identical timestamps produce zero hours."""
    assert elapsed("2024-01-06T10:00:00Z", "2024-01-06T10:00:00Z") == (0.0, 0.0)


def test_elapsed_end_before_start_raises_invalid_interval():
    """Verify inverted intervals are reported instead of silently swapped."""
    with pytest.raises(InvalidIntervalError):
        elapsed("2024-01-08T10:00:00Z", "2024-01-05T10:00:00Z")


def test_elapsed_malformed_timestamp_raises():
    """Verify unparseable timestamps raise MalformedTimestampError."""
    with pytest.raises(MalformedTimestampError):
        elapsed("not-a-date", "2024-01-05T10:00:00Z")

    with pytest.raises(MalformedTimestampError):
        elapsed(None, "2024-01-05T10:00:00Z")


def test_elapsed_accepts_datetimes_and_offsets():
    """Verify naive datetimes are treated as UTC and offsets are normalized."""
    assert elapsed(datetime(2024, 1, 5, 10, 0, 0), "2024-01-08T10:00:00Z") == (72.0, 24.0)
    assert elapsed("2024-01-05T12:00:00+02:00", "2024-01-08T10:00:00Z") == (72.0, 24.0)


def test_elapsed_business_hours_bounded_by_total_hours():
    """Verify total >= business >= 0 over starts across a whole week and many lengths."""
    base = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
    for start_offset in range(0, 7 * 24, 5):
        start = base + timedelta(hours=start_offset)
        for length in (0, 1, 23, 24, 25, 47, 48, 72, 100, 169, 400):
            total, business = elapsed(start, start + timedelta(hours=length, minutes=30))
            assert total >= business >= 0


def test_round_half_up():
    """Verify half-up rounding where binary floats would round down."""
    assert round_half_up(0.15) == 0.2
    assert round_half_up(2.25) == 2.3
    assert round_half_up(2.24) == 2.2
    assert round_half_up(16.0) == 16.0


def test_compute_duration_record_for_merged_item():
    """Verify a merged item yields a record with wall-clock and business hours."""
    record = compute_duration_record(_item(created="2024-01-05T10:00:00Z", merged_at="2024-01-08T10:00:00Z"))

    assert record.item_id == "org/app#1"
    assert record.creator == "alice"
    assert record.total_hours == 72.0
    assert record.business_hours == 24.0
    assert record.repository == "org/app"


def test_compute_duration_record_requires_merge_timestamp():
    """Verify unmerged items or merged items without merged_at are rejected."""
    with pytest.raises(DataValidationError):
        compute_duration_record(_item(merged=False, merged_at=None))

    with pytest.raises(DataValidationError):
        compute_duration_record(_item(merged=True, merged_at=None))


def test_compute_duration_record_merged_before_created_raises():
    """Verify a merge timestamp before creation is an invalid interval."""
    with pytest.raises(InvalidIntervalError):
        compute_duration_record(_item(created="2024-01-08T10:00:00Z", merged_at="2024-01-08T09:00:00Z"))


@pytest.mark.parametrize("max_workers", [None, 4])
def test_annotate_durations_skips_unmerged_and_counts_malformed(max_workers):
    """Verify annotation ignores open PRs and counts merged PRs that cannot be timed."""
    items = [
        _item(number=1),
        _item(number=2, merged=False, merged_at=None),
        _item(number=3, merged=True, merged_at=None),
        _item(number=4, created="2024-01-08T10:00:00Z", merged_at="2024-01-08T09:00:00Z"),
        _item(number=5, created="2024-01-08T09:00:00Z", merged_at="2024-01-08T11:00:00Z"),
    ]

    records, skipped = annotate_durations(items, max_workers=max_workers)

    assert [record.item_id for record in records] == ["org/app#1", "org/app#5"]
    assert [record.business_hours for record in records] == [10.0, 2.0]
    assert skipped == 2
