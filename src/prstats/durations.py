"""Creation-to-merge duration calculation for pull requests.

Business hours are a coarse approximation: starting from the interval start,
the calculator steps forward in whole 24-hour increments and subtracts a flat
24 hours for every step that lands on a Saturday or Sunday (UTC). Day steps are
anchored at the start instant, not at calendar midnight.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Tuple, Union

from .errors import DataValidationError, InvalidIntervalError, MalformedTimestampError
from .models import DurationRecord, WorkItem

logger = logging.getLogger(__name__)

Timestamp = Union[datetime, str]

_SECONDS_PER_HOUR = 3600
_SECONDS_PER_DAY = 86400
_HOURS_PER_DAY = 24
_WEEKEND_WEEKDAYS = (5, 6)


def round_half_up(value: Union[float, Decimal], digits: int = 1) -> float:
    """Round ``value`` to ``digits`` decimal places, halves rounding away from zero."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_timestamp(value: Timestamp) -> datetime:
    """Normalize an ISO-8601 string or datetime into a UTC-aware datetime.

    Naive datetimes are interpreted as UTC.

    Raises:
        MalformedTimestampError: If ``value`` is not a datetime or parseable string.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError as exc:
            raise MalformedTimestampError(f"Invalid ISO-8601 timestamp: {value!r}") from exc
    else:
        raise MalformedTimestampError(f"Invalid ISO-8601 timestamp: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def count_weekend_day_steps(start: datetime, whole_days: int) -> int:
    """Count the 24-hour steps from ``start`` whose UTC weekday is Saturday or Sunday."""
    weekend_days = 0
    for step in range(whole_days):
        if (start + timedelta(days=step)).weekday() in _WEEKEND_WEEKDAYS:
            weekend_days += 1
    return weekend_days


def elapsed(start: Timestamp, end: Timestamp) -> Tuple[float, float]:
    """Compute wall-clock and business hours between two instants.

    Args:
        start: Interval start (ISO-8601 string or datetime).
        end: Interval end; must not precede ``start``.

    Returns:
        ``(total_hours, business_hours)``, each rounded half-up to one decimal.

    Raises:
        InvalidIntervalError: If ``end`` is earlier than ``start``.
        MalformedTimestampError: If either timestamp cannot be parsed.
    """
    start_at = parse_timestamp(start)
    end_at = parse_timestamp(end)

    if end_at < start_at:
        raise InvalidIntervalError(
            f"Interval end {end_at.isoformat()} precedes start {start_at.isoformat()}."
        )

    seconds = Decimal(str((end_at - start_at).total_seconds()))
    total = Decimal(str(round_half_up(seconds / _SECONDS_PER_HOUR)))

    whole_days = int(seconds // _SECONDS_PER_DAY)
    weekend_days = count_weekend_day_steps(start_at, whole_days)

    business = total - _HOURS_PER_DAY * weekend_days
    return float(total), round_half_up(business)


def compute_duration_record(item: WorkItem) -> DurationRecord:
    """Derive the creation-to-merge duration record of a merged pull request.

    Raises:
        DataValidationError: If the item is not merged or lacks ``merged_at``.
        InvalidIntervalError: If the item was merged before it was created.
    """
    if not item.merged or item.merged_at is None:
        raise DataValidationError(f"Pull request {item.id} has no merge timestamp.")

    total_hours, business_hours = elapsed(item.created_at, item.merged_at)
    return DurationRecord(
        item_id=item.id,
        creator=item.creator,
        created_at=parse_timestamp(item.created_at),
        merged_at=parse_timestamp(item.merged_at),
        total_hours=total_hours,
        business_hours=business_hours,
        repository=item.repository,
    )


def _try_duration_record(item: WorkItem) -> Optional[DurationRecord]:
    try:
        return compute_duration_record(item)
    except DataValidationError as exc:
        logger.debug(
            "Skipping duration record for malformed merged pull request",
            extra={"item_id": item.id, "reason": str(exc)},
        )
        return None


def annotate_durations(
    items: Iterable[WorkItem],
    max_workers: Optional[int] = None,
) -> Tuple[List[DurationRecord], int]:
    """Compute duration records for every merged item.

    Items that are not merged are ignored. Merged items whose timestamps are
    missing or inverted are excluded and counted.

    Args:
        items: Work items in any order.
        max_workers: When set, calculations run on a thread pool of this size.

    Returns:
        ``(records, skipped)`` with records in input order.
    """
    merged_items = [item for item in items if item.merged]

    if max_workers:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(_try_duration_record, merged_items))
    else:
        results = [_try_duration_record(item) for item in merged_items]

    records = [record for record in results if record is not None]
    return records, len(results) - len(records)
