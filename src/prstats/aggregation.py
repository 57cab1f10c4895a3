"""Aggregation of pull request, duration and detail records into a report.

The accumulator folds records one at a time so it can follow a paginated feed.
Partial accumulators built over disjoint shards can be combined with
:meth:`ReportAccumulator.merge`; every tally is a sum, so the merge order does
not affect counts. Rankings and percentages are only computed in
:meth:`ReportAccumulator.build_report`.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Set

from .durations import annotate_durations, round_half_up
from .models import (
    STATE_CLOSED,
    STATE_OPEN,
    Comment,
    DetailEvent,
    DurationRecord,
    RankedCount,
    Report,
    ResolutionTime,
    Review,
    ReviewerCoverage,
    StateBreakdown,
    WorkItem,
)

logger = logging.getLogger(__name__)

DEFAULT_TOP_COMMENTERS = 10


def rank_counts(counts: Dict[str, int], limit: Optional[int] = None) -> List[RankedCount]:
    """Rank tallies by count descending; equal counts keep first-seen order."""
    ranked = sorted(counts.items(), key=lambda entry: entry[1], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return [RankedCount(name=name, count=count) for name, count in ranked]


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return round_half_up(sum(values) / len(values))


class ReportAccumulator:
    """Streaming fold state for one analysis run."""

    def __init__(self) -> None:
        self._total_items = 0
        self._creator_counts: Counter = Counter()
        self._repository_counts: Counter = Counter()
        self._merged = 0
        self._open = 0
        self._closed = 0
        self._durations: List[DurationRecord] = []
        self._skipped_durations = 0
        self._commenter_counts: Counter = Counter()
        self._reviewer_items: Dict[str, Set[str]] = {}
        self._analyzed_ids: Dict[str, None] = {}

    @property
    def total_items(self) -> int:
        return self._total_items

    def add_item(self, item: WorkItem) -> None:
        """Tally one pull request's creator, repository and state.

        Resolution times are not derived here; feed the output of
        :func:`~prstats.durations.annotate_durations` to :meth:`add_durations`.
        """
        self._total_items += 1
        self._creator_counts[item.creator] += 1
        self._repository_counts[item.repository] += 1

        state = item.state.lower()
        if state == STATE_OPEN:
            self._open += 1
        elif state == STATE_CLOSED:
            self._closed += 1

        if item.merged:
            self._merged += 1

    def add_items(self, items: Iterable[WorkItem]) -> None:
        for item in items:
            self.add_item(item)

    def add_durations(self, records: Iterable[DurationRecord], skipped: int = 0) -> None:
        """Add duration records of merged pull requests and the count of those that could not be timed."""
        self._durations.extend(records)
        self._skipped_durations += skipped

    def add_event(self, event: DetailEvent) -> None:
        """Tally one comment or review of an analysed pull request."""
        if isinstance(event, Comment):
            self._commenter_counts[event.author] += 1
        elif isinstance(event, Review):
            self._reviewer_items.setdefault(event.author, set()).add(event.item_id)
        else:
            raise TypeError(f"Unsupported detail event: {type(event).__name__}")

    def add_events(self, events: Iterable[DetailEvent]) -> None:
        for event in events:
            self.add_event(event)

    def mark_analyzed(self, item_ids: Iterable[str]) -> None:
        """Record the pull requests selected for comment and review analysis."""
        for item_id in item_ids:
            self._analyzed_ids[item_id] = None

    def merge(self, other: "ReportAccumulator") -> "ReportAccumulator":
        """Fold another accumulator's partial tallies into this one."""
        self._total_items += other._total_items
        self._creator_counts.update(other._creator_counts)
        self._repository_counts.update(other._repository_counts)
        self._merged += other._merged
        self._open += other._open
        self._closed += other._closed
        self._durations.extend(other._durations)
        self._skipped_durations += other._skipped_durations
        self._commenter_counts.update(other._commenter_counts)
        for reviewer, item_ids in other._reviewer_items.items():
            self._reviewer_items.setdefault(reviewer, set()).update(item_ids)
        self.mark_analyzed(other._analyzed_ids)
        return self

    def _reviewer_coverage(self, analyzed: int) -> List[ReviewerCoverage]:
        if not analyzed:
            return []

        coverage = [
            ReviewerCoverage(
                reviewer=reviewer,
                items_reviewed=len(item_ids),
                analyzed_items=analyzed,
                percentage=round_half_up(len(item_ids) * 100 / analyzed),
            )
            for reviewer, item_ids in self._reviewer_items.items()
        ]
        coverage.sort(key=lambda entry: (entry.percentage, entry.items_reviewed), reverse=True)
        return coverage

    def _resolution_times(self) -> List[ResolutionTime]:
        sums: Dict[str, float] = {}
        counts: Dict[str, int] = {}
        for record in self._durations:
            sums[record.creator] = sums.get(record.creator, 0.0) + record.business_hours
            counts[record.creator] = counts.get(record.creator, 0) + 1

        averages = [(creator, sums[creator] / counts[creator]) for creator in sums]
        averages.sort(key=lambda entry: entry[1], reverse=True)
        return [
            ResolutionTime(
                creator=creator,
                average_business_hours=round_half_up(average),
                count=counts[creator],
            )
            for creator, average in averages
        ]

    def build_report(
        self,
        top_commenters: int = DEFAULT_TOP_COMMENTERS,
        exhaustive: bool = False,
    ) -> Report:
        """Compute rankings, percentages and averages from the accumulated tallies."""
        reviewed_items: Set[str] = set()
        for item_ids in self._reviewer_items.values():
            reviewed_items.update(item_ids)

        # Reviews outside the analysed set still count toward the denominator
        coverage_items = len(reviewed_items.union(self._analyzed_ids))

        report = Report(
            total_items=self._total_items,
            items_by_repository=rank_counts(self._repository_counts),
            creator_counts=rank_counts(self._creator_counts),
            states=StateBreakdown(
                merged=self._merged,
                open=self._open,
                closed_not_merged=self._closed - self._merged,
            ),
            commenters=rank_counts(self._commenter_counts, limit=top_commenters),
            reviewers=self._reviewer_coverage(coverage_items),
            resolution_times=self._resolution_times(),
            global_business_hours=_mean([record.business_hours for record in self._durations]),
            global_total_hours=_mean([record.total_hours for record in self._durations]),
            merged_items_timed=len(self._durations),
            analyzed_items=len(self._analyzed_ids),
            exhaustive=exhaustive,
            skipped_duration_records=self._skipped_durations,
            reviewed_items=len(reviewed_items),
            coverage_items=coverage_items,
        )

        logger.debug(
            "Built PR statistics report",
            extra={
                "total_items": report.total_items,
                "analyzed_items": report.analyzed_items,
                "merged_items_timed": report.merged_items_timed,
                "skipped_duration_records": report.skipped_duration_records,
            },
        )
        return report


def build_report(
    items: Iterable[WorkItem],
    events: Iterable[DetailEvent],
    analyzed_ids: Iterable[str],
    top_commenters: int = DEFAULT_TOP_COMMENTERS,
    exhaustive: bool = False,
) -> Report:
    """Fold complete record collections into a report in one call."""
    items = list(items)
    accumulator = ReportAccumulator()
    accumulator.add_items(items)
    accumulator.add_durations(*annotate_durations(items))
    accumulator.mark_analyzed(analyzed_ids)
    accumulator.add_events(events)
    return accumulator.build_report(top_commenters=top_commenters, exhaustive=exhaustive)
