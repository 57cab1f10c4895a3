"""Domain models for GitHub pull request statistics.

These dataclasses intentionally model only the subset of API payload fields that
are required for aggregation. All of them are immutable once created.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

STATE_OPEN = "open"
STATE_CLOSED = "closed"

REVIEW_COMMENTED = "COMMENTED"


def item_key(repository: str, number: int) -> str:
    """Build the repository-qualified identifier of a pull request."""
    return f"{repository}#{number}"


@dataclass(frozen=True, slots=True)
class WorkItem:
    """Represents one fetched pull request."""

    id: str
    number: int
    creator: str
    state: str
    merged: bool
    created_at: datetime
    merged_at: Optional[datetime]
    repository: str


@dataclass(frozen=True, slots=True)
class Comment:
    """Represents an inline review comment left on a pull request."""

    author: str
    item_id: str
    body: str
    created_at: Optional[datetime]
    url: str
    repository: str


@dataclass(frozen=True, slots=True)
class Review:
    """Represents a submitted review (approve, request changes, comment...)."""

    author: str
    item_id: str
    state: str
    body: Optional[str]
    submitted_at: Optional[datetime]
    url: str
    repository: str


DetailEvent = Union[Comment, Review]


@dataclass(frozen=True, slots=True)
class DurationRecord:
    """Creation-to-merge timing of one merged pull request, in hours."""

    item_id: str
    creator: str
    created_at: datetime
    merged_at: datetime
    total_hours: float
    business_hours: float
    repository: str


@dataclass(frozen=True, slots=True)
class RankedCount:
    """A name with its tally, used for creator, repository and commenter rankings."""

    name: str
    count: int


@dataclass(frozen=True, slots=True)
class StateBreakdown:
    """Merged/open/closed outcome counts.

    ``closed_not_merged`` is ``closed - merged`` and is negative when the feed
    reports merged items that are not also closed.
    """

    merged: int
    open: int
    closed_not_merged: int


@dataclass(frozen=True, slots=True)
class ReviewerCoverage:
    """Share of analysed pull requests on which a reviewer left a review."""

    reviewer: str
    items_reviewed: int
    analyzed_items: int
    percentage: float


@dataclass(frozen=True, slots=True)
class ResolutionTime:
    """Average creation-to-merge business hours for one creator."""

    creator: str
    average_business_hours: float
    count: int


@dataclass(frozen=True, slots=True)
class Report:
    """Aggregated, read-only statistics for one analysis run."""

    total_items: int
    items_by_repository: List[RankedCount]
    creator_counts: List[RankedCount]
    states: StateBreakdown
    commenters: List[RankedCount]
    reviewers: List[ReviewerCoverage]
    resolution_times: List[ResolutionTime]
    global_business_hours: Optional[float]
    global_total_hours: Optional[float]
    merged_items_timed: int
    analyzed_items: int
    exhaustive: bool = False
    skipped_duration_records: int = 0
    reviewed_items: int = 0
    coverage_items: int = 0
