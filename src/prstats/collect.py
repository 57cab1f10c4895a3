"""Collection orchestration for pull request statistics.

The analysis runs in two passes:
- Pass 1 discovers every pull request in the configured repositories and folds
  it into the report accumulator.
- Pass 2 fetches comments and reviews, but only for the pull requests picked by
  the sampling selector once pass 1 is complete.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional, Sequence

from .aggregation import ReportAccumulator
from .config import Config
from .durations import annotate_durations
from .github_client import GitHubClient
from .models import DetailEvent, Report, WorkItem
from .sampling import select_sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis run: the report plus the records behind it."""

    report: Report
    items: List[WorkItem]
    analyzed_ids: List[str]
    events: List[DetailEvent]


def iter_work_items(client: GitHubClient, config: Config, since: datetime) -> Iterator[WorkItem]:
    """Yield each pull request of every configured repository once."""
    seen = set()
    for repository in config.repositories:
        logger.info("Processing repository", extra={"repository": repository})
        for number in client.iter_pull_request_numbers(
            repository,
            since,
            label=config.label,
            max_pages=config.max_pages,
        ):
            item = client.get_pull_request(repository, number)
            if item.id in seen:
                continue
            seen.add(item.id)
            yield item


def collect_work_items(client: GitHubClient, config: Config, since: datetime) -> List[WorkItem]:
    """Fetch every pull request matching the configuration."""
    return list(iter_work_items(client, config, since))


def collect_detail_events(client: GitHubClient, items: Sequence[WorkItem]) -> List[DetailEvent]:
    """Fetch inline review comments and reviews for the given pull requests."""
    events: List[DetailEvent] = []
    for item in items:
        comments = client.list_review_comments(item.repository, item.number)
        reviews = client.list_reviews(item.repository, item.number)
        events.extend(comments)
        events.extend(reviews)

        logger.debug(
            "Collected detail events",
            extra={"item_id": item.id, "comments": len(comments), "reviews": len(reviews)},
        )
    return events


def run_analysis(
    client: GitHubClient,
    config: Config,
    since: datetime,
    rng: Optional[random.Random] = None,
) -> AnalysisResult:
    """Run both collection passes and build the statistics report."""
    accumulator = ReportAccumulator()
    items: List[WorkItem] = []
    for item in iter_work_items(client, config, since):
        accumulator.add_item(item)
        items.append(item)

    records, skipped = annotate_durations(items)
    accumulator.add_durations(records, skipped=skipped)

    items_by_id = {item.id: item for item in items}
    analyzed_ids = select_sample(
        [item.id for item in items],
        total_count=len(items),
        cap=config.sample_cap,
        exhaustive=config.exhaustive,
        rng=rng,
    )
    accumulator.mark_analyzed(analyzed_ids)

    events = collect_detail_events(client, [items_by_id[item_id] for item_id in analyzed_ids])
    accumulator.add_events(events)

    logger.info(
        "Collected PR statistics inputs",
        extra={
            "repositories": len(config.repositories),
            "items_total": len(items),
            "items_analyzed": len(analyzed_ids),
            "detail_events": len(events),
            "exhaustive": config.exhaustive,
        },
    )

    return AnalysisResult(
        report=accumulator.build_report(exhaustive=config.exhaustive),
        items=items,
        analyzed_ids=analyzed_ids,
        events=events,
    )
