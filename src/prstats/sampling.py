"""Selection of the pull requests that undergo comment and review analysis."""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, TypeVar

from .errors import InvalidConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_CAP = 50

T = TypeVar("T")


def select_sample(
    all_ids: Sequence[T],
    total_count: int,
    cap: int,
    exhaustive: bool,
    rng: Optional[random.Random] = None,
) -> List[T]:
    """Choose which items get detailed (comments/reviews) analysis.

    - ``exhaustive`` returns every id.
    - ``total_count <= cap`` returns every id, since sampling would not reduce work.
    - Otherwise a uniform random subset of ``cap`` ids is returned, in no
      particular order.

    Duplicate ids are not removed; deduplication is up to the caller.

    Args:
        all_ids: Every discovered item id.
        total_count: Number of discovered items.
        cap: Maximum number of items to analyse when sampling.
        exhaustive: Analyse everything regardless of ``cap``.
        rng: Random source; defaults to the module-level ``random`` generator.

    Raises:
        InvalidConfigurationError: If ``cap`` is negative, or zero while there
            are candidates to sample from.
    """
    if cap < 0:
        raise InvalidConfigurationError(f"Sampling cap must not be negative (got {cap}).")

    if exhaustive:
        return list(all_ids)

    if cap == 0 and all_ids:
        raise InvalidConfigurationError("Sampling cap must be greater than 0 when items are available.")

    if total_count <= cap:
        return list(all_ids)

    source = rng if rng is not None else random
    sample_size = min(cap, len(all_ids))
    selected = source.sample(list(all_ids), sample_size)

    logger.debug(
        "Sampled items for detailed analysis",
        extra={"total_count": total_count, "cap": cap, "selected": len(selected)},
    )
    return selected
