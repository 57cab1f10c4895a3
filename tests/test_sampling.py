"""Tests for the detailed-analysis sampling selector."""

import random
import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstats.errors import ConfigurationError, InvalidConfigurationError
from prstats.sampling import DEFAULT_SAMPLE_CAP, select_sample


def _ids(count: int):
    return [f"org/app#{number}" for number in range(1, count + 1)]


def test_default_sample_cap_is_50():
    """Verify the default cap on analysed pull requests."""
    assert DEFAULT_SAMPLE_CAP == 50


def test_select_sample_exhaustive_returns_all_ids_regardless_of_cap():
    """Verify exhaustive analysis ignores the cap."""
    ids = _ids(120)

    assert set(select_sample(ids, len(ids), 10, exhaustive=True)) == set(ids)


def test_select_sample_small_dataset_returns_all_ids():
    """Verify sampling is skipped when the total does not exceed the cap."""
    ids = _ids(30)

    assert set(select_sample(ids, len(ids), 50, exhaustive=False)) == set(ids)
    assert set(select_sample(ids, len(ids), 30, exhaustive=False)) == set(ids)


def test_select_sample_large_dataset_returns_cap_distinct_ids():
    """Verify 120 items with cap 50 yields exactly 50 distinct ids drawn from the input."""
    ids = _ids(120)

    selected = select_sample(ids, len(ids), 50, exhaustive=False)

    assert len(selected) == 50
    assert len(set(selected)) == 50
    assert set(selected) <= set(ids)


def test_select_sample_size_is_min_of_total_and_cap():
    """Verify the sample size is min(total, cap) across a range of totals."""
    for total in (1, 5, 49, 50, 51, 200):
        ids = _ids(total)
        assert len(select_sample(ids, total, 50, exhaustive=False)) == min(total, 50)


def test_select_sample_is_reproducible_with_seeded_rng():
    """Verify an injected seeded random source makes the sample deterministic."""
    ids = _ids(120)

    first = select_sample(ids, len(ids), 50, exhaustive=False, rng=random.Random(7))
    second = select_sample(ids, len(ids), 50, exhaustive=False, rng=random.Random(7))

    assert first == second


def test_select_sample_does_not_deduplicate():
    """Verify duplicate ids pass through untouched when no sampling happens."""
    ids = ["org/app#1", "org/app#1", "org/app#2"]

    assert select_sample(ids, len(ids), 50, exhaustive=False) == ids


def test_select_sample_negative_cap_raises():
    """Verify a negative cap is rejected even for exhaustive analysis."""
    with pytest.raises(InvalidConfigurationError):
        select_sample(_ids(3), 3, -1, exhaustive=False)

    with pytest.raises(InvalidConfigurationError):
        select_sample(_ids(3), 3, -1, exhaustive=True)


def test_select_sample_zero_cap_with_candidates_raises():
    """Verify a zero cap is rejected when there is something to sample."""
    with pytest.raises(ConfigurationError):
        select_sample(_ids(3), 3, 0, exhaustive=False)


def test_select_sample_zero_cap_without_candidates_returns_empty():
    """Verify an empty candidate set needs no cap."""
    assert select_sample([], 0, 0, exhaustive=False) == []
