"""Command-line argument parsing for the GitHub PR stats generator."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .config import DEFAULT_LOOKBACK_MONTHS, DEFAULT_MAX_PAGES
from .sampling import DEFAULT_SAMPLE_CAP


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for PR statistics generation.

    Returns:
        Parsed CLI arguments.
    """
    parser = argparse.ArgumentParser(
        prog="github-pr-stats",
        description=(
            "Generate GitHub pull-request statistics for one or more repositories "
            "(creators, outcomes, commenters, review coverage and resolution time)."
        ),
    )

    parser.add_argument(
        "--repo",
        dest="repositories",
        action="append",
        required=True,
        help="Repository as owner/name; repeatable or comma-separated.",
    )
    parser.add_argument(
        "--label",
        default=None,
        help="Only analyze pull requests carrying this label.",
    )
    parser.add_argument(
        "--max-pages",
        type=_positive_int,
        default=DEFAULT_MAX_PAGES,
        help=f"Maximum search result pages per repository (default: {DEFAULT_MAX_PAGES}).",
    )
    parser.add_argument(
        "--sample-cap",
        type=_positive_int,
        default=DEFAULT_SAMPLE_CAP,
        help=(
            "Maximum number of PRs analyzed for comments and reviews "
            f"(default: {DEFAULT_SAMPLE_CAP})."
        ),
    )
    parser.add_argument(
        "--no-sampling",
        dest="exhaustive",
        action="store_true",
        help="Analyze comments and reviews of every PR instead of a random sample.",
    )
    parser.add_argument(
        "--months",
        type=_positive_int,
        default=DEFAULT_LOOKBACK_MONTHS,
        help=f"Number of months of PR history to analyze (default: {DEFAULT_LOOKBACK_MONTHS}).",
    )
    parser.add_argument(
        "--comments-dir",
        default=None,
        help="Write per-user Markdown files of comments and reviews to this directory.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible sampling.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
