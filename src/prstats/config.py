"""Configuration parsing and validation for the GitHub PR stats generator."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .errors import AuthenticationError, ConfigurationError
from .sampling import DEFAULT_SAMPLE_CAP

DEFAULT_MAX_PAGES = 10
DEFAULT_LOOKBACK_MONTHS = 3


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the stats generator."""

    repositories: Tuple[str, ...]
    token: str
    label: Optional[str] = None
    max_pages: int = DEFAULT_MAX_PAGES
    sample_cap: int = DEFAULT_SAMPLE_CAP
    exhaustive: bool = False
    months: int = DEFAULT_LOOKBACK_MONTHS
    comments_dir: Optional[str] = None


def split_repositories(values: Iterable[str]) -> Tuple[str, ...]:
    """Flatten repeated and comma-separated ``owner/name`` values, keeping order."""
    repositories = []
    for value in values:
        for name in value.split(","):
            name = name.strip()
            if name and name not in repositories:
                repositories.append(name)
    return tuple(repositories)


def lookback_start(months: int, now: Optional[datetime] = None) -> datetime:
    """Return the UTC instant ``months`` calendar months before ``now``."""
    current = now or datetime.now(timezone.utc)
    return current.replace(microsecond=0) - relativedelta(months=months)


def load_config(
    repositories: Iterable[str],
    label: Optional[str] = None,
    max_pages: int = DEFAULT_MAX_PAGES,
    sample_cap: int = DEFAULT_SAMPLE_CAP,
    exhaustive: bool = False,
    months: int = DEFAULT_LOOKBACK_MONTHS,
    comments_dir: Optional[str] = None,
) -> Config:
    """Build and validate application configuration.

    Args:
        repositories: Repository names as ``owner/name``; comma-separated values
            are split.
        label: Optional label every analysed pull request must carry.
        max_pages: Maximum search result pages fetched per repository.
        sample_cap: Maximum number of pull requests analysed for comments and
            reviews when sampling.
        exhaustive: Analyse comments and reviews of every pull request.
        months: Lookback window in months.
        comments_dir: Directory for per-user comment exports, if any.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If any value is out of range.
        AuthenticationError: If ``GITHUB_TOKEN`` is not configured.
    """
    names = split_repositories(repositories)
    if not names:
        raise ConfigurationError("At least one repository ('owner/name') is required.")

    malformed = [name for name in names if name.count("/") != 1 or name.startswith("/") or name.endswith("/")]
    if malformed:
        raise ConfigurationError(
            f"Invalid repository name(s): {', '.join(malformed)}. Expected 'owner/name'."
        )

    if max_pages <= 0:
        raise ConfigurationError("Invalid value for 'max_pages': expected an integer greater than 0.")

    if sample_cap <= 0:
        raise ConfigurationError("Invalid value for 'sample_cap': expected an integer greater than 0.")

    if months <= 0:
        raise ConfigurationError("Invalid value for 'months': expected an integer greater than 0.")

    token: str = os.getenv("GITHUB_TOKEN", "").strip()
    if not token:
        raise AuthenticationError(
            "Missing required GitHub token. "
            "Set the 'GITHUB_TOKEN' environment variable before running the stats generator."
        )

    return Config(
        repositories=names,
        token=token,
        label=(label or "").strip() or None,
        max_pages=max_pages,
        sample_cap=sample_cap,
        exhaustive=exhaustive,
        months=months,
        comments_dir=comments_dir,
    )
