"""GitHub REST API client for pull request statistics retrieval."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

import requests

from .config import Config
from .durations import parse_timestamp
from .errors import ApiError, AuthenticationError, MalformedTimestampError
from .models import Comment, Review, WorkItem, item_key

logger = logging.getLogger(__name__)


class GitHubClient:
    """Small, typed client for the GitHub pull request APIs."""

    _BASE_URL = "https://api.github.com"
    _SEARCH_PAGE_SIZE = 100
    _DETAIL_PAGE_SIZE = 100
    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 60

    def __init__(self, config: Config, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            config: Validated runtime configuration including the token.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._config = config
        self._timeout_seconds = timeout_seconds

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"token {config.token}",
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": "github-pr-stats",
            }
        )

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path."""
        return f"{self._BASE_URL}/{path.lstrip('/')}"

    def _format_date(self, value: datetime) -> str:
        """Format a datetime as a UTC ISO-8601 search qualifier value."""
        utc_value = value.astimezone(timezone.utc).replace(microsecond=0)
        return utc_value.isoformat().replace("+00:00", "Z")

    def _parse_datetime(self, value: Optional[str]) -> Optional[datetime]:
        """Parse GitHub ISO-8601 timestamps into timezone-aware datetimes."""
        if not value:
            return None
        return parse_timestamp(value)

    def _is_rate_limited(self, response: requests.Response) -> bool:
        """Return True for a 403 caused by an exhausted primary rate limit."""
        return (
            response.status_code == 403
            and response.headers.get("X-RateLimit-Remaining") == "0"
        )

    def _extract_backoff_seconds(self, response: requests.Response, attempt: int) -> int:
        """Compute backoff seconds, honoring Retry-After and X-RateLimit-Reset."""
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header:
            try:
                retry_after_seconds = int(retry_after_header)
                return min(self._MAX_BACKOFF_SECONDS, max(1, retry_after_seconds))
            except ValueError:
                pass

        reset_header = response.headers.get("X-RateLimit-Reset")
        if reset_header:
            try:
                wait_seconds = int(reset_header) - int(time.time())
                return min(self._MAX_BACKOFF_SECONDS, max(1, wait_seconds))
            except ValueError:
                pass

        return min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Execute a GET request with retry logic for rate limits and 5xx responses.

        Raises:
            AuthenticationError: If GitHub rejects the token.
            ApiError: If the request repeatedly fails, returns HTTP >= 400,
                or does not return valid JSON.
        """
        url = self._build_url(path)
        last_error: Optional[Exception] = None

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.get(url, params=params, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                last_error = exc
                if attempt == self._MAX_RETRIES:
                    raise ApiError(f"GitHub request failed after retries: GET {url}") from exc
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            status_code = response.status_code
            is_retryable = (
                status_code == 429
                or 500 <= status_code <= 599
                or self._is_rate_limited(response)
            )

            if is_retryable and attempt < self._MAX_RETRIES:
                backoff = self._extract_backoff_seconds(response, attempt)
                logger.warning(
                    "GitHub request throttled or failed; retrying",
                    extra={"url": url, "status_code": status_code, "attempt": attempt, "backoff": backoff},
                )
                time.sleep(backoff)
                continue

            if status_code == 401:
                raise AuthenticationError("GitHub rejected the token (HTTP 401). Check 'GITHUB_TOKEN'.")

            if status_code >= 400:
                raise ApiError(
                    "GitHub API request failed: "
                    f"GET {url} returned {status_code} - {response.text}"
                )

            try:
                return response.json()
            except ValueError as exc:
                raise ApiError(f"GitHub API returned invalid JSON: GET {url}") from exc

        raise ApiError(f"GitHub request failed after retries: GET {url}") from last_error

    def _get_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        payload = self._get_json(path, params=params)
        if not isinstance(payload, list):
            raise ApiError(f"GitHub API returned unexpected payload shape: GET {self._build_url(path)}")
        return payload

    def search_pull_request_numbers(
        self,
        repository: str,
        since: datetime,
        label: Optional[str] = None,
        page: int = 1,
    ) -> List[int]:
        """Return the numbers of one page of pull requests created since ``since``."""
        qualifiers = [f"repo:{repository}", "is:pr"]
        if label:
            qualifiers.append(f'label:"{label}"' if " " in label else f"label:{label}")
        qualifiers.append(f"created:>={self._format_date(since)}")

        payload = self._get_json(
            "search/issues",
            params={"q": " ".join(qualifiers), "page": page, "per_page": self._SEARCH_PAGE_SIZE},
        )
        if not isinstance(payload, dict):
            raise ApiError(f"GitHub search returned unexpected payload shape for {repository}")
        if "message" in payload:
            raise ApiError(f"GitHub search failed for {repository}: {payload['message']}")

        numbers: List[int] = []
        for item in payload.get("items", []):
            number = item.get("number")
            if number is not None:
                numbers.append(int(number))
        return numbers

    def iter_pull_request_numbers(
        self,
        repository: str,
        since: datetime,
        label: Optional[str] = None,
        max_pages: int = 10,
    ) -> Iterator[int]:
        """Yield pull request numbers page by page, up to ``max_pages`` pages."""
        for page in range(1, max_pages + 1):
            numbers = self.search_pull_request_numbers(repository, since, label=label, page=page)
            logger.info(
                "Fetched search results page",
                extra={"repository": repository, "page": page, "count": len(numbers)},
            )
            yield from numbers

            if len(numbers) < self._SEARCH_PAGE_SIZE:
                break

    def get_pull_request(self, repository: str, number: int) -> WorkItem:
        """Fetch one pull request and convert it into a ``WorkItem``.

        Raises:
            ApiError: If the payload lacks required fields.
        """
        payload = self._get_json(f"repos/{repository}/pulls/{number}")
        if not isinstance(payload, dict) or "url" not in payload:
            raise ApiError(f"GitHub returned no pull request for {repository}#{number}")

        creator = (payload.get("user") or {}).get("login")
        state = payload.get("state")
        try:
            created_at = self._parse_datetime(payload.get("created_at"))
            merged_at = self._parse_datetime(payload.get("merged_at"))
        except MalformedTimestampError as exc:
            raise ApiError(f"GitHub pull request {repository}#{number} has invalid timestamps") from exc

        if not creator or not state or created_at is None:
            raise ApiError(
                "GitHub pull request payload is missing required fields: "
                f"repository={repository}, number={number}"
            )

        return WorkItem(
            id=item_key(repository, number),
            number=int(number),
            creator=str(creator),
            state=str(state),
            merged=bool(payload.get("merged")),
            created_at=created_at,
            merged_at=merged_at,
            repository=repository,
        )

    def list_review_comments(self, repository: str, number: int) -> List[Comment]:
        """List inline review comments of a pull request."""
        payload = self._get_list(
            f"repos/{repository}/pulls/{number}/comments",
            params={"per_page": self._DETAIL_PAGE_SIZE},
        )
        comments: List[Comment] = []

        for item in payload:
            author = (item.get("user") or {}).get("login")
            body = item.get("body")
            if not author or body is None:
                continue

            comments.append(
                Comment(
                    author=str(author),
                    item_id=item_key(repository, number),
                    body=str(body),
                    created_at=self._parse_datetime(item.get("created_at")),
                    url=str(item.get("html_url") or ""),
                    repository=repository,
                )
            )

        return comments

    def list_reviews(self, repository: str, number: int) -> List[Review]:
        """List submitted reviews of a pull request."""
        payload = self._get_list(
            f"repos/{repository}/pulls/{number}/reviews",
            params={"per_page": self._DETAIL_PAGE_SIZE},
        )
        reviews: List[Review] = []

        for item in payload:
            author = (item.get("user") or {}).get("login")
            if not author:
                continue

            reviews.append(
                Review(
                    author=str(author),
                    item_id=item_key(repository, number),
                    state=str(item.get("state") or ""),
                    body=item.get("body") or None,
                    submitted_at=self._parse_datetime(item.get("submitted_at")),
                    url=str(item.get("html_url") or ""),
                    repository=repository,
                )
            )

        return reviews
