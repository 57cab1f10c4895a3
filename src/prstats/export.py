"""Per-user Markdown export of pull request comments and reviews."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

from .models import REVIEW_COMMENTED, Comment, DetailEvent, Review

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def safe_username(user: str) -> str:
    """Replace characters that are unsafe in file names with underscores."""
    return _UNSAFE_FILENAME_CHARS.sub("_", user)


def _entry_body(event: DetailEvent) -> Optional[str]:
    """Return the exported text of an event, or ``None`` when it is not exported.

    Reviews are exported when they have a body, or when their state is not a
    plain comment (approvals and change requests without a body).
    """
    if isinstance(event, Comment):
        return event.body

    if event.body:
        return f"**Review State:** {event.state}\n\n{event.body}"
    if event.state != REVIEW_COMMENTED:
        return f"**Review State:** {event.state}"
    return None


def _item_number(event: DetailEvent) -> str:
    return event.item_id.rsplit("#", 1)[-1]


def _event_date(event: DetailEvent) -> Optional[datetime]:
    if isinstance(event, Review):
        return event.submitted_at
    return event.created_at


def export_comments(
    events: Iterable[DetailEvent],
    output_dir: str,
    repositories: Sequence[str],
    label: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> Dict[str, int]:
    """Write one Markdown file of comments and reviews per author.

    Existing files are appended to; a header is written when a file is created.

    Args:
        events: Comment and review events of the analysed pull requests.
        output_dir: Target directory, created when missing.
        repositories: Analysed repositories, listed in each file header.
        label: Label filter, listed in each file header.
        generated_at: Timestamp written in headers; defaults to now.

    Returns:
        Mapping of file name to the number of entries written to it in this call.
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    generated = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

    written: Dict[str, int] = {}
    for event in events:
        body = _entry_body(event)
        if body is None:
            continue

        path = directory / f"{safe_username(event.author)}_comments.md"
        if not path.exists():
            path.write_text(
                f"# Comments by {event.author}\n\n"
                f"Repositories: {' '.join(repositories)}\n"
                f"Label: {label or '-'}\n"
                f"Generated on: {generated}\n\n"
                "---\n\n",
                encoding="utf-8",
            )

        date = _event_date(event)
        date_text = date.isoformat().replace("+00:00", "Z") if date else "unknown"
        day_text = date.date().isoformat() if date else "unknown"
        with path.open("a", encoding="utf-8") as handle:
            handle.write(
                f"## {event.repository} - PR #{_item_number(event)} - {day_text}\n\n"
                f"**Repository:** {event.repository}\n"
                f"**Date:** {date_text}\n"
                f"**URL:** {event.url}\n\n"
                f"{body}\n\n"
                "---\n\n"
            )
        written[path.name] = written.get(path.name, 0) + 1

    logger.info(
        "Exported comments",
        extra={"output_dir": str(directory), "files": len(written), "entries": sum(written.values())},
    )
    return written
