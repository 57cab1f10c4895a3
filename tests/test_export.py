"""Tests for per-user Markdown comment export."""

import sys
from datetime import datetime, timezone
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstats.export import export_comments, safe_username
from prstats.models import Comment, Review

_WHEN = datetime(2024, 1, 6, 9, 30, tzinfo=timezone.utc)


def _comment(author: str = "carol", body: str = "nit: rename") -> Comment:
    return Comment(
        author=author,
        item_id="org/app#7",
        body=body,
        created_at=_WHEN,
        url="https://github.com/org/app/pull/7#discussion_r1",
        repository="org/app",
    )


def _review(state: str, body: str | None = None, author: str = "carol") -> Review:
    return Review(
        author=author,
        item_id="org/app#7",
        state=state,
        body=body,
        submitted_at=_WHEN,
        url="https://github.com/org/app/pull/7#pullrequestreview-1",
        repository="org/app",
    )


def test_safe_username_replaces_special_characters():
    """Verify unsafe filename characters become underscores."""
    assert safe_username("dependabot[bot]") == "dependabot_bot_"
    assert safe_username("jane.doe-1_x") == "jane.doe-1_x"


def test_export_comments_writes_header_and_entries(tmp_path):
    """Verify one file per author with a header and one section per entry."""
    exported = export_comments(
        [_comment(), _review("APPROVED"), _comment(author="dependabot[bot]", body="bump")],
        str(tmp_path / "out"),
        repositories=["org/app", "org/runtime"],
        label="team-x",
        generated_at=datetime(2024, 2, 1, 8, 0, 0),
    )

    assert exported == {"carol_comments.md": 2, "dependabot_bot__comments.md": 1}

    content = (tmp_path / "out" / "carol_comments.md").read_text(encoding="utf-8")
    assert content.startswith("# Comments by carol\n")
    assert "Repositories: org/app org/runtime" in content
    assert "Label: team-x" in content
    assert "Generated on: 2024-02-01 08:00:00" in content
    assert content.count("## org/app - PR #7 - 2024-01-06") == 2
    assert "**Date:** 2024-01-06T09:30:00Z" in content
    assert "nit: rename" in content
    assert "**Review State:** APPROVED" in content


def test_export_comments_skips_bodyless_commented_reviews(tmp_path):
    """Verify COMMENTED reviews without a body are not exported, other review states are."""
    exported = export_comments(
        [_review("COMMENTED"), _review("COMMENTED", body="see inline"), _review("CHANGES_REQUESTED")],
        str(tmp_path),
        repositories=["org/app"],
    )

    assert exported == {"carol_comments.md": 2}
    content = (tmp_path / "carol_comments.md").read_text(encoding="utf-8")
    assert "**Review State:** COMMENTED\n\nsee inline" in content
    assert "**Review State:** CHANGES_REQUESTED" in content


def test_export_comments_appends_to_existing_files(tmp_path):
    """Verify a second export appends without rewriting the header."""
    export_comments([_comment()], str(tmp_path), repositories=["org/app"])
    export_comments([_comment(body="second")], str(tmp_path), repositories=["org/app"])

    content = (tmp_path / "carol_comments.md").read_text(encoding="utf-8")
    assert content.count("# Comments by carol") == 1
    assert "second" in content


def test_export_comments_without_events_creates_nothing(tmp_path):
    """Verify no files are written when there is nothing to export."""
    assert export_comments([], str(tmp_path / "out"), repositories=["org/app"]) == {}
    assert list((tmp_path / "out").iterdir()) == []
