"""Tests for issue body building functions."""

from __future__ import annotations

import datetime as dt

import pytest

from issue_mover.issue_builder import (
    INVALID_ARGUMENTS_NOTICE,
    app_not_installed_notice,
    build_comment_body,
    build_issue_body,
    completion_notice,
    format_timestamp,
)
from issue_mover.models import IssueRef


@pytest.mark.unit
class TestFormatTimestamp:
    def test_afternoon(self) -> None:
        assert format_timestamp(dt.datetime(2024, 1, 15, 15, 7, tzinfo=dt.UTC)) == "Jan 15, 2024, 3:07 PM"

    def test_midnight(self) -> None:
        assert format_timestamp(dt.datetime(2024, 3, 5, 0, 30, tzinfo=dt.UTC)) == "Mar 5, 2024, 12:30 AM"

    def test_noon(self) -> None:
        assert format_timestamp(dt.datetime(2024, 12, 31, 12, 0, tzinfo=dt.UTC)) == "Dec 31, 2024, 12:00 PM"

    def test_converted_to_utc(self) -> None:
        tz = dt.timezone(dt.timedelta(hours=5, minutes=30))
        assert format_timestamp(dt.datetime(2024, 1, 15, 10, 30, tzinfo=tz)) == "Jan 15, 2024, 5:00 AM"

    def test_naive_is_utc(self) -> None:
        assert format_timestamp(dt.datetime(2024, 1, 15, 23, 59)) == "Jan 15, 2024, 11:59 PM"


@pytest.mark.unit
class TestBuildIssueBody:
    created_at = dt.datetime(2024, 1, 15, 15, 7, tzinfo=dt.UTC)
    source = IssueRef("octo", "repo1", 7)

    def test_body_with_mentions(self) -> None:
        body = build_issue_body(
            author="alice",
            created_at=self.created_at,
            markdown="Steps:\n\n1. run",
            mover="bob",
            source=self.source,
            mention_authors=True,
        )

        assert body == (
            "*@alice commented on Jan 15, 2024, 3:07 PM UTC:*\n\n"
            "Steps:\n\n1. run\n\n"
            "*This issue was moved by @bob from octo/repo1#7.*"
        )

    def test_body_without_mentions(self) -> None:
        body = build_issue_body(
            author="alice",
            created_at=self.created_at,
            markdown="text",
            mover="bob",
            source=self.source,
            mention_authors=False,
        )

        assert body.startswith("*[alice](https://github.com/alice) commented on")
        assert body.endswith("*This issue was moved by @bob from octo/repo1#7.*")

    def test_empty_markdown(self) -> None:
        body = build_issue_body(
            author="alice",
            created_at=self.created_at,
            markdown="",
            mover="bob",
            source=self.source,
            mention_authors=True,
        )

        assert "UTC:*\n\n\n\n*This issue" in body

    def test_bot_author(self) -> None:
        body = build_comment_body(
            author="github-actions[bot]",
            created_at=self.created_at,
            markdown="Build passed",
            mention_authors=True,
        )

        assert body == (
            "*[github-actions](https://github.com/apps/github-actions) commented on Jan 15, 2024, 3:07 PM UTC:*"
            "\n\nBuild passed"
        )


@pytest.mark.unit
class TestNotices:
    def test_completion_notice(self) -> None:
        notice = completion_notice("bob", IssueRef("acme", "tracker", 3))
        assert notice == "This issue was moved by @bob to acme/tracker#3."

    def test_completion_notice_without_number(self) -> None:
        assert completion_notice("bob", IssueRef("acme", "tracker")) == "This issue was moved by @bob to acme/tracker."

    def test_app_not_installed_notice(self) -> None:
        notice = app_not_installed_notice("https://github.com/apps/move")
        assert notice == (
            "⚠️ The [GitHub App](https://github.com/apps/move) must be installed for the target repository."
        )

    def test_invalid_arguments_notice_shows_usage(self) -> None:
        assert "```sh\n/move [to ][<owner>/]<repo>\n```" in INVALID_ARGUMENTS_NOTICE
