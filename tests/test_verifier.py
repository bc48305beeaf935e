from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from orbit.errors import (
    InvalidURLError,
    MissingConfigError,
    StaleSubmissionError,
    SubmissionNotFoundError,
    VerificationUnavailableError,
)
from orbit.verifier import SubmissionVerifier, extract_slug, manual_problem, title_from_slug

from .support import NOW, make_settings

URL = "https://leetcode.com/problems/two-sum/description/"


def _verifier(tmp_path, handler) -> SubmissionVerifier:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SubmissionVerifier(make_settings(tmp_path), client=client)


def _feed(*entries: tuple[str, timedelta]):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/ada/ac-submission"
        assert request.url.params["limit"] == "20"
        submissions = [
            {"title": slug.replace("-", " ").title(), "titleSlug": slug, "timestamp": str(int((NOW - age).timestamp()))}
            for slug, age in entries
        ]
        return httpx.Response(200, json={"count": len(submissions), "submission": submissions})

    return handler


def test_extract_slug() -> None:
    assert extract_slug(URL) == "two-sum"
    assert extract_slug("https://leetcode.com/problems/valid-anagram") == "valid-anagram"
    with pytest.raises(InvalidURLError):
        extract_slug("https://example.com/two-sum")
    with pytest.raises(InvalidURLError):
        extract_slug("   ")


def test_recent_submission_is_accepted(tmp_path, telemetry_events) -> None:
    verifier = _verifier(tmp_path, _feed(("two-sum", timedelta(hours=3))))

    result = verifier.verify(URL, "ada", now=NOW)

    assert result.manual is False
    assert result.problem.id == "two-sum"
    assert result.problem.title == "Two Sum"
    assert result.problem.link == URL
    assert result.problem.timestamp == NOW
    assert [event.name for event in telemetry_events] == ["submission_verified"]


def test_submission_older_than_a_day_is_stale(tmp_path) -> None:
    verifier = _verifier(tmp_path, _feed(("two-sum", timedelta(hours=24))))

    with pytest.raises(StaleSubmissionError) as excinfo:
        verifier.verify(URL, "ada", now=NOW)
    assert excinfo.value.submitted_at == NOW - timedelta(hours=24)
    assert "2026-10-17" in str(excinfo.value)


def test_missing_submission(tmp_path) -> None:
    verifier = _verifier(tmp_path, _feed(("add-two-numbers", timedelta(hours=1))))
    with pytest.raises(SubmissionNotFoundError):
        verifier.verify(URL, "ada", now=NOW)


def test_missing_username_is_a_config_error(tmp_path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("feed should not be queried")

    with pytest.raises(MissingConfigError):
        _verifier(tmp_path, handler).verify(URL, "  ", now=NOW)


def test_invalid_url_checked_before_username(tmp_path) -> None:
    with pytest.raises(InvalidURLError):
        _verifier(tmp_path, _feed()).verify("not a url", "", now=NOW)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="down"),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json={"errors": ["rate limited"]}),
    ],
)
def test_feed_failures_are_unavailable(tmp_path, response: httpx.Response) -> None:
    verifier = _verifier(tmp_path, lambda request: response)
    with pytest.raises(VerificationUnavailableError):
        verifier.verify(URL, "ada", now=NOW)


def test_network_error_is_unavailable(tmp_path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(VerificationUnavailableError):
        _verifier(tmp_path, handler).verify(URL, "ada", now=NOW)


def test_manual_problem_uses_slug_title() -> None:
    problem = manual_problem("two-sum", f" {URL} ", now=NOW)
    assert problem.title == title_from_slug("two-sum") == "TWO SUM"
    assert problem.link == URL
    assert problem.timestamp == NOW
