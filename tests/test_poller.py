"""Tests for the fixed-interval job poller."""

import pytest

from genstudio.generation.base import GenerationTimeoutError, ProviderError
from genstudio.generation.poller import FAILED, PENDING, SUCCEEDED, JobStatus, poll_job


class _FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code
        self.ok = 200 <= status_code < 300

    def json(self):
        return self._body


def _interpret(body):
    return JobStatus(state=body["state"], output_url=body.get("url"), error=body.get("error"))


def _fetcher(bodies):
    responses = iter(bodies)
    calls = []

    def fetch():
        calls.append(1)
        return next(responses)

    return fetch, calls


def test_returns_output_after_pending_polls():
    fetch, calls = _fetcher(
        [
            _FakeResponse({"state": PENDING}),
            _FakeResponse({"state": PENDING}),
            _FakeResponse({"state": SUCCEEDED, "url": "https://cdn/out.png"}),
        ]
    )
    sleeps, updates = [], []

    url = poll_job(
        fetch, _interpret, interval=2.0, max_attempts=10,
        on_progress=updates.append, stage="Creating image...", sleep=sleeps.append,
    )

    assert url == "https://cdn/out.png"
    assert len(calls) == 3
    assert sleeps == [2.0, 2.0, 2.0]
    assert [u.progress for u in updates] == [40, 45, 50]
    assert all(u.stage == "Creating image..." for u in updates)


def test_times_out_after_max_attempts():
    fetch, calls = _fetcher([_FakeResponse({"state": PENDING})] * 3)

    with pytest.raises(GenerationTimeoutError, match="Video generation timed out"):
        poll_job(
            fetch, _interpret, interval=3.0, max_attempts=3,
            on_progress=lambda u: None, stage="Processing video...",
            timeout_message="Video generation timed out", sleep=lambda s: None,
        )
    assert len(calls) == 3


def test_failed_job_uses_provider_error_or_default():
    fetch, _ = _fetcher([_FakeResponse({"state": FAILED, "error": "NSFW content"})])
    with pytest.raises(ProviderError, match="NSFW content"):
        poll_job(fetch, _interpret, 1, 5, lambda u: None, "x", sleep=lambda s: None)

    fetch, _ = _fetcher([_FakeResponse({"state": FAILED})])
    with pytest.raises(ProviderError, match="Prediction failed"):
        poll_job(
            fetch, _interpret, 1, 5, lambda u: None, "x",
            failed_error="Prediction failed", sleep=lambda s: None,
        )


def test_succeeded_without_output_is_an_error():
    fetch, _ = _fetcher([_FakeResponse({"state": SUCCEEDED})])
    with pytest.raises(ProviderError, match="No output URL in prediction"):
        poll_job(
            fetch, _interpret, 1, 5, lambda u: None, "x",
            missing_output_error="No output URL in prediction", sleep=lambda s: None,
        )


def test_status_request_failure_includes_code():
    fetch, _ = _fetcher([_FakeResponse({}, status_code=503)])
    with pytest.raises(ProviderError) as exc_info:
        poll_job(
            fetch, _interpret, 1, 5, lambda u: None, "x",
            status_error="Failed to check task status", provider="runwayml",
            sleep=lambda s: None,
        )
    assert str(exc_info.value) == "Failed to check task status: 503"
    assert exc_info.value.status_code == 503
    assert exc_info.value.provider == "runwayml"


class _NotJSONResponse(_FakeResponse):
    def json(self):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


def test_status_body_that_is_not_json_is_a_provider_error():
    fetch, _ = _fetcher([_NotJSONResponse(None)])
    with pytest.raises(ProviderError) as exc_info:
        poll_job(
            fetch, _interpret, 1, 5, lambda u: None, "x",
            status_error="Failed to check prediction status", provider="replicate",
            sleep=lambda s: None,
        )
    assert str(exc_info.value) == "Failed to check prediction status: invalid JSON response"
    assert exc_info.value.provider == "replicate"
    assert exc_info.value.status_code == 200
