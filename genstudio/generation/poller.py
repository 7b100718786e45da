"""
Asynchronous job polling.

Replicate predictions and RunwayML tasks are submitted once and then
re-fetched on a fixed interval until the provider reports success or
failure. Progress during polling moves linearly from 40 % towards 90 %
as attempts are used up.

Job state progression::

    submitted -> polling -> succeeded | failed | timeout

There is no cancellation and no backoff: the interval is constant and the
loop ends after ``max_attempts`` fetches.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from genstudio.generation.base import (
    GenerationProgress,
    GenerationTimeoutError,
    ProgressCallback,
    ProviderError,
)

POLL_PROGRESS_START = 40
POLL_PROGRESS_SPAN = 50

SUCCEEDED = "succeeded"
FAILED = "failed"
PENDING = "pending"


@dataclass
class JobStatus:
    """Provider-neutral view of a job status response."""

    state: str
    output_url: Optional[str] = None
    error: Optional[str] = None


def poll_job(
    fetch: Callable[[], Any],
    interpret: Callable[[dict], JobStatus],
    interval: float,
    max_attempts: int,
    on_progress: ProgressCallback,
    stage: str,
    timeout_message: str = "Generation timed out",
    status_error: str = "Failed to check job status",
    missing_output_error: str = "No output URL in job",
    failed_error: str = "Job failed",
    provider: str = "",
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Poll a job until it succeeds, fails or exhausts its attempt budget.

    Parameters:
        fetch: Zero-argument callable returning an HTTP response for the
            job's status endpoint.
        interpret: Translates the provider's JSON body into a
            :class:`JobStatus`.
        interval: Seconds to wait before every fetch.
        max_attempts: Maximum number of fetches.
        on_progress: Progress callback.
        stage: Stage text reported with every poll.
        timeout_message: Message of the timeout error.
        status_error: Prefix used when the status request itself fails.
        missing_output_error: Message when a succeeded job has no output.
        failed_error: Message when a failed job carries no error text.
        provider: Provider id attached to raised :class:`ProviderError`.
        sleep: Sleep function (injectable for tests).

    Returns:
        The output URL of the succeeded job.

    Raises:
        ProviderError: Status request failed, job failed, or no output.
        GenerationTimeoutError: ``max_attempts`` fetches without a result.
    """
    attempts = 0

    while attempts < max_attempts:
        sleep(interval)

        response = fetch()
        if not response.ok:
            raise ProviderError(
                f"{status_error}: {response.status_code}",
                provider=provider,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                f"{status_error}: invalid JSON response",
                provider=provider,
                status_code=response.status_code,
            ) from e

        status = interpret(body)

        progress = POLL_PROGRESS_START + (attempts / max_attempts) * POLL_PROGRESS_SPAN
        on_progress(GenerationProgress(progress=progress, stage=stage))

        if status.state == SUCCEEDED:
            if status.output_url:
                return status.output_url
            raise ProviderError(missing_output_error, provider=provider)

        if status.state == FAILED:
            raise ProviderError(status.error or failed_error, provider=provider)

        attempts += 1

    raise GenerationTimeoutError(timeout_message)
