"""
RunwayML Gen-2 provider.

Video only: submits a generation task, then polls ``/v1/tasks/<id>``
until the task reports ``SUCCEEDED`` or ``FAILED``.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from genstudio.generation.base import (
    BaseProvider,
    GenerationProgress,
    ProgressCallback,
    ProviderError,
    _ignore_progress,
)
from genstudio.generation.poller import FAILED, PENDING, SUCCEEDED, JobStatus, poll_job
from genstudio.generation.registry import ProviderRegistry

GENERATE_URL = "https://api.runwayml.com/v1/generate"
TASKS_URL = "https://api.runwayml.com/v1/tasks"


def interpret_task(task: dict) -> JobStatus:
    """Translate a RunwayML task body into a :class:`JobStatus`."""
    status = task.get("status")
    if status == "SUCCEEDED":
        output = task.get("output")
        if isinstance(output, list) and output:
            return JobStatus(state=SUCCEEDED, output_url=output[0])
        if isinstance(output, dict):
            return JobStatus(state=SUCCEEDED, output_url=output.get("url"))
        return JobStatus(state=SUCCEEDED)
    if status == "FAILED":
        return JobStatus(state=FAILED, error=task.get("error"))
    return JobStatus(state=PENDING)


@ProviderRegistry.register("runwayml")
class RunwayProvider(BaseProvider):
    """Provider backend for RunwayML video generation.

    Parameters:
        api_key: RunwayML API key.
        model: Runway model name.
        duration: Clip length in seconds.
        resolution: Output resolution.
        poll_interval: Seconds between status checks.
        max_attempts: Maximum number of status checks.
        sleep: Sleep function used between checks.
    """

    display_name = "RunwayML"
    capabilities = frozenset({"video"})

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gen2",
        duration: int = 4,
        resolution: str = "1280x768",
        poll_interval: float = 3.0,
        max_attempts: int = 120,
        sleep: Callable[[float], None] = time.sleep,
        **kwargs: Any,
    ):
        super().__init__(api_key=api_key, **kwargs)
        self.model = model
        self.duration = duration
        self.resolution = resolution
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.sleep = sleep

    def generate_video(
        self,
        prompt: str,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> str:
        on_progress(GenerationProgress(progress=20, stage="Connecting to RunwayML..."))

        payload = {
            "model": self.model,
            "prompt": prompt,
            "duration": self.duration,
            "resolution": self.resolution,
        }
        response = self._post_json(GENERATE_URL, payload)
        self._raise_for_response(response, "error")

        task_id = response.json().get("id")
        if not task_id:
            raise ProviderError("RunwayML did not return a task id.", provider=self.name)

        on_progress(GenerationProgress(progress=40, stage="Generating video..."))

        url = poll_job(
            fetch=lambda: self._get(f"{TASKS_URL}/{task_id}"),
            interpret=interpret_task,
            interval=self.poll_interval,
            max_attempts=self.max_attempts,
            on_progress=on_progress,
            stage="Processing video...",
            timeout_message="Video generation timed out",
            status_error="Failed to check task status",
            missing_output_error="No video URL in task output",
            failed_error="Video generation failed",
            provider=self.name,
            sleep=self.sleep,
        )

        on_progress(GenerationProgress(progress=95, stage="Finalizing..."))
        return url
