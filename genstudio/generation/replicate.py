"""
Replicate Predictions provider.

Submits a prediction for a pinned model version and polls
``/v1/predictions/<id>`` every ``poll_interval`` seconds until the
prediction succeeds, fails, or the attempt budget runs out.
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

PREDICTIONS_URL = "https://api.replicate.com/v1/predictions"

IMAGE_VERSION = "ac732df83cea7fff18b8472768c88ad041fa750ff7682a21affe81863cbe77e4"
VIDEO_VERSION = (
    "anotherjesse/zeroscope-v2-xl:"
    "9f747673945c62801b13b84701c783929c0ee784e4748ec062204894dda1a351"
)


def interpret_prediction(prediction: dict) -> JobStatus:
    """Translate a Replicate prediction body into a :class:`JobStatus`."""
    status = prediction.get("status")
    if status == "succeeded":
        output = prediction.get("output")
        if isinstance(output, list) and output:
            return JobStatus(state=SUCCEEDED, output_url=output[0])
        if isinstance(output, str):
            return JobStatus(state=SUCCEEDED, output_url=output)
        return JobStatus(state=SUCCEEDED)
    if status == "failed":
        return JobStatus(state=FAILED, error=prediction.get("error"))
    return JobStatus(state=PENDING)


@ProviderRegistry.register("replicate")
class ReplicateProvider(BaseProvider):
    """Provider backend for Replicate (SDXL images, Zeroscope video).

    Parameters:
        api_key: Replicate API token.
        poll_interval: Seconds between status checks.
        max_attempts: Maximum number of status checks.
        sleep: Sleep function used between checks.
    """

    display_name = "Replicate"
    capabilities = frozenset({"image", "video"})

    def __init__(
        self,
        api_key: Optional[str] = None,
        poll_interval: float = 2.0,
        max_attempts: int = 120,
        sleep: Callable[[float], None] = time.sleep,
        **kwargs: Any,
    ):
        super().__init__(api_key=api_key, **kwargs)
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.sleep = sleep

    def _auth_headers(self) -> dict:
        return {"Authorization": f"Token {self.api_key}"}

    def generate_image(
        self,
        prompt: str,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> str:
        payload = {
            "version": IMAGE_VERSION,
            "input": {
                "prompt": prompt,
                "width": 1024,
                "height": 1024,
                "num_outputs": 1,
            },
        }
        return self._run_prediction(
            payload,
            on_progress,
            submitted_stage="Generating image...",
            polling_stage="Creating image...",
        )

    def generate_video(
        self,
        prompt: str,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> str:
        payload = {
            "version": VIDEO_VERSION,
            "input": {
                "prompt": prompt,
                "num_frames": 24,
                "num_inference_steps": 50,
            },
        }
        return self._run_prediction(
            payload,
            on_progress,
            submitted_stage="Generating video frames...",
            polling_stage="Rendering video frames...",
        )

    def _run_prediction(
        self,
        payload: dict,
        on_progress: ProgressCallback,
        submitted_stage: str,
        polling_stage: str,
    ) -> str:
        on_progress(GenerationProgress(progress=20, stage="Connecting to Replicate..."))

        response = self._post_json(PREDICTIONS_URL, payload)
        self._raise_for_response(response, "detail")

        prediction = response.json()
        prediction_id = prediction.get("id")
        if not prediction_id:
            raise ProviderError("Replicate did not return a prediction id.", provider=self.name)

        on_progress(GenerationProgress(progress=40, stage=submitted_stage))

        url = poll_job(
            fetch=lambda: self._get(f"{PREDICTIONS_URL}/{prediction_id}"),
            interpret=interpret_prediction,
            interval=self.poll_interval,
            max_attempts=self.max_attempts,
            on_progress=on_progress,
            stage=polling_stage,
            timeout_message="Generation timed out",
            status_error="Failed to check prediction status",
            missing_output_error="No output URL in prediction",
            failed_error="Prediction failed",
            provider=self.name,
            sleep=self.sleep,
        )

        on_progress(GenerationProgress(progress=95, stage="Finalizing..."))
        return url
