"""
Stability AI provider.

Two request shapes are used:

* **JSON** – SDXL 1.0 text-to-image (``/v1/generation/.../text-to-image``).
  The response carries base64 artifacts, returned as a PNG data URL.
* **multipart/form-data** – background removal
  (``/v2beta/stable-image/edit/remove-background``), which uploads the
  source image as a file part.
"""

from __future__ import annotations

import os
from typing import Any, BinaryIO, Optional, Union

from genstudio.generation.base import (
    BaseProvider,
    GenerationProgress,
    ProgressCallback,
    ProviderError,
    _ignore_progress,
)
from genstudio.generation.registry import ProviderRegistry

TEXT_TO_IMAGE_URL = (
    "https://api.stability.ai/v1/generation/"
    "stable-diffusion-xl-1024-v1-0/text-to-image"
)
REMOVE_BACKGROUND_URL = (
    "https://api.stability.ai/v2beta/stable-image/edit/remove-background"
)


@ProviderRegistry.register("stabilityai")
class StabilityProvider(BaseProvider):
    """Provider backend for Stability AI (Stable Diffusion XL).

    Parameters:
        api_key: Stability AI API key.
        cfg_scale: Prompt adherence.
        steps: Sampling steps.
        width: Output width in pixels.
        height: Output height in pixels.
    """

    display_name = "Stability AI"
    capabilities = frozenset({"image"})

    def __init__(
        self,
        api_key: Optional[str] = None,
        cfg_scale: float = 7,
        steps: int = 30,
        width: int = 1024,
        height: int = 1024,
        **kwargs: Any,
    ):
        super().__init__(api_key=api_key, **kwargs)
        self.cfg_scale = cfg_scale
        self.steps = steps
        self.width = width
        self.height = height

    def generate_image(
        self,
        prompt: str,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> str:
        on_progress(GenerationProgress(progress=20, stage="Connecting to Stability AI..."))

        payload = {
            "text_prompts": [{"text": prompt, "weight": 1}],
            "cfg_scale": self.cfg_scale,
            "height": self.height,
            "width": self.width,
            "samples": 1,
            "steps": self.steps,
        }
        response = self._post_json(
            TEXT_TO_IMAGE_URL, payload, headers={"Accept": "application/json"}
        )
        self._raise_for_response(response, "message")

        on_progress(GenerationProgress(progress=80, stage="Processing image..."))

        data = response.json()
        artifacts = data.get("artifacts") or []
        if not artifacts or not artifacts[0].get("base64"):
            raise ProviderError(
                "No image data returned from Stability AI", provider=self.name
            )

        on_progress(GenerationProgress(progress=95, stage="Finalizing..."))
        return f"data:image/png;base64,{artifacts[0]['base64']}"

    def remove_background(
        self,
        image: Union[str, bytes, BinaryIO],
        on_progress: ProgressCallback = _ignore_progress,
    ) -> str:
        """Remove the background of an image.

        Parameters:
            image: Path to an image file, raw bytes, or an open binary file.
            on_progress: Progress callback.

        Returns:
            PNG data URL of the cut-out image.
        """
        on_progress(GenerationProgress(progress=20, stage="Uploading image..."))

        if isinstance(image, str):
            with open(image, "rb") as fh:
                content = fh.read()
            filename = os.path.basename(image)
        elif isinstance(image, bytes):
            content = image
            filename = "image.png"
        else:
            content = image.read()
            filename = os.path.basename(getattr(image, "name", "image.png"))

        response = self.session.post(
            REMOVE_BACKGROUND_URL,
            headers={**self._auth_headers(), "Accept": "application/json"},
            files={"image": (filename, content)},
            data={"output_format": "png"},
            timeout=self.timeout,
        )
        self._raise_for_response(response, "message")

        on_progress(GenerationProgress(progress=80, stage="Processing image..."))

        data = response.json()
        encoded = data.get("image")
        if not encoded:
            raise ProviderError(
                "No image data returned from Stability AI", provider=self.name
            )

        on_progress(GenerationProgress(progress=95, stage="Finalizing..."))
        return f"data:image/png;base64,{encoded}"
