"""
OpenAI Images provider.

Uses the ``dall-e-3`` model via the Images API to generate one
1024x1024 image per call and returns the hosted URL.

Reference: https://platform.openai.com/docs/api-reference/images
"""

from __future__ import annotations

from typing import Any, Optional

import openai

from genstudio.generation.base import (
    BaseProvider,
    GenerationProgress,
    ProgressCallback,
    ProviderError,
    _ignore_progress,
)
from genstudio.generation.registry import ProviderRegistry


@ProviderRegistry.register("openai")
class OpenAIImageProvider(BaseProvider):
    """Provider backend for OpenAI's DALL-E 3.

    Parameters:
        api_key: OpenAI API key.
        model: Images model name.
        size: Image dimensions (e.g., ``"1024x1024"``).
        quality: ``"standard"`` or ``"hd"``.
        client: Pre-built ``openai.OpenAI`` client (optional).
    """

    display_name = "OpenAI"
    capabilities = frozenset({"image"})

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "dall-e-3",
        size: str = "1024x1024",
        quality: str = "standard",
        client: Any = None,
        **kwargs: Any,
    ):
        super().__init__(api_key=api_key, **kwargs)
        self.model = model
        self.size = size
        self.quality = quality
        self._client = client

    def setup(self) -> None:
        """Initialize the OpenAI client."""
        self._client = openai.OpenAI(
            api_key=self.api_key, timeout=self.timeout, max_retries=0
        )

    def generate_image(
        self,
        prompt: str,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> str:
        on_progress(GenerationProgress(progress=20, stage="Connecting to OpenAI..."))

        if self._client is None:
            self.setup()

        try:
            result = self._client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size=self.size,
                quality=self.quality,
                response_format="url",
            )
        except openai.APIStatusError as e:
            raise ProviderError(
                e.message or f"OpenAI API error: {e.status_code}",
                provider=self.name,
                status_code=e.status_code,
            ) from e
        except openai.OpenAIError as e:
            raise ProviderError(str(e), provider=self.name) from e

        on_progress(GenerationProgress(progress=80, stage="Processing image..."))

        data = getattr(result, "data", None) or []
        url = getattr(data[0], "url", None) if data else None
        if not url:
            raise ProviderError("No image URL returned from OpenAI", provider=self.name)

        on_progress(GenerationProgress(progress=95, stage="Finalizing..."))
        return url
