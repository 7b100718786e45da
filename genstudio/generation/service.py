"""
Generation dispatch and batch sequencing.

Role in the studio:
    - Receives a prompt, the configured keys and the chosen provider id.
    - Instantiates the provider through :class:`ProviderRegistry`.
    - Runs a single image or video job, or a sequential batch of images
      whose per-item progress is folded into one overall percentage.

Errors from providers propagate unchanged; the studio layer turns them
into user-facing messages.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from genstudio.generation.base import (
    BaseProvider,
    GenerationProgress,
    MissingAPIKeyError,
    ProgressCallback,
    UnsupportedProviderError,
    _ignore_progress,
)
from genstudio.generation.registry import ProviderRegistry
from genstudio.keys import APIKeys


def build_provider(
    provider: str,
    api_keys: APIKeys,
    media_type: str,
    provider_options: Optional[Dict[str, Any]] = None,
) -> BaseProvider:
    """Instantiate ``provider`` and check that it can produce ``media_type``."""
    if not ProviderRegistry.is_registered(provider):
        raise UnsupportedProviderError(f"Unsupported provider: {provider}")

    provider_cls = ProviderRegistry.get(provider)
    if media_type not in provider_cls.capabilities:
        raise UnsupportedProviderError(f"Unsupported provider: {provider}")

    api_key = api_keys.get(provider)
    if not api_key:
        raise MissingAPIKeyError(
            f"No API key configured for {provider_cls.display_name or provider}."
        )
    return ProviderRegistry.create(provider, api_key=api_key, **(provider_options or {}))


def generate_image(
    prompt: str,
    api_keys: APIKeys,
    provider: str,
    on_progress: ProgressCallback = _ignore_progress,
    provider_options: Optional[Dict[str, Any]] = None,
) -> str:
    """Generate one image with ``provider`` and return its URL."""
    on_progress(GenerationProgress(progress=10, stage="Initializing generation..."))
    backend = build_provider(provider, api_keys, "image", provider_options)
    return backend.generate_image(prompt, on_progress)


def generate_video(
    prompt: str,
    api_keys: APIKeys,
    provider: str,
    on_progress: ProgressCallback = _ignore_progress,
    provider_options: Optional[Dict[str, Any]] = None,
) -> str:
    """Generate one video with ``provider`` and return its URL."""
    on_progress(GenerationProgress(progress=10, stage="Initializing video generation..."))
    backend = build_provider(provider, api_keys, "video", provider_options)
    return backend.generate_video(prompt, on_progress)


def generate_batch(
    prompt: str,
    api_keys: APIKeys,
    provider: str,
    count: int,
    on_progress: ProgressCallback = _ignore_progress,
    on_item: Optional[Callable[[int, str], None]] = None,
    provider_options: Optional[Dict[str, Any]] = None,
) -> List[str]:
    """Generate ``count`` images one after another.

    Item ``i`` reporting ``p`` percent is reported as
    ``(i * 100 + p) / count`` overall. The first failure stops the batch;
    items finished before it have already been handed to ``on_item``.

    Parameters:
        prompt: Text prompt shared by every item.
        api_keys: Configured keys.
        provider: Provider id.
        count: Number of images (>= 1).
        on_progress: Receives aggregated progress.
        on_item: Called with ``(index, url)`` as each item finishes.
        provider_options: Extra provider constructor arguments.

    Returns:
        URLs in submission order.
    """
    if count < 1:
        raise ValueError("count must be >= 1.")

    urls: List[str] = []
    for index in range(count):

        def item_progress(update: GenerationProgress, index: int = index) -> None:
            on_progress(
                GenerationProgress(
                    progress=(index * 100 + update.progress) / count,
                    stage=f"[{index + 1}/{count}] {update.stage}",
                    preview_url=update.preview_url,
                )
            )

        url = generate_image(prompt, api_keys, provider, item_progress, provider_options)
        urls.append(url)
        if on_item is not None:
            on_item(index, url)

    return urls
