"""
Abstract base class for all media-generation provider backends.

Any provider integrated into GenStudio must subclass :class:`BaseProvider`
and implement :meth:`generate_image` and/or :meth:`generate_video` for the
media types it declares in ``capabilities``.

The framework calls a generate method once per requested item and expects
a URL (``https://...`` or ``data:image/png;base64,...``) in return.
Progress is reported through a :data:`ProgressCallback`.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Optional

import requests


@dataclass
class GenerationProgress:
    """A single progress update emitted while a job runs.

    Attributes:
        progress: Completion percentage in [0, 100].
        stage: Human-readable description of the current step.
        preview_url: Optional intermediate preview.
    """

    progress: float
    stage: str
    preview_url: Optional[str] = None


ProgressCallback = Callable[[GenerationProgress], None]


def _ignore_progress(update: GenerationProgress) -> None:
    pass


# ── Errors ───────────────────────────────────────────────────────────────────


class GenerationError(RuntimeError):
    """Base class for every failure raised by the generation layer."""


class ProviderError(GenerationError):
    """The provider rejected the request or reported a failed job."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class GenerationTimeoutError(GenerationError):
    """A polled job did not finish within the attempt budget."""


class UnsupportedProviderError(GenerationError):
    """The provider cannot produce the requested media type."""


class MissingAPIKeyError(GenerationError):
    """The chosen provider has no API key configured."""


class NoProviderConfiguredError(GenerationError):
    """No configured provider offers the requested capability."""


# ── Base provider ────────────────────────────────────────────────────────────


class BaseProvider(ABC):
    """Abstract base class for generation providers.

    Parameters:
        api_key: Credential for the provider's REST API.
        timeout: Per-request HTTP timeout in seconds.
        session: Optional ``requests.Session`` (tests inject fakes here).
        **kwargs: Additional provider-specific parameters.
    """

    name: str = ""
    display_name: str = ""
    capabilities: FrozenSet[str] = frozenset()

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        session: Optional[Any] = None,
        **kwargs: Any,
    ):
        if not api_key:
            raise MissingAPIKeyError(
                f"{self.display_name or self.name} API key is not configured."
            )
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.extra_params = kwargs

    def supports(self, media_type: str) -> bool:
        """Whether this provider can produce ``media_type`` (image | video)."""
        return media_type in self.capabilities

    def generate_image(
        self,
        prompt: str,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> str:
        """Generate a single image and return its URL.

        Parameters:
            prompt: The text prompt to use for generation.
            on_progress: Receives :class:`GenerationProgress` updates.

        Returns:
            URL or data URL of the generated image.
        """
        raise UnsupportedProviderError(f"Unsupported provider: {self.name}")

    def generate_video(
        self,
        prompt: str,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> str:
        """Generate a single video and return its URL."""
        raise UnsupportedProviderError(f"Unsupported provider: {self.name}")

    # ── HTTP helpers ─────────────────────────────────────────────────────

    def _auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _post_json(self, url: str, payload: dict, headers: Optional[dict] = None):
        merged = {"Content-Type": "application/json", **self._auth_headers()}
        merged.update(headers or {})
        return self.session.post(url, json=payload, headers=merged, timeout=self.timeout)

    def _get(self, url: str):
        return self.session.get(url, headers=self._auth_headers(), timeout=self.timeout)

    def _raise_for_response(self, response, message_key: str) -> None:
        """Raise :class:`ProviderError` for a non-2xx response.

        The message is read from ``message_key`` in the JSON body when the
        provider sends one, otherwise ``"<Provider> API error: <status>"``.
        """
        if response.ok:
            return
        message = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            value = body.get(message_key)
            if isinstance(value, dict):
                value = value.get("message")
            if isinstance(value, str) and value:
                message = value
        if not message:
            message = f"{self.display_name} API error: {response.status_code}"
        raise ProviderError(message, provider=self.name, status_code=response.status_code)

    def __repr__(self) -> str:
        caps = ", ".join(sorted(self.capabilities))
        return f"{self.__class__.__name__}(name='{self.name}', capabilities=[{caps}])"
