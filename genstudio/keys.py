"""
API keys and the static provider catalogue.

Describes which external API key enables which capability and picks
one provider per request using a fixed priority order:

    image: openai -> stabilityai -> replicate
    video: runwayml -> replicate
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from typing import Dict, List, Optional, Tuple

# ── Provider catalogue ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProviderInfo:
    """Static metadata for one provider."""

    name: str
    description: str
    features: Tuple[str, ...]
    capabilities: frozenset
    required: bool = False
    env_var: str = ""


PROVIDERS: Dict[str, ProviderInfo] = {
    "openai": ProviderInfo(
        name="OpenAI",
        description="DALL-E 3 for high-quality image generation",
        features=("Image Generation", "Advanced Prompts"),
        capabilities=frozenset({"image"}),
        env_var="OPENAI_API_KEY",
    ),
    "stabilityai": ProviderInfo(
        name="Stability AI",
        description="Stable Diffusion for versatile image creation",
        features=("Image Generation", "Style Transfer"),
        capabilities=frozenset({"image"}),
        env_var="STABILITY_API_KEY",
    ),
    "replicate": ProviderInfo(
        name="Replicate",
        description="Access to various AI models including image and video",
        features=("Image Generation", "Video Generation", "Background Removal"),
        capabilities=frozenset({"image", "video"}),
        env_var="REPLICATE_API_TOKEN",
    ),
    "runwayml": ProviderInfo(
        name="RunwayML",
        description="Gen-2 for professional video generation",
        features=("Video Generation", "Advanced Effects"),
        capabilities=frozenset({"video"}),
        env_var="RUNWAYML_API_KEY",
    ),
}

PROVIDER_PRIORITY: Dict[str, Tuple[str, ...]] = {
    "image": ("openai", "stabilityai", "replicate"),
    "video": ("runwayml", "replicate"),
}

MIN_KEY_LENGTH = {
    "openai": 20,
    "stabilityai": 20,
    "replicate": 30,
    "runwayml": 20,
}

_KEY_LABELS = {
    "openai": "OpenAI key",
    "stabilityai": "Stability AI key",
    "replicate": "Replicate token",
    "runwayml": "RunwayML key",
}


# ── Keys ─────────────────────────────────────────────────────────────────────


@dataclass
class APIKeys:
    """Configured API keys, one optional value per provider."""

    openai: Optional[str] = None
    stabilityai: Optional[str] = None
    replicate: Optional[str] = None
    runwayml: Optional[str] = None

    @classmethod
    def from_env(cls) -> "APIKeys":
        """Read keys from the environment (``.env`` is loaded by callers)."""
        values = {}
        for provider, info in PROVIDERS.items():
            value = os.environ.get(info.env_var, "").strip()
            values[provider] = value or None
        return cls(**values)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Optional[str]]]) -> "APIKeys":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (d or {}).items() if k in known})

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)

    def get(self, provider: str) -> Optional[str]:
        if provider not in PROVIDERS:
            return None
        return getattr(self, provider)

    def merge(self, other: "APIKeys") -> "APIKeys":
        """Return a copy where non-empty values from ``other`` win."""
        merged = self.to_dict()
        for provider, value in other.to_dict().items():
            if value:
                merged[provider] = value
        return APIKeys(**merged)


@dataclass
class APIKeyStatus:
    provider: str
    is_configured: bool
    last_validated: Optional[float] = None


def get_configured_providers(keys: APIKeys) -> List[APIKeyStatus]:
    """Return one status entry per catalogue provider, in catalogue order."""
    return [
        APIKeyStatus(provider=provider, is_configured=bool(keys.get(provider)))
        for provider in PROVIDERS
    ]


def has_any_provider(keys: APIKeys) -> bool:
    return any(keys.to_dict().values())


def provider_for_feature(keys: APIKeys, feature: str) -> Optional[str]:
    """Pick the highest-priority configured provider for ``feature``.

    Parameters:
        keys: Configured API keys.
        feature: ``"image"`` or ``"video"``.

    Returns:
        The provider id, or None when nothing suitable is configured.
    """
    for provider in PROVIDER_PRIORITY.get(feature, ()):
        if keys.get(provider):
            return provider
    return None


def mask_api_key(key: Optional[str]) -> str:
    """Mask a key for display, keeping the first and last four characters."""
    if not key or len(key) < 8:
        return "•" * 8
    return f"{key[:4]}{'•' * min(20, len(key) - 8)}{key[-4:]}"


def validate_api_key_format(provider: str, key: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Check a key against the provider's known format.

    Returns:
        ``(valid, error_message)``; the message is None when valid.
    """
    if not key or not key.strip():
        return False, "API key cannot be empty"

    if provider == "openai" and not key.startswith("sk-"):
        return False, 'OpenAI keys should start with "sk-"'

    min_length = MIN_KEY_LENGTH.get(provider)
    if min_length is not None and len(key) < min_length:
        return False, f"{_KEY_LABELS[provider]} appears too short"

    return True, None
