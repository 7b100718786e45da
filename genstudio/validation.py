"""
Configuration and request validation.

Checks a :class:`StudioConfig` before a session starts and the
parameters of individual generation requests.
"""

from __future__ import annotations

from typing import List

from genstudio.config import StudioConfig
from genstudio.generation.registry import ProviderRegistry

MEDIA_TYPES = ("image", "video")


def validate_config(config: StudioConfig) -> List[str]:
    """Validate a studio configuration and return a list of issues.

    Parameters:
        config: The configuration to validate.

    Returns:
        A list of messages. Empty list means valid.
    """
    issues: List[str] = []

    if not config.store_path:
        issues.append("store_path cannot be empty.")

    if not config.output_dir:
        issues.append("output_dir cannot be empty.")

    if config.image_cost < 0 or config.video_cost < 0:
        issues.append("Generation costs must be >= 0.")

    if config.replicate_poll_interval <= 0 or config.runway_poll_interval <= 0:
        issues.append("Poll intervals must be > 0 seconds.")

    if config.max_poll_attempts < 1:
        issues.append("max_poll_attempts must be >= 1.")

    if config.request_timeout <= 0:
        issues.append("request_timeout must be > 0 seconds.")

    for provider in config.provider_params:
        if not ProviderRegistry.is_registered(provider):
            issues.append(
                f"Unknown provider '{provider}' in provider_params. "
                f"Available: {ProviderRegistry.available()}"
            )

    return issues


def validate_or_raise(config: StudioConfig) -> None:
    """Validate config and raise ``ValueError`` if issues are found."""
    issues = validate_config(config)
    if issues:
        msg = "Configuration validation failed:\n" + "\n".join(
            f"  - {issue}" for issue in issues
        )
        raise ValueError(msg)


def validate_request(prompt: str, media_type: str, count: int) -> None:
    """Raise ``ValueError`` for an unusable generation request."""
    if not prompt or not prompt.strip():
        raise ValueError("Prompt cannot be empty.")
    if media_type not in MEDIA_TYPES:
        raise ValueError(f"Unknown media type '{media_type}'. Supported: {list(MEDIA_TYPES)}")
    if count < 1:
        raise ValueError("count must be >= 1.")
    if media_type == "video" and count != 1:
        raise ValueError("Videos are generated one at a time.")
