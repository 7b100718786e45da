"""
Studio configuration for GenStudio.

Defines the :class:`StudioConfig` dataclass that holds the settings of a
studio session, including:
    - Local state location and output directory
    - Polling interval and attempt budget per provider
    - Per-item generation costs charged against spending limits
    - Provider overrides (model, size, quality)
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

import yaml

from genstudio.storage import DEFAULT_STORE_PATH


@dataclass
class StudioConfig:
    """Complete configuration of a studio session.

    Attributes:
        store_path: JSON file holding keys, gallery, usage and limits.
        output_dir: Where ``gallery save`` writes media files.
        image_cost: Amount charged per generated image.
        video_cost: Amount charged per generated video.
        replicate_poll_interval: Seconds between Replicate status checks.
        runway_poll_interval: Seconds between RunwayML status checks.
        max_poll_attempts: Status checks before a job times out.
        request_timeout: Per-request HTTP timeout in seconds.
        recommender_model: Chat model used for template recommendations.
        provider_params: Extra constructor arguments per provider id.
    """

    # ── State ───────────────────────────────────────────────────────────
    store_path: str = DEFAULT_STORE_PATH
    output_dir: str = "./genstudio_output"

    # ── Billing ─────────────────────────────────────────────────────────
    image_cost: float = 0.10
    video_cost: float = 0.50

    # ── Polling ─────────────────────────────────────────────────────────
    replicate_poll_interval: float = 2.0
    runway_poll_interval: float = 3.0
    max_poll_attempts: int = 120
    request_timeout: float = 60.0

    # ── Models ──────────────────────────────────────────────────────────
    recommender_model: str = "gpt-4o-mini"
    provider_params: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        env_store = os.environ.get("GENSTUDIO_STORE")
        if env_store and self.store_path == DEFAULT_STORE_PATH:
            self.store_path = env_store

    @classmethod
    def from_yaml(cls, path: str) -> "StudioConfig":
        """Load configuration from a YAML file.

        Parameters:
            path: Path to the YAML configuration file.

        Returns:
            A fully initialized :class:`StudioConfig`.
        """
        with open(path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StudioConfig":
        """Create configuration from a plain dictionary."""
        known = set(cls.__dataclass_fields__)
        unknown = set(d) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**d)

    def to_yaml(self, path: str) -> None:
        """Serialize the config to a YAML file."""
        with open(path, "w", encoding="utf-8") as fh:
            yaml.dump(asdict(self), fh, default_flow_style=False, sort_keys=False)

    def provider_options(self, provider: str) -> Dict[str, Any]:
        """Constructor arguments for ``provider`` (polling, timeout, overrides)."""
        options: Dict[str, Any] = {"timeout": self.request_timeout}
        if provider == "replicate":
            options.update(
                poll_interval=self.replicate_poll_interval,
                max_attempts=self.max_poll_attempts,
            )
        elif provider == "runwayml":
            options.update(
                poll_interval=self.runway_poll_interval,
                max_attempts=self.max_poll_attempts,
            )
        options.update(self.provider_params.get(provider, {}))
        return options

    def cost_for(self, media_type: str) -> float:
        return self.video_cost if media_type == "video" else self.image_cost

    def summary(self) -> str:
        """Human-readable summary of the studio setup."""
        lines = [
            f"Store      : {os.path.expanduser(self.store_path)}",
            f"Output     : {self.output_dir}",
            f"Costs      : image ${self.image_cost:.2f} / video ${self.video_cost:.2f}",
            f"Polling    : replicate {self.replicate_poll_interval}s, "
            f"runway {self.runway_poll_interval}s, max {self.max_poll_attempts} attempts",
            f"Timeout    : {self.request_timeout}s",
            f"Recommender: {self.recommender_model}",
        ]
        return "\n".join(lines)


def load_config(path: Optional[str] = None) -> StudioConfig:
    """Load ``path`` if given, else ``GENSTUDIO_CONFIG``, else defaults."""
    path = path or os.environ.get("GENSTUDIO_CONFIG")
    if path:
        return StudioConfig.from_yaml(path)
    return StudioConfig()
