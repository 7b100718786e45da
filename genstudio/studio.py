"""
GenStudio orchestrator.

Coordinates one generation request end to end:

    1. **Gates** – monthly quota, tier features, spending limits
    2. **Dispatch** – pick the highest-priority configured provider
    3. **Prompt** – merge video template and animation style
    4. **Run** – single job or sequential image batch with progress
    5. **Record** – gallery item, usage counter, spending transaction

All state lives in a :class:`KeyValueStore`. Failures propagate as
exceptions; :func:`describe_error` turns any of them into the message
shown to the user.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from genstudio import subscription as subs
from genstudio.config import StudioConfig
from genstudio.generation.base import (
    GenerationError,
    GenerationProgress,
    MissingAPIKeyError,
    NoProviderConfiguredError,
    ProgressCallback,
    _ignore_progress,
)
from genstudio.generation.registry import ProviderRegistry
from genstudio.generation.service import generate_batch, generate_image, generate_video
from genstudio.keys import (
    PROVIDERS,
    APIKeys,
    provider_for_feature,
    validate_api_key_format,
)
from genstudio.media import Gallery, MediaItem
from genstudio.spending import (
    SpendingLimitsConfig,
    add_spending_transaction,
    can_spend,
    check_and_reset_limits,
    create_spending_alert,
    create_spending_limit,
    refresh_period_totals,
)
from genstudio.storage import KeyValueStore
from genstudio.templates import combine_template_and_style, get_style, get_template
from genstudio.validation import validate_or_raise, validate_request

load_dotenv()

API_KEYS_KEY = "api-keys"
SUBSCRIPTION_KEY = "subscription-status"
SPENDING_KEY = "spending-limits"


class UsageLimitError(RuntimeError):
    """The subscription tier or monthly quota does not allow the request."""


class SpendingLimitError(RuntimeError):
    """A blocking spending limit would be exceeded by the request."""


class Studio:
    """Main entry point for generating media.

    Parameters:
        config: Studio configuration (defaults to :class:`StudioConfig`).
        store: Key/value store (defaults to one at ``config.store_path``).
    """

    def __init__(
        self,
        config: Optional[StudioConfig] = None,
        store: Optional[KeyValueStore] = None,
    ):
        self.config = config or StudioConfig()
        validate_or_raise(self.config)
        self.store = store or KeyValueStore(self.config.store_path)
        self.gallery = Gallery(self.store)

    # ── API keys ─────────────────────────────────────────────────────────

    def stored_api_keys(self) -> APIKeys:
        return APIKeys.from_dict(self.store.get(API_KEYS_KEY, {}))

    def api_keys(self) -> APIKeys:
        """Environment keys overridden by keys saved in the store."""
        return APIKeys.from_env().merge(self.stored_api_keys())

    def set_api_key(self, provider: str, key: str) -> None:
        """Validate and store ``key`` for ``provider``.

        Raises:
            KeyError: Unknown provider.
            ValueError: Key does not match the provider's format.
        """
        if provider not in PROVIDERS:
            raise KeyError(f"Unknown provider '{provider}'. Available: {list(PROVIDERS)}")
        key = key.strip()
        valid, error = validate_api_key_format(provider, key)
        if not valid:
            raise ValueError(error)
        stored = self.stored_api_keys().to_dict()
        stored[provider] = key
        self.store.set(API_KEYS_KEY, stored)
        print(f"[Studio] Saved {PROVIDERS[provider].name} API key")

    def remove_api_key(self, provider: str) -> None:
        if provider not in PROVIDERS:
            raise KeyError(f"Unknown provider '{provider}'. Available: {list(PROVIDERS)}")
        stored = self.stored_api_keys().to_dict()
        stored[provider] = None
        self.store.set(API_KEYS_KEY, stored)
        print(f"[Studio] Removed {PROVIDERS[provider].name} API key")

    # ── Subscription ─────────────────────────────────────────────────────

    def subscription(self) -> subs.SubscriptionStatus:
        """Current subscription, after applying a due monthly reset."""
        raw = self.store.get(SUBSCRIPTION_KEY)
        status = (
            subs.SubscriptionStatus.from_dict(raw) if raw else subs.initialize_subscription()
        )
        refreshed = subs.reset_monthly_usage(status)
        if raw is None or refreshed is not status:
            self._save_subscription(refreshed)
        return refreshed

    def _save_subscription(self, status: subs.SubscriptionStatus) -> None:
        self.store.set(SUBSCRIPTION_KEY, status.to_dict())

    def upgrade(self) -> subs.SubscriptionStatus:
        status = subs.upgrade(self.subscription())
        self._save_subscription(status)
        print("[Studio] Subscription upgraded to Pro")
        return status

    # ── Spending ─────────────────────────────────────────────────────────

    def spending(self, now: Optional[datetime] = None) -> SpendingLimitsConfig:
        """Spending state with due limit resets and current period totals."""
        config = SpendingLimitsConfig.from_dict(self.store.get(SPENDING_KEY))
        config = refresh_period_totals(config, now)
        config.limits = check_and_reset_limits(config.limits, now)
        return config

    def _save_spending(self, config: SpendingLimitsConfig) -> None:
        self.store.set(SPENDING_KEY, config.to_dict())

    def add_spending_limit(self, amount: float, period: str, block_on_exceed: bool = True):
        config = self.spending()
        limit = create_spending_limit(amount, period, block_on_exceed)
        config.limits.append(limit)
        self._save_spending(config)
        return limit

    def add_spending_alert(
        self,
        name: str,
        threshold: float,
        percentage: Optional[float] = None,
        limit_id: Optional[str] = None,
    ):
        """Attach an alert to a limit (``limit_id``) or to total monthly spend."""
        config = self.spending()
        alert = create_spending_alert(name, threshold, percentage)
        if limit_id is None:
            config.global_alerts.append(alert)
        else:
            for limit in config.limits:
                if limit.id == limit_id:
                    limit.alerts.append(alert)
                    break
            else:
                raise KeyError(f"Spending limit '{limit_id}' not found")
        self._save_spending(config)
        return alert

    def _charge(self, amount: float, description: str) -> None:
        config, triggered = add_spending_transaction(
            self.spending(), amount, description, "generation"
        )
        self._save_spending(config)
        for alert in triggered:
            print(f"[Studio] Spending alert '{alert.name}' triggered")

    # ── Generation ───────────────────────────────────────────────────────

    def generate(
        self,
        prompt: str,
        mode: str = "image",
        template_id: Optional[str] = None,
        style_id: Optional[str] = None,
        count: int = 1,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> List[MediaItem]:
        """Generate ``count`` images or one video from ``prompt``.

        Parameters:
            prompt: The user's prompt.
            mode: ``"image"`` or ``"video"``.
            template_id: Video template to merge into the prompt.
            style_id: Animation style to merge into the prompt.
            count: Number of images (video: always 1).
            on_progress: Receives :class:`GenerationProgress` updates.

        Returns:
            The new gallery items, in generation order.

        Raises:
            ValueError: Invalid request.
            UsageLimitError: Quota exhausted or feature not in tier.
            SpendingLimitError: A blocking spending limit would be exceeded.
            NoProviderConfiguredError: No key enables ``mode``.
            GenerationError: Provider failure or timeout.
        """
        validate_request(prompt, mode, count)
        status = self.subscription()

        template = get_template(template_id) if template_id else None
        style = get_style(style_id) if style_id else None

        if mode == "video" and not subs.has_feature(status, "video_generation"):
            raise UsageLimitError("Video generation requires a Pro subscription.")
        if status.tier != subs.PRO and (
            (template and template.pro_only) or (style and style.pro_only)
        ):
            raise UsageLimitError("This template or style requires a Pro subscription.")
        if not subs.can_generate(status, count):
            remaining = subs.remaining_generations(status)
            if remaining:
                reason = (
                    f"Requested {count} generations but only {remaining} "
                    f"remain this month."
                )
            else:
                reason = "Monthly generation limit reached."
            raise UsageLimitError(
                f"{reason} "
                f"Usage resets on {subs.reset_date_string(status.reset_date)}. "
                f"Upgrade to Pro for unlimited generations."
            )

        cost = self.config.cost_for(mode)
        allowed, reason = can_spend(self.spending().limits, cost * count)
        if not allowed:
            raise SpendingLimitError(reason)

        keys = self.api_keys()
        provider = provider_for_feature(keys, mode)
        if provider is None:
            raise NoProviderConfiguredError(
                f"No API key configured for {mode} generation. "
                f"Add one with `genstudio keys set <provider> <key>`."
            )

        final_prompt = prompt.strip()
        if mode == "video":
            final_prompt = combine_template_and_style(template, style, final_prompt)

        options = self.config.provider_options(provider)
        print(f"[Studio] Generating {count} {mode}(s) with {PROVIDERS[provider].name}")

        items: List[MediaItem] = []

        def record(url: str) -> None:
            item = MediaItem.create(
                mode,
                url,
                final_prompt,
                provider,
                template_id=template.id if template else None,
                style_id=style.id if style else None,
            )
            self.gallery.add(item)
            self._save_subscription(subs.record_generations(self.subscription(), 1))
            label = "Video" if mode == "video" else "Image"
            self._charge(cost, f"{label} Generation (x1)")
            items.append(item)

        if mode == "video":
            record(generate_video(final_prompt, keys, provider, on_progress, options))
        elif count == 1:
            record(generate_image(final_prompt, keys, provider, on_progress, options))
        else:
            generate_batch(
                final_prompt,
                keys,
                provider,
                count,
                on_progress=on_progress,
                on_item=lambda _index, url: record(url),
                provider_options=options,
            )

        on_progress(GenerationProgress(progress=100, stage="Complete!"))
        return items

    def remove_background(
        self,
        image_path: str,
        on_progress: ProgressCallback = _ignore_progress,
    ) -> MediaItem:
        """Remove the background of a local image (Pro, Stability AI key)."""
        if not subs.has_feature(self.subscription(), "background_removal"):
            raise UsageLimitError("Background removal requires a Pro subscription.")
        if not os.path.isfile(image_path):
            raise FileNotFoundError(f"Image not found: {image_path}")

        api_key = self.api_keys().get("stabilityai")
        if not api_key:
            raise MissingAPIKeyError("Background removal requires a Stability AI API key.")

        provider = ProviderRegistry.create(
            "stabilityai", api_key=api_key, **self.config.provider_options("stabilityai")
        )
        url = provider.remove_background(image_path, on_progress)
        item = self.gallery.add(
            MediaItem.create(
                "image",
                url,
                f"Background removed: {os.path.basename(image_path)}",
                "stabilityai",
            )
        )
        on_progress(GenerationProgress(progress=100, stage="Complete!"))
        return item

    def usage_summary(self) -> Dict[str, Any]:
        status = self.subscription()
        return {
            "tier": status.tier,
            "generations_used": status.generations_used,
            "generations_limit": status.generations_limit,
            "remaining": subs.remaining_generations(status),
            "usage_percentage": subs.usage_percentage(
                status.generations_used, status.generations_limit
            ),
            "reset_date": subs.reset_date_string(status.reset_date),
            "upgrade_suggested": subs.should_show_upgrade_prompt(status),
        }


# ── Error reporting ──────────────────────────────────────────────────────────

_CHECK_KEYS = "Please check your API keys and try again."


def describe_error(exc: BaseException) -> str:
    """Convert any failure into a single user-facing message."""
    if isinstance(exc, (UsageLimitError, SpendingLimitError, NoProviderConfiguredError)):
        return str(exc)
    if isinstance(exc, MissingAPIKeyError):
        return f"{exc} {_CHECK_KEYS}"
    if isinstance(exc, GenerationError):
        return f"Generation failed: {exc}. {_CHECK_KEYS}"
    if isinstance(exc, requests.RequestException):
        return f"Network error: {exc}. Please check your connection and try again."
    if isinstance(exc, KeyError):
        return str(exc.args[0]) if exc.args else "Not found"
    if isinstance(exc, (ValueError, FileNotFoundError)):
        return str(exc)
    return f"Unexpected error: {exc}"
