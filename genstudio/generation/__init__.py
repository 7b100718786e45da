"""
Media generation.

Contains the abstract provider base class, the registry system for
pluggable provider backends, the job poller, and the built-in
OpenAI, Stability AI, Replicate and RunwayML providers.
"""

from genstudio.generation.base import (
    BaseProvider,
    GenerationError,
    GenerationProgress,
    GenerationTimeoutError,
    MissingAPIKeyError,
    NoProviderConfiguredError,
    ProviderError,
    UnsupportedProviderError,
)
from genstudio.generation.openai_images import OpenAIImageProvider
from genstudio.generation.registry import ProviderRegistry
from genstudio.generation.replicate import ReplicateProvider
from genstudio.generation.runway import RunwayProvider
from genstudio.generation.service import generate_batch, generate_image, generate_video
from genstudio.generation.stability import StabilityProvider

__all__ = [
    "BaseProvider",
    "GenerationError",
    "GenerationProgress",
    "GenerationTimeoutError",
    "MissingAPIKeyError",
    "NoProviderConfiguredError",
    "OpenAIImageProvider",
    "ProviderError",
    "ProviderRegistry",
    "ReplicateProvider",
    "RunwayProvider",
    "StabilityProvider",
    "UnsupportedProviderError",
    "generate_batch",
    "generate_image",
    "generate_video",
]
