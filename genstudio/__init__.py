"""
GenStudio: AI image and video generation across hosted providers.

A small orchestration layer over third-party generation APIs
(OpenAI Images, Stability AI, Replicate, RunwayML). GenStudio picks a
provider from the configured API keys, submits the job, polls
asynchronous jobs until they finish, and records the result in a local
gallery together with usage and spending.

Modules:
    - keys: Provider catalogue, API keys and provider priority
    - generation: Pluggable provider backends, job poller, batch runner
    - studio: End-to-end orchestration with quota and spending gates
    - templates / recommender: Video templates, styles and recommendations
    - output: Gallery export and spending reports

Quick Start:
    >>> from genstudio import Studio
    >>> studio = Studio()
    >>> items = studio.generate("a lighthouse at dawn, oil painting")
    >>> items[0].url
"""

__version__ = "0.1.0"
__author__ = "GenStudio Team"

from genstudio.config import StudioConfig
from genstudio.generation.registry import ProviderRegistry
from genstudio.studio import Studio, describe_error

__all__ = [
    "ProviderRegistry",
    "Studio",
    "StudioConfig",
    "describe_error",
    "__version__",
]
