"""
Provider registry – plugin system for generation backends.

Register a provider with::

    from genstudio.generation import ProviderRegistry, BaseProvider

    @ProviderRegistry.register("my-provider")
    class MyProvider(BaseProvider):
        capabilities = frozenset({"image"})

        def generate_image(self, prompt, on_progress=...):
            ...
"""

from __future__ import annotations

from typing import Any, Dict, Type

from genstudio.generation.base import BaseProvider


class ProviderRegistry:
    """Central registry for generation provider backends.

    Provides decorator-based registration and factory instantiation.
    """

    _registry: Dict[str, Type[BaseProvider]] = {}

    @classmethod
    def register(cls, name: str):
        """Decorator to register a provider class under a given name.

        Parameters:
            name: Identifier for the provider (e.g., ``"replicate"``).
        """

        def decorator(provider_cls: Type[BaseProvider]):
            if not issubclass(provider_cls, BaseProvider):
                raise TypeError(f"{provider_cls.__name__} must subclass BaseProvider")
            provider_cls.name = name.lower()
            cls._registry[name.lower()] = provider_cls
            return provider_cls

        return decorator

    @classmethod
    def create(cls, name: str, api_key: str | None = None, **kwargs: Any) -> BaseProvider:
        """Instantiate a registered provider by name.

        Parameters:
            name: Registered name of the provider.
            api_key: Credential forwarded to the constructor.
            **kwargs: Additional keyword arguments forwarded to the constructor.

        Raises:
            KeyError: If the name is not registered.
        """
        name_lower = name.lower()
        if name_lower not in cls._registry:
            available = ", ".join(sorted(cls._registry.keys()))
            raise KeyError(
                f"Provider '{name}' not found. "
                f"Available: [{available}]. "
                f"Register custom providers with "
                f"@ProviderRegistry.register('{name}')"
            )
        return cls._registry[name_lower](api_key=api_key, **kwargs)

    @classmethod
    def get(cls, name: str) -> Type[BaseProvider]:
        """Return the registered class for ``name`` (KeyError if missing)."""
        return cls._registry[name.lower()]

    @classmethod
    def available(cls) -> list[str]:
        """Return a sorted list of all registered provider names."""
        return sorted(cls._registry.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check whether a provider name is registered."""
        return name.lower() in cls._registry
