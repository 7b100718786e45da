"""
GenStudio Example – Custom Provider Integration.

Shows how to plug another hosted generation API into GenStudio:

    1. Subclass ``BaseProvider``
    2. Register with ``@ProviderRegistry.register("your-name")``
    3. Implement ``generate_image()`` and/or ``generate_video()``
    4. Report progress through the ``on_progress`` callback

This example uses a placeholder service that answers instantly.
Replace the body of ``generate_image`` with real HTTP calls made
through ``self.session``.

Usage:
    python examples/custom_provider_example.py
"""

from genstudio.generation import BaseProvider, GenerationProgress, ProviderRegistry

# ── Step 1: Define your provider ─────────────────────────────────────────────


@ProviderRegistry.register("placeholder")
class PlaceholderProvider(BaseProvider):
    """Returns a placeholder image URL for any prompt."""

    display_name = "Placeholder"
    capabilities = frozenset({"image"})

    def generate_image(self, prompt, on_progress=lambda update: None):
        on_progress(GenerationProgress(progress=20, stage="Connecting to Placeholder..."))
        # In a real implementation:
        # response = self._post_json("https://api.example.com/v1/images", {"prompt": prompt})
        # self._raise_for_response(response, "error")
        # return response.json()["url"]
        on_progress(GenerationProgress(progress=95, stage="Finalizing..."))
        return f"https://placehold.co/1024x1024?text={prompt.replace(' ', '+')}"


# ── Step 2: Use it ───────────────────────────────────────────────────────────


def main():
    print("Registered providers:", ProviderRegistry.available())

    provider = ProviderRegistry.create("placeholder", api_key="not-needed")
    print(provider)

    url = provider.generate_image(
        "a paper boat",
        on_progress=lambda u: print(f"  [{u.progress:3.0f}%] {u.stage}"),
    )
    print("Result:", url)


if __name__ == "__main__":
    main()
