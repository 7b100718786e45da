"""
GenStudio Quick Start Example.

This script shows the minimal code needed to generate images with
whichever provider your API keys enable.

Prerequisites:
    1. Install GenStudio: ``pip install -e .``
    2. Set at least one image key, e.g. ``export OPENAI_API_KEY=sk-...``
       (or ``STABILITY_API_KEY`` / ``REPLICATE_API_TOKEN``)

Usage:
    python examples/quickstart.py

This will:
    1. Generate a batch of two images with the highest-priority provider
    2. Print the remaining monthly quota
    3. Save the images and export the gallery as JSON
"""

from genstudio import Studio, StudioConfig, describe_error
from genstudio.media import save_media
from genstudio.output import export_gallery_json


def show_progress(update):
    print(f"  [{update.progress:3.0f}%] {update.stage}")


def main():
    config = StudioConfig(
        store_path="./genstudio_output/quickstart_store.json",
        output_dir="./genstudio_output/quickstart",
    )
    print(config.summary())

    studio = Studio(config)

    # ── Generate ─────────────────────────────────────────────────────────
    try:
        items = studio.generate(
            "a lighthouse at dawn, oil painting",
            count=2,
            on_progress=show_progress,
        )
    except Exception as e:
        print(describe_error(e))
        return

    # ── Inspect results ──────────────────────────────────────────────────
    usage = studio.usage_summary()
    print(f"\nGenerated {len(items)} image(s) with {items[0].provider}")
    print(f"Remaining this month: {usage['remaining']} (resets {usage['reset_date']})")

    for item in items:
        print("  saved:", save_media(item, config.output_dir))

    export_gallery_json(studio.gallery.list(), f"{config.output_dir}/gallery.json")


if __name__ == "__main__":
    main()
