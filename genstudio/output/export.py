"""
Export utilities for GenStudio.

Serializes the gallery to JSON and CSV, reloads exported galleries, and
summarizes spending history into a per-category table.
"""

from __future__ import annotations

import csv
import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, List

import pandas as pd

from genstudio.media import MediaItem
from genstudio.spending import SpendingHistory

GALLERY_FIELDS = [
    "id",
    "type",
    "provider",
    "prompt",
    "url",
    "created",
    "template_id",
    "style_id",
]


def export_gallery_json(
    items: List[MediaItem],
    output_path: str,
    indent: int = 2,
    include_metadata: bool = True,
) -> str:
    """Export gallery items to a JSON file.

    Parameters:
        items: Gallery items (newest first).
        output_path: Destination file path.
        indent: JSON indentation level.
        include_metadata: If True, add timestamp and version info.

    Returns:
        The absolute path of the saved file.
    """
    payload: Dict[str, Any] = {"items": [item.to_dict() for item in items]}
    if include_metadata:
        from genstudio import __version__

        payload = {
            "_metadata": {
                "framework": "GenStudio",
                "version": __version__,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "count": len(items),
            },
            **payload,
        }

    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent, ensure_ascii=False)

    abs_path = os.path.abspath(output_path)
    size_mb = os.path.getsize(abs_path) / (1024 * 1024)
    print(f"[GenStudio] Gallery saved to {abs_path} ({size_mb:.2f} MB)")
    return abs_path


def export_gallery_csv(items: List[MediaItem], output_path: str) -> str:
    """Export gallery items as a CSV table, one row per item.

    ``data:`` URLs are replaced by a short placeholder to keep rows small.

    Returns:
        The absolute path of the saved file, or ``""`` when there is nothing
        to export.
    """
    if not items:
        print("[GenStudio] No gallery items to export.")
        return ""

    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=GALLERY_FIELDS)
        writer.writeheader()
        for item in items:
            url = item.url
            if url.startswith("data:"):
                url = url.split(";", 1)[0] + ";base64,<inline>"
            writer.writerow(
                {
                    "id": item.id,
                    "type": item.type,
                    "provider": item.provider,
                    "prompt": item.prompt,
                    "url": url,
                    "created": datetime.fromtimestamp(item.timestamp).isoformat(
                        timespec="seconds"
                    ),
                    "template_id": item.template_id or "",
                    "style_id": item.style_id or "",
                }
            )

    abs_path = os.path.abspath(output_path)
    print(f"[GenStudio] CSV exported to {abs_path} ({len(items)} items)")
    return abs_path


def load_gallery_json(path: str) -> List[MediaItem]:
    """Load gallery items from a file written by :func:`export_gallery_json`.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file has invalid structure.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Gallery file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict) or "items" not in data:
        found = set(data.keys()) if isinstance(data, dict) else type(data).__name__
        raise ValueError(f"Invalid GenStudio gallery file. Expected key 'items'. Found: {found}")

    return [MediaItem.from_dict(d) for d in data["items"]]


def spending_report(history: List[SpendingHistory]) -> pd.DataFrame:
    """Summarize completed transactions per month and category.

    Returns:
        DataFrame with columns ``month``, ``category``, ``transactions``
        and ``total``, sorted by month then category.
    """
    columns = ["month", "category", "transactions", "total"]
    completed = [h for h in history if h.status == "completed"]
    if not completed:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(
        {
            "month": [h.date.strftime("%Y-%m") for h in completed],
            "category": [h.category for h in completed],
            "amount": [h.amount for h in completed],
        }
    )
    report = (
        df.groupby(["month", "category"])["amount"]
        .agg(transactions="count", total="sum")
        .reset_index()
        .sort_values(["month", "category"])
        .reset_index(drop=True)
    )
    report["total"] = report["total"].round(2)
    return report[columns]
