"""
Output.

Gallery export (JSON, CSV) and spending reports.
"""

from genstudio.output.export import (
    export_gallery_csv,
    export_gallery_json,
    load_gallery_json,
    spending_report,
)

__all__ = [
    "export_gallery_csv",
    "export_gallery_json",
    "load_gallery_json",
    "spending_report",
]
