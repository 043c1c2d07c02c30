"""Module index handling: fetching the AVM CSV and reading it into work items."""

from .fetch import DEFAULT_CSV_URL, download_csv, download_csv_if_needed
from .loader import load_work_items

__all__ = ["DEFAULT_CSV_URL", "download_csv", "download_csv_if_needed", "load_work_items"]
