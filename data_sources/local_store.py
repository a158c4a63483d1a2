"""
Local Record Store

Loads an exported batch of records from disk so it can be scored offline.

Accepted formats:
- JSON object with any of "vendors", "transactions", "documents", "articles"
- JSON array (treated as transactions)
- CSV, one record per row (transactions unless kind="documents")
"""

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path

from .records import DocumentRecord, NewsArticle, Transaction, VendorProfile


class RecordLoadError(ValueError):
    """Raised when a batch file cannot be read or has an unknown shape."""


@dataclass
class RecordBatch:
    """Records exported from the dashboard database."""
    vendors: dict[str, VendorProfile] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)
    documents: list[DocumentRecord] = field(default_factory=list)
    articles: list[NewsArticle] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RecordBatch":
        vendors = {}
        for i, row in enumerate(_rows(data, "vendors")):
            profile = VendorProfile.from_dict(row, i)
            vendors[profile.vendor_id] = profile
        return cls(
            vendors=vendors,
            transactions=[Transaction.from_dict(r, i) for i, r in enumerate(_rows(data, "transactions"))],
            documents=[DocumentRecord.from_dict(r, i) for i, r in enumerate(_rows(data, "documents"))],
            articles=[NewsArticle.from_dict(r, i) for i, r in enumerate(_rows(data, "articles"))],
        )


def _rows(data: dict, key: str) -> list[dict]:
    rows = data.get(key) or []
    if not isinstance(rows, list):
        raise RecordLoadError(f"'{key}' must be a list, got {type(rows).__name__}")
    return [row for row in rows if isinstance(row, dict)]


def load_batch(path, kind: str = "transactions") -> RecordBatch:
    """Read a JSON or CSV export into a RecordBatch."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RecordLoadError(f"Cannot read {path}: {e}") from e

    if path.suffix.lower() == ".csv":
        rows = list(csv.DictReader(text.splitlines()))
        return RecordBatch.from_dict({kind: rows})

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RecordLoadError(f"{path} is not valid JSON: {e}") from e

    if isinstance(data, list):
        data = {kind: data}
    if not isinstance(data, dict):
        raise RecordLoadError(f"{path} must contain a JSON object or array")
    return RecordBatch.from_dict(data)
