"""
Record Schemas

Typed records handed to the risk engine by whatever fetched them (database
query, CSV import, news API). Every field that the upstream store may omit is
Optional; ``from_dict`` never raises on malformed input and substitutes the
same defaults the extractors expect (missing numbers -> 0, missing text -> None).
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional


def _pick(data: dict, *keys: str) -> Any:
    """Return the first present, non-empty value among equivalent keys."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def to_float(value: Any) -> float:
    number = to_optional_float(value)
    return number if number is not None else 0.0


def to_optional_float(value: Any) -> Optional[float]:
    """Parse a number, allowing thousands separators; None for blanks, junk, inf and nan."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(str(value).replace(",", "").strip())
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def to_optional_int(value: Any) -> Optional[int]:
    number = to_optional_float(value)
    return int(number) if number is not None else None


def to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO dates and datetimes; naive UTC, None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.strptime(text[:10], "%Y-%m-%d")
            except ValueError:
                return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


@dataclass(frozen=True)
class Transaction:
    """A single payment to a vendor."""
    transaction_id: str
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None
    amount: float = 0.0
    department: Optional[str] = None
    transaction_date: Optional[datetime] = None
    market_reference: Optional[float] = None  # comparable market price for the same goods

    @property
    def day(self) -> Optional[date]:
        return self.transaction_date.date() if self.transaction_date else None

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "Transaction":
        return cls(
            transaction_id=to_text(_pick(data, "transaction_id", "id")) or f"txn-{index}",
            vendor_id=to_text(_pick(data, "vendor_id", "vendorId")),
            vendor_name=to_text(_pick(data, "vendor_name", "vendorName", "vendor")),
            amount=to_float(_pick(data, "amount", "total_amount")),
            department=to_text(_pick(data, "department", "dept")),
            transaction_date=to_datetime(_pick(data, "transaction_date", "date", "transactionDate")),
            market_reference=to_optional_float(
                _pick(data, "market_reference", "market_price", "marketReference")
            ),
        )


@dataclass(frozen=True)
class VendorProfile:
    """A vendor's entry in the approved vendor registry."""
    vendor_id: str
    name: Optional[str] = None
    registration_number: Optional[str] = None  # GST / tax registration
    documents_on_file: Optional[int] = None
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "VendorProfile":
        return cls(
            vendor_id=to_text(_pick(data, "vendor_id", "id", "vendorId")) or f"vendor-{index}",
            name=to_text(_pick(data, "name", "vendor_name")),
            registration_number=to_text(
                _pick(data, "registration_number", "gst_number", "tax_id", "taxId")
            ),
            documents_on_file=to_optional_int(_pick(data, "documents_on_file", "documentsOnFile")),
            category=to_text(data.get("category")),
        )


@dataclass(frozen=True)
class DocumentRecord:
    """Structured fields already extracted from an uploaded document."""
    document_id: str
    document_number: Optional[str] = None
    document_type: Optional[str] = None
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None
    amount: Optional[float] = None
    document_date: Optional[datetime] = None
    # Flags computed upstream by the extraction step
    duplicate_risk: bool = False
    price_anomaly_risk: bool = False
    vendor_risk: bool = False
    missing_fields_risk: bool = False
    confidence: Optional[float] = None  # extraction confidence, percent

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "DocumentRecord":
        flags = data.get("fraud_indicators") or data.get("fraudIndicators") or {}
        if not isinstance(flags, dict):
            flags = {}
        merged = {**flags, **data}
        return cls(
            document_id=to_text(_pick(data, "document_id", "id")) or f"doc-{index}",
            document_number=to_text(_pick(data, "document_number", "documentNumber")),
            document_type=to_text(_pick(data, "document_type", "documentType")),
            vendor_id=to_text(_pick(data, "vendor_id", "vendorId")),
            vendor_name=to_text(_pick(data, "vendor_name", "vendorName")),
            amount=to_optional_float(_pick(data, "amount", "total_amount", "totalAmount")),
            document_date=to_datetime(_pick(data, "document_date", "date")),
            duplicate_risk=to_bool(_pick(merged, "duplicate_risk", "duplicateRisk")),
            price_anomaly_risk=to_bool(_pick(merged, "price_anomaly_risk", "priceAnomalyRisk")),
            vendor_risk=to_bool(_pick(merged, "vendor_risk", "vendorRisk")),
            missing_fields_risk=to_bool(_pick(merged, "missing_fields_risk", "missingFieldsRisk")),
            confidence=to_optional_float(data.get("confidence")),
        )


@dataclass(frozen=True)
class NewsArticle:
    """A news item as returned by the news feed."""
    title: str = ""
    description: str = ""
    source: str = "Unknown Source"
    url: Optional[str] = None
    published_at: Optional[datetime] = None
    image_url: Optional[str] = None

    @property
    def article_id(self) -> str:
        return self.url or self.title

    @property
    def text(self) -> str:
        return f"{self.title} {self.description}"

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "NewsArticle":
        source = data.get("source")
        if isinstance(source, dict):
            source = source.get("name")
        return cls(
            title=to_text(data.get("title")) or "",
            description=to_text(_pick(data, "description", "summary")) or "",
            source=to_text(source) or "Unknown Source",
            url=to_text(data.get("url")),
            published_at=to_datetime(_pick(data, "publishedAt", "published_at", "date")),
            image_url=to_text(data.get("urlToImage")),
        )
