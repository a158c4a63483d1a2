"""
Risk Engine Configuration

Thresholds, weight tables and keyword tables for every scoring domain.

Everything here is frozen: extractors receive these structs at construction
and never mutate them. Environment overrides are read once through
python-dotenv, the same way the data source clients pick up their API keys.

BAND TABLES (inclusive lower bound, first match wins):
- Risk score:      >=80 critical, >=60 high, >=40 medium, else low
- News relevance:  >=90 critical, >=75 high, >=50 medium, else low
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class RiskBand(Enum):
    """Ordinal classification of a score."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _BAND_ORDER.index(self)


_BAND_ORDER = [RiskBand.LOW, RiskBand.MEDIUM, RiskBand.HIGH, RiskBand.CRITICAL]


class SubjectType(Enum):
    """What a RiskAssessment is about."""
    VENDOR = "vendor"
    TRANSACTION_BATCH = "transaction-batch"
    DOCUMENT = "document"
    NEWS_ITEM = "news-item"


# (lower bound, band) pairs, highest first
RISK_BANDS = (
    (80, RiskBand.CRITICAL),
    (60, RiskBand.HIGH),
    (40, RiskBand.MEDIUM),
)

NEWS_BANDS = (
    (90, RiskBand.CRITICAL),
    (75, RiskBand.HIGH),
    (50, RiskBand.MEDIUM),
)


@dataclass(frozen=True)
class ScoringProfile:
    """Base score, weight table and band table for one scoring domain."""
    name: str
    base_score: int
    weights: dict[str, int]
    bands: tuple = RISK_BANDS

    def weight(self, signal_name: str) -> int:
        return self.weights.get(signal_name, 0)


VENDOR_PROFILE = ScoringProfile(
    name="vendor",
    base_score=30,
    weights={
        "high_volume": 10,
        "high_value": 15,
        "rapid_sequence": 20,
        "incomplete_documentation": 10,
        "price_above_market": 15,
        "unknown_vendor": 25,
    },
)

TRANSACTION_BATCH_PROFILE = ScoringProfile(
    name="transaction-batch",
    base_score=30,
    weights={
        "high_volume": 10,
        "high_value": 15,
        "rapid_sequence": 20,
        "price_above_market": 15,
        "unattributed_transactions": 25,
    },
)

DOCUMENT_PROFILE = ScoringProfile(
    name="document",
    base_score=20,
    weights={
        "duplicate_identifier_risk": 30,
        "price_anomaly_risk": 25,
        "vendor_risk": 20,
        "missing_fields_risk": 15,
        "high_value_document": 15,
        "rapid_sequence": 20,
    },
)

NEWS_KEYWORDS = (
    "fraud",
    "scam",
    "corruption",
    "embezzlement",
    "bribery",
    "money laundering",
    "investigation",
    "probe",
    "audit",
    "violation",
)

NEWS_PROFILE = ScoringProfile(
    name="news-item",
    base_score=50,
    weights={f"keyword:{kw}": 10 for kw in NEWS_KEYWORDS},
    bands=NEWS_BANDS,
)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


@dataclass(frozen=True)
class VendorThresholds:
    """Cut-offs used by the vendor, transaction-batch and document extractors."""
    high_volume_count: int = 20
    large_amount: float = 10_000_000  # 1 crore
    rapid_window_days: float = 7
    rapid_sample_size: int = 3
    min_documents_on_file: int = 2
    market_premium_threshold: float = 0.15
    document_high_value: float = 500_000
    min_extraction_confidence: float = 70

    @classmethod
    def from_env(cls) -> "VendorThresholds":
        """Defaults overridden by AUDIT_* environment variables."""
        defaults = cls()
        return cls(
            high_volume_count=_env_int("AUDIT_HIGH_VOLUME_COUNT", defaults.high_volume_count),
            large_amount=_env_float("AUDIT_LARGE_AMOUNT", defaults.large_amount),
            rapid_window_days=_env_float("AUDIT_RAPID_WINDOW_DAYS", defaults.rapid_window_days),
            min_documents_on_file=_env_int("AUDIT_MIN_DOCUMENTS", defaults.min_documents_on_file),
            market_premium_threshold=_env_float(
                "AUDIT_MARKET_PREMIUM", defaults.market_premium_threshold
            ),
            document_high_value=_env_float("AUDIT_DOCUMENT_HIGH_VALUE", defaults.document_high_value),
        )


@dataclass(frozen=True)
class PatternThresholds:
    """Cut-offs for the batch pattern detector."""
    department_count: int = 2  # strictly more than this many departments
    department_amount: float = 500_000
    rapid_min_transactions: int = 5
    rapid_average_gap_days: float = 2.0


# Category rules are checked in order; the first rule with any keyword present wins.
NEWS_CATEGORY_RULES = (
    ("fraud", ("fraud", "scam", "embezzlement")),
    ("corruption", ("corruption", "bribery", "kickback")),
    ("investigation", ("investigation", "probe", "arrest")),
    ("government-spending", ("spending", "budget", "taxpayer")),
    ("policy", ("policy", "regulation", "reform")),
)

NEWS_COUNTRY_PATTERNS = (
    ("India", r"india|delhi|mumbai|bangalore|chennai|kolkata|modi|rupee|crore|lakh"),
    ("United States", r"usa|united states|washington|new york|dollar|fbi|sec|doj"),
    ("United Kingdom", r"uk|britain|london|pound|sterling|parliament"),
    ("China", r"china|beijing|shanghai|yuan|chinese"),
    ("Brazil", r"brazil|brasilia|rio|sao paulo|real"),
    ("Germany", r"germany|berlin|euro|bundesbank"),
    ("France", r"france|paris|euro|french"),
    ("Australia", r"australia|sydney|melbourne|canberra"),
    ("Russia", r"russia|moscow|putin|ruble"),
    ("Japan", r"japan|tokyo|yen|japanese"),
)

NEWS_TAGS = (
    "fraud",
    "corruption",
    "audit",
    "investigation",
    "compliance",
    "government",
    "financial",
    "regulatory",
    "enforcement",
    "penalty",
    "fine",
    "scandal",
    "probe",
    "arrest",
)

NEWS_SECTORS = (
    ("banking", ("bank", "financial")),
    ("healthcare", ("health", "medical")),
    ("infrastructure", ("infrastructure", "construction")),
    ("education", ("education", "school")),
)


@dataclass(frozen=True)
class NewsTables:
    """Keyword, category, country, tag and sector tables for news scoring."""
    keywords: tuple = NEWS_KEYWORDS
    category_rules: tuple = NEWS_CATEGORY_RULES
    default_category: str = "compliance"
    country_patterns: tuple = field(
        default_factory=lambda: tuple(
            (country, re.compile(pattern, re.IGNORECASE))
            for country, pattern in NEWS_COUNTRY_PATTERNS
        )
    )
    default_country: str = "International"
    tags: tuple = NEWS_TAGS
    max_tags: int = 5
    default_tags: tuple = ("financial news", "business")
    sectors: tuple = NEWS_SECTORS


@dataclass(frozen=True)
class Settings:
    """Process-wide settings read from the environment."""
    news_api_key: Optional[str]
    news_api_base: str
    log_level: str
    max_workers: Optional[int]
    vendor_thresholds: VendorThresholds


def get_settings() -> Settings:
    """Build Settings from the current environment (and any .env file)."""
    workers = os.getenv("AUDIT_MAX_WORKERS", "").strip()
    return Settings(
        news_api_key=os.getenv("NEWS_API_KEY"),
        news_api_base=os.getenv("NEWS_API_BASE", "https://newsapi.org/v2"),
        log_level=os.getenv("AUDIT_LOG_LEVEL", "INFO").upper(),
        max_workers=int(workers) if workers.isdigit() and int(workers) > 0 else None,
        vendor_thresholds=VendorThresholds.from_env(),
    )
