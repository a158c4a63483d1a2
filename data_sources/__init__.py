"""Record schemas and record providers for the risk engine."""

from .records import Transaction, VendorProfile, DocumentRecord, NewsArticle
from .local_store import RecordBatch, RecordLoadError, load_batch
from .news_api import NewsAPIClient, FALLBACK_ARTICLES, build_query

__all__ = [
    "Transaction",
    "VendorProfile",
    "DocumentRecord",
    "NewsArticle",
    "RecordBatch",
    "RecordLoadError",
    "load_batch",
    "NewsAPIClient",
    "FALLBACK_ARTICLES",
    "build_query",
]
