"""
NewsAPI Client

Fetches fraud- and audit-related news for relevance scoring.
API Documentation: https://newsapi.org/docs
"""

import os
from typing import Optional

import httpx

from .records import NewsArticle

BASE_URL = "https://newsapi.org/v2"

CATEGORY_QUERIES = {
    "all": [
        "government fraud corruption",
        "financial scam investigation",
        "audit compliance violation",
        "procurement fraud",
        "money laundering case",
    ],
    "fraud": ["fraud case", "financial fraud", "scam investigation", "embezzlement"],
    "corruption": ["corruption scandal", "bribery case", "political corruption", "government corruption"],
    "compliance": ["compliance violation", "regulatory fine", "audit report", "compliance failure"],
    "government-spending": ["government spending", "budget fraud", "public funds", "taxpayer money"],
    "investigation": ["investigation launched", "probe initiated", "CBI case", "enforcement directorate"],
    "policy": ["anti-corruption policy", "compliance regulation", "audit policy", "financial reform"],
}

COUNTRY_QUERIES = {
    "India": "India",
    "United States": "USA OR United States",
    "United Kingdom": "UK OR Britain",
    "China": "China",
    "Brazil": "Brazil",
    "South Africa": "South Africa",
    "European Union": "EU OR Europe",
}

MAX_ARTICLES = 15

# Served when the live feed is unavailable
FALLBACK_ARTICLES = [
    NewsArticle(
        title="Major Government Procurement Fraud Uncovered in Infrastructure Project",
        description=(
            "Investigators reveal systematic overbilling and fake invoices in a multi-billion "
            "infrastructure development project, leading to arrests of senior officials."
        ),
        source="Reuters",
        url="fallback://procurement-fraud",
    ),
    NewsArticle(
        title="Central Bank Implements New Anti-Money Laundering Compliance Framework",
        description=(
            "New regulations require enhanced due diligence and real-time transaction "
            "monitoring for all financial institutions."
        ),
        source="Financial Times",
        url="fallback://aml-framework",
    ),
    NewsArticle(
        title="Audit Report Reveals Irregularities in Public Health Spending",
        description=(
            "Government auditors find significant discrepancies in healthcare procurement, "
            "with potential losses exceeding $50 million."
        ),
        source="The Guardian",
        url="fallback://health-spending-audit",
    ),
]


def build_query(category: str = "all", country: str = "worldwide", query_index: int = 0) -> str:
    """Search string for a category, optionally narrowed to a country."""
    queries = CATEGORY_QUERIES.get(category) or CATEGORY_QUERIES["all"]
    query = queries[query_index % len(queries)]
    if country and country != "worldwide":
        query = f"{query} {COUNTRY_QUERIES.get(country, country)}"
    return query


def _usable(raw: dict) -> bool:
    title = raw.get("title")
    return bool(title and raw.get("description") and title != "[Removed]")


class NewsAPIClient:
    """Client for the NewsAPI.org REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or os.getenv("NEWS_API_KEY")
        self.client = httpx.AsyncClient(
            base_url=base_url or os.getenv("NEWS_API_BASE", BASE_URL),
            timeout=30.0,
            headers={"X-Api-Key": self.api_key} if self.api_key else {},
            transport=transport,
        )

    async def search_articles(
        self,
        category: str = "all",
        country: str = "worldwide",
        page_size: int = 20,
        query_index: int = 0,
    ) -> list[NewsArticle]:
        """
        Search recent articles for a category and country.

        Falls back to business top headlines when the search comes back empty.
        Raises httpx.HTTPStatusError on a non-2xx response.
        """
        response = await self.client.get("/everything", params={
            "q": build_query(category, country, query_index),
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": page_size,
        })
        response.raise_for_status()
        raw_articles = response.json().get("articles") or []

        if not raw_articles:
            response = await self.client.get("/top-headlines", params={
                "category": "business",
                "language": "en",
                "pageSize": MAX_ARTICLES,
            })
            response.raise_for_status()
            raw_articles = response.json().get("articles") or []

        usable = [a for a in raw_articles if isinstance(a, dict) and _usable(a)]
        return [NewsArticle.from_dict(a, i) for i, a in enumerate(usable[:MAX_ARTICLES])]

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
