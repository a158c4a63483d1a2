"""
News Signal Extraction

Relevance of a news article to fraud monitoring. Each fraud keyword found
in the title or description is one signal worth 10 points on top of a base
of 50, so relevance = min(100, 50 + 10 * matches).

Also derives the article's category, country, tags and affected sectors
from fixed keyword tables. Matching is case-insensitive substring search.
"""

from dataclasses import dataclass
from typing import Optional

from data_sources.records import NewsArticle
from risk_config import NEWS_PROFILE, NewsTables, ScoringProfile

from .signals import Signal, make_signal


@dataclass(frozen=True)
class ArticleContext:
    """Descriptive classification of an article (does not affect the score)."""
    category: str
    country: str
    tags: tuple
    affected_sectors: tuple


class NewsSignalExtractor:
    """Keyword signals and classification for news items."""

    def __init__(self, tables: Optional[NewsTables] = None, profile: ScoringProfile = NEWS_PROFILE):
        self.tables = tables or NewsTables()
        self.profile = profile

    def extract(self, article: NewsArticle) -> list[Signal]:
        text = article.text.lower()
        return [
            make_signal(
                self.profile,
                f"keyword:{keyword}",
                keyword in text,
                detail=f"Mentions '{keyword}'" if keyword in text else "",
            )
            for keyword in self.tables.keywords
        ]

    def categorize(self, text: str) -> str:
        text = text.lower()
        for category, keywords in self.tables.category_rules:
            if any(kw in text for kw in keywords):
                return category
        return self.tables.default_category

    def extract_country(self, text: str) -> str:
        for country, pattern in self.tables.country_patterns:
            if pattern.search(text):
                return country
        return self.tables.default_country

    def extract_tags(self, text: str) -> tuple:
        text = text.lower()
        tags = [tag for tag in self.tables.tags if tag in text][: self.tables.max_tags]
        return tuple(tags) if tags else tuple(self.tables.default_tags)

    def affected_sectors(self, text: str) -> tuple:
        text = text.lower()
        sectors = ["government"]
        for sector, keywords in self.tables.sectors:
            if any(kw in text for kw in keywords):
                sectors.append(sector)
        return tuple(sectors)

    def context(self, article: NewsArticle) -> ArticleContext:
        text = article.text
        return ArticleContext(
            category=self.categorize(text),
            country=self.extract_country(text),
            tags=self.extract_tags(text),
            affected_sectors=self.affected_sectors(text),
        )
