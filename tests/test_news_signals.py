"""
Tests for news relevance scoring and article classification.
"""

from __future__ import annotations

import pytest

from data_sources.records import NewsArticle
from detectors.news import NewsSignalExtractor
from risk_config import RiskBand, SubjectType
from risk_evidence import CROSS_CHECK_ENTITIES, TRACK_INVESTIGATION


@pytest.fixture
def extractor() -> NewsSignalExtractor:
    return NewsSignalExtractor()


def test_keyword_matches_add_ten_each(scorer):
    article = NewsArticle(
        title="Fraud investigation opens",
        description="Officials begin an audit of the ministry.",
        url="https://example.org/a",
    )
    insight = scorer.assess_news(article)
    assessment = insight.assessment

    assert assessment.subject_type is SubjectType.NEWS_ITEM
    assert assessment.subject_id == "https://example.org/a"
    assert [s.name for s in assessment.triggered_signals] == [
        "keyword:fraud",
        "keyword:investigation",
        "keyword:audit",
    ]
    assert assessment.score == 80
    assert assessment.band is RiskBand.HIGH
    assert insight.context.category == "fraud"
    assert assessment.recommendations == (CROSS_CHECK_ENTITIES, TRACK_INVESTIGATION)


def test_relevance_saturates_at_100(scorer):
    article = NewsArticle(title="Fraud and bribery probe: corruption scam")
    assessment = scorer.assess_news(article).assessment

    assert len(assessment.triggered_signals) == 5
    assert assessment.score == 100
    assert assessment.band is RiskBand.CRITICAL


def test_no_keywords_scores_base(scorer):
    insight = scorer.assess_news(NewsArticle(title="Quarterly results"))

    assert insight.assessment.score == 50
    assert insight.assessment.band is RiskBand.MEDIUM
    assert insight.assessment.subject_id == "Quarterly results"


def test_keyword_match_is_case_insensitive(extractor):
    signals = extractor.extract(NewsArticle(title="MONEY LAUNDERING ring busted"))
    fired = [s for s in signals if s.triggered]

    assert [s.name for s in fired] == ["keyword:money laundering"]
    assert fired[0].detail == "Mentions 'money laundering'"


@pytest.mark.parametrize(
    "text,category",
    [
        ("corruption probe", "corruption"),
        ("Scam uncovered during corruption probe", "fraud"),
        ("Police make arrest", "investigation"),
        ("State budget doubles", "government-spending"),
        ("New regulation for lenders", "policy"),
        ("Quarterly results", "compliance"),
    ],
)
def test_category_priority(extractor, text, category):
    assert extractor.categorize(text) == category


@pytest.mark.parametrize(
    "text,country",
    [
        ("Raids in Mumbai", "India"),
        ("Arrests in Beijing", "China"),
        ("Quarterly results", "International"),
    ],
)
def test_country_detection(extractor, text, country):
    assert extractor.extract_country(text) == country


def test_tags_default_when_nothing_matches(extractor):
    assert extractor.extract_tags("Quarterly results") == ("financial news", "business")


def test_tags_capped_at_five(extractor):
    text = "fraud corruption audit investigation compliance government financial"
    assert extractor.extract_tags(text) == ("fraud", "corruption", "audit", "investigation", "compliance")


def test_affected_sectors_always_include_government(extractor):
    assert extractor.affected_sectors("Quarterly results") == ("government",)
    assert extractor.affected_sectors("Bank under review") == ("government", "banking")
    assert extractor.affected_sectors("School construction delayed") == (
        "government",
        "infrastructure",
        "education",
    )


def test_assess_articles_sorted_by_relevance(scorer):
    articles = [
        NewsArticle(title="Quarterly results", url="u1"),
        NewsArticle(title="Fraud and bribery probe", url="u2"),
        NewsArticle(title="Audit finds gaps", url="u3"),
    ]
    insights = scorer.assess_articles(articles)

    assert [i.article.url for i in insights] == ["u2", "u3", "u1"]
    assert [i.assessment.score for i in insights] == [80, 60, 50]


def test_insight_to_dict(scorer):
    insight = scorer.assess_news(NewsArticle(title="Audit", source="Reuters"))
    payload = insight.to_dict()

    assert payload["summary"] == "No description available"
    assert payload["risk_level"] == "medium"
    assert payload["relevance_score"] == 60
    assert payload["affected_sectors"] == ["government"]
