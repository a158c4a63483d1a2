"""
Multi-Signal Risk Scorer

Combines extractor signals into a single bounded risk score:

    score = clamp(base + weight of each triggered signal, 0, 100)

The clamp is applied after every addition, so no intermediate total ever
leaves [0, 100].

BASE SCORES / WEIGHTS (see risk_config):
- Vendor: base 30; unknown vendor 25, rapid sequence 20, high value 15,
  price above market 15, high volume 10, incomplete documentation 10
- Document: base 20; duplicate 30, price anomaly 25, vendor 20,
  rapid sequence 20, missing fields 15, high value 15
- News: base 50; 10 per fraud keyword

Final score interpretation (risk subjects):
- 0-39: Low risk
- 40-59: Medium risk
- 60-79: High risk
- 80+: Critical risk

News relevance uses its own table (50 / 75 / 90).
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional

from console import logger
from data_sources.records import DocumentRecord, NewsArticle, Transaction, VendorProfile
from detectors.document import DocumentSignalExtractor
from detectors.news import ArticleContext, NewsSignalExtractor
from detectors.patterns import vendor_key, vendor_name_index
from detectors.signals import Signal
from detectors.vendor import VendorSignalExtractor
from risk_config import (
    DOCUMENT_PROFILE,
    NEWS_PROFILE,
    RISK_BANDS,
    TRANSACTION_BATCH_PROFILE,
    VENDOR_PROFILE,
    NewsTables,
    RiskBand,
    ScoringProfile,
    SubjectType,
    VendorThresholds,
)
from risk_evidence import build_evidence

MIN_SCORE = 0
MAX_SCORE = 100


def clamp(value: int, low: int = MIN_SCORE, high: int = MAX_SCORE) -> int:
    return max(low, min(high, value))


def iter_running_scores(signals: Iterable[Signal], base_score: int = 0) -> Iterator[int]:
    """Yield the clamped running total: the base, then once per triggered signal."""
    total = clamp(int(base_score))
    yield total
    for signal in signals:
        if signal.triggered:
            total = clamp(total + max(0, int(signal.weight)))
            yield total


def score_signals(signals: Iterable[Signal], base_score: int = 0) -> int:
    """Fold triggered signal weights onto the base score, clamping at every step."""
    total = clamp(int(base_score))
    for signal in signals:
        if signal.triggered:
            total = clamp(total + max(0, int(signal.weight)))
    return total


def classify_band(score: int, bands: tuple = RISK_BANDS) -> RiskBand:
    """Map a score to its band; thresholds are inclusive lower bounds, highest first."""
    for lower_bound, band in bands:
        if score >= lower_bound:
            return band
    return RiskBand.LOW


@dataclass(frozen=True)
class RiskAssessment:
    """Risk verdict for one subject. Built once per scoring call."""
    subject_id: str
    subject_type: SubjectType
    score: int
    band: RiskBand
    signals: tuple
    recommendations: tuple
    findings: tuple = ()
    compliance_issues: tuple = ()

    @property
    def triggered_signals(self) -> list[Signal]:
        return [s for s in self.signals if s.triggered]

    @property
    def needs_alert(self) -> bool:
        return self.band.rank >= RiskBand.HIGH.rank

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "subject_type": self.subject_type.value,
            "score": self.score,
            "band": self.band.value,
            "signals": [s.to_dict() for s in self.signals],
            "recommendations": list(self.recommendations),
            "findings": [f.to_dict() for f in self.findings],
            "compliance_issues": list(self.compliance_issues),
        }


@dataclass(frozen=True)
class NewsInsight:
    """A scored news article with its descriptive classification."""
    article: NewsArticle
    assessment: RiskAssessment
    context: ArticleContext

    def to_dict(self) -> dict:
        return {
            "title": self.article.title,
            "summary": self.article.description or "No description available",
            "source": self.article.source,
            "url": self.article.url,
            "date": self.article.published_at.isoformat() if self.article.published_at else None,
            "relevance_score": self.assessment.score,
            "risk_level": self.assessment.band.value,
            "category": self.context.category,
            "country": self.context.country,
            "tags": list(self.context.tags),
            "affected_sectors": list(self.context.affected_sectors),
            "recommendations": list(self.assessment.recommendations),
        }


def build_assessment(
    subject_id: str,
    subject_type: SubjectType,
    signals: list[Signal],
    profile: ScoringProfile,
) -> RiskAssessment:
    """Score, classify and explain a signal list."""
    score = score_signals(signals, profile.base_score)
    band = classify_band(score, profile.bands)
    evidence = build_evidence(signals)

    assessment = RiskAssessment(
        subject_id=subject_id,
        subject_type=subject_type,
        score=score,
        band=band,
        signals=tuple(signals),
        recommendations=evidence.recommendations,
        findings=evidence.findings,
        compliance_issues=evidence.compliance_issues,
    )
    logger.debug(
        f"{subject_type.value} {subject_id} scored {score} ({band.value}); "
        f"signals: {', '.join(s.name for s in assessment.triggered_signals) or 'none'}"
    )
    return assessment


class RiskScorer:
    """Scores vendors, transaction batches, documents and news items."""

    def __init__(
        self,
        thresholds: Optional[VendorThresholds] = None,
        news_tables: Optional[NewsTables] = None,
        vendor_profile: ScoringProfile = VENDOR_PROFILE,
        batch_profile: ScoringProfile = TRANSACTION_BATCH_PROFILE,
        document_profile: ScoringProfile = DOCUMENT_PROFILE,
        news_profile: ScoringProfile = NEWS_PROFILE,
        max_workers: Optional[int] = None,
    ):
        self.thresholds = thresholds or VendorThresholds()
        self.vendor_profile = vendor_profile
        self.batch_profile = batch_profile
        self.document_profile = document_profile
        self.news_profile = news_profile
        # ThreadPoolExecutor rejects zero or negative pool sizes
        self.max_workers = max_workers if max_workers and max_workers > 0 else None

        self.vendor_extractor = VendorSignalExtractor(self.thresholds, vendor_profile, batch_profile)
        self.document_extractor = DocumentSignalExtractor(self.thresholds, document_profile)
        self.news_extractor = NewsSignalExtractor(news_tables, news_profile)

    def assess_vendor(
        self,
        subject_id: str,
        vendor: Optional[VendorProfile],
        transactions: Optional[Iterable[Transaction]] = None,
    ) -> RiskAssessment:
        """Assess a vendor; ``vendor`` is None when no registry profile was found."""
        signals = self.vendor_extractor.extract(vendor, transactions)
        return build_assessment(subject_id, SubjectType.VENDOR, signals, self.vendor_profile)

    def assess_transaction_batch(
        self,
        subject_id: str,
        transactions: Optional[Iterable[Transaction]] = None,
    ) -> RiskAssessment:
        signals = self.vendor_extractor.extract_batch(transactions)
        return build_assessment(subject_id, SubjectType.TRANSACTION_BATCH, signals, self.batch_profile)

    def assess_document(
        self,
        document: DocumentRecord,
        prior_documents: Iterable[DocumentRecord] = (),
        prior_transactions: Iterable[Transaction] = (),
        name_index: Optional[dict] = None,
    ) -> RiskAssessment:
        signals = self.document_extractor.extract(
            document, prior_documents, prior_transactions, name_index
        )
        return build_assessment(document.document_id, SubjectType.DOCUMENT, signals, self.document_profile)

    def assess_news(self, article: NewsArticle) -> NewsInsight:
        signals = self.news_extractor.extract(article)
        assessment = build_assessment(
            article.article_id, SubjectType.NEWS_ITEM, signals, self.news_profile
        )
        return NewsInsight(article=article, assessment=assessment, context=self.news_extractor.context(article))

    def assess_vendors(
        self,
        vendors: dict,
        transactions: Iterable[Transaction],
    ) -> list[RiskAssessment]:
        """
        Assess every vendor that has a profile or at least one transaction.

        ``vendors`` maps vendor id to profile. Transactions are partitioned by
        vendor id; a transaction that only names its vendor joins the
        registered vendor of that name, or its own partition keyed by the
        name when none matches. Each partition is scored independently.
        """
        name_index = vendor_name_index(vendors.values())
        partitions = {vendor_id: [] for vendor_id in vendors}
        for txn in transactions:
            key = vendor_key(txn, name_index)
            if key is None:
                continue
            partitions.setdefault(key, []).append(txn)

        jobs = [
            (key, vendors.get(key), txns)
            for key, txns in sorted(partitions.items())
        ]
        return assess_batch(
            lambda job: self.assess_vendor(job[0], job[1], job[2]),
            jobs,
            max_workers=self.max_workers,
        )

    def assess_documents(
        self,
        documents: Iterable[DocumentRecord],
        transactions: Iterable[Transaction] = (),
        vendors: Optional[dict] = None,
    ) -> list[RiskAssessment]:
        """
        Assess each document against every other document in the batch.

        ``vendors`` (id -> profile) lets name-only records match by registry id.
        """
        documents = list(documents)
        transactions = list(transactions)
        name_index = vendor_name_index((vendors or {}).values())
        return assess_batch(
            lambda doc: self.assess_document(doc, documents, transactions, name_index),
            documents,
            max_workers=self.max_workers,
        )

    def assess_articles(self, articles: Iterable[NewsArticle]) -> list[NewsInsight]:
        """Score articles and sort them by relevance, most relevant first."""
        insights = assess_batch(self.assess_news, list(articles), max_workers=self.max_workers)
        return sorted(insights, key=lambda i: -i.assessment.score)


def assess_batch(
    assess: Callable,
    subjects: list,
    max_workers: Optional[int] = None,
) -> list:
    """
    Apply ``assess`` to each subject independently and collect results in input order.

    Subjects share no state, so each one is handed to the pool on its own.
    """
    subjects = list(subjects)
    if len(subjects) <= 1:
        return [assess(subject) for subject in subjects]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(assess, subjects))
