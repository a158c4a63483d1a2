"""
Cross-Record Pattern Detection

Looks across a whole batch of transactions (or documents) rather than one
subject, and reports structure no single record shows:
- Multiple department payments (one vendor paid by many departments in a day)
- Rapid transaction sequences (many payments with a short average gap)
- Invoice splitting (three latest payments squeezed into a short window)
- Duplicate document submissions (same number, or same vendor/amount/type)

What it catches:
- Split invoices that dodge approval thresholds
- Coordinated payouts routed through several departments
- Re-submitted invoices

Groups with fewer records than a pattern needs are skipped without comment.
Results are ordered by group key so the same batch always yields the same list.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional

from console import logger
from data_sources.records import DocumentRecord, Transaction, VendorProfile
from risk_config import PatternThresholds, RiskBand, ScoringProfile, VendorThresholds

from .signals import Signal, make_signal

SECONDS_PER_DAY = 86400

INVOICE_SPLITTING_ISSUE = "Potential invoice splitting to avoid approval thresholds"


@dataclass(frozen=True)
class Pattern:
    """A finding about a batch of records, not tied to a single subject."""
    type: str
    severity: RiskBand
    description: str
    affected_subject_ids: frozenset
    evidence: dict = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "description": self.description,
            "affected_subject_ids": sorted(self.affected_subject_ids),
            "evidence": self.evidence,
        }


@dataclass(frozen=True)
class DepartmentCluster:
    """Spending summary for one department across a batch."""
    department: str
    transaction_count: int
    total_amount: float
    vendor_ids: frozenset


def normalize_name(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    return " ".join(name.split()).lower() or None


def vendor_name_index(vendors: Iterable[VendorProfile]) -> dict[str, str]:
    """Normalized registry name -> vendor id. The first profile with a name wins."""
    index = {}
    for profile in sorted(vendors, key=lambda v: v.vendor_id):
        name = normalize_name(profile.name)
        if name and name not in index:
            index[name] = profile.vendor_id
    return index


def resolve_vendor_id(
    vendor_id: Optional[str],
    vendor_name: Optional[str],
    name_index: Optional[dict] = None,
) -> Optional[str]:
    """Registry id for a record that may carry only the vendor's name."""
    if vendor_id:
        return vendor_id
    if name_index:
        return name_index.get(normalize_name(vendor_name))
    return None


def vendor_key(txn: Transaction, name_index: Optional[dict] = None) -> Optional[str]:
    """
    Identity used to group a transaction by vendor: id first, then name.

    With a registry name index, a name-only transaction takes the id of the
    registered vendor of that name.
    """
    return resolve_vendor_id(txn.vendor_id, txn.vendor_name, name_index) or txn.vendor_name


def _span_days(later, earlier) -> float:
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def detect_invoice_splitting(
    transactions: Iterable[Transaction],
    profile: ScoringProfile,
    thresholds: Optional[VendorThresholds] = None,
    as_of=None,
) -> Signal:
    """
    Check the most recent transactions of one vendor for invoice splitting.

    Takes the ``rapid_sample_size`` latest dated transactions (at or before
    ``as_of`` when given) and triggers when the oldest and newest of them are
    less than ``rapid_window_days`` apart.
    """
    thresholds = thresholds or VendorThresholds()
    dated = [t for t in transactions if t.transaction_date is not None]
    if as_of is not None:
        dated = [t for t in dated if t.transaction_date <= as_of]

    sample = thresholds.rapid_sample_size
    if len(dated) < sample:
        return make_signal(
            profile, "rapid_sequence", False,
            detail=f"Fewer than {sample} dated transactions",
        )

    dated.sort(key=lambda t: (t.transaction_date, t.transaction_id), reverse=True)
    recent = dated[:sample]
    span = _span_days(recent[0].transaction_date, recent[-1].transaction_date)

    return make_signal(
        profile,
        "rapid_sequence",
        span < thresholds.rapid_window_days,
        detail=f"Latest {sample} transactions span {span:.1f} days",
        value=span,
    )


def detect_multiple_department_payments(
    transactions: Iterable[Transaction],
    thresholds: Optional[PatternThresholds] = None,
) -> list[Pattern]:
    """Flag vendors paid by many departments on the same day for a large total."""
    thresholds = thresholds or PatternThresholds()

    groups = defaultdict(list)
    for txn in transactions:
        key = vendor_key(txn)
        if key is None or txn.day is None:
            continue
        groups[(key, txn.day)].append(txn)

    patterns = []
    for (vendor, day), txns in sorted(groups.items()):
        departments = sorted({t.department for t in txns if t.department})
        total = sum(t.amount for t in txns)

        if len(departments) > thresholds.department_count and total > thresholds.department_amount:
            patterns.append(Pattern(
                type="Multiple Department Payments",
                severity=RiskBand.HIGH,
                description=(
                    f"Same vendor received payments from {len(departments)} departments "
                    f"on the same day totaling ₹{total:,.0f}"
                ),
                affected_subject_ids=frozenset([vendor]),
                evidence={
                    "vendor": vendor,
                    "date": day.isoformat(),
                    "departments": departments,
                    "total_amount": total,
                    "transaction_ids": sorted(t.transaction_id for t in txns),
                },
            ))

    return patterns


def detect_rapid_transaction_sequence(
    transactions: Iterable[Transaction],
    thresholds: Optional[PatternThresholds] = None,
) -> list[Pattern]:
    """Flag vendors whose transactions arrive with a short average gap."""
    thresholds = thresholds or PatternThresholds()

    by_vendor = defaultdict(list)
    for txn in transactions:
        key = vendor_key(txn)
        if key is None or txn.transaction_date is None:
            continue
        by_vendor[key].append(txn.transaction_date)

    patterns = []
    for vendor, dates in sorted(by_vendor.items()):
        count = len(dates)
        if count < thresholds.rapid_min_transactions:
            continue

        dates.sort()
        avg_gap = _span_days(dates[-1], dates[0]) / (count - 1)

        if avg_gap < thresholds.rapid_average_gap_days:
            patterns.append(Pattern(
                type="Rapid Transaction Sequence",
                severity=RiskBand.MEDIUM,
                description=(
                    f"{count} transactions in {math.ceil(avg_gap * count)} days "
                    f"(avg gap: {avg_gap:.1f} days)"
                ),
                affected_subject_ids=frozenset([vendor]),
                evidence={
                    "vendor": vendor,
                    "transaction_count": count,
                    "average_gap_days": avg_gap,
                    "first_date": dates[0].isoformat(),
                    "last_date": dates[-1].isoformat(),
                },
            ))

    return patterns


def _normalize_number(number: Optional[str]) -> Optional[str]:
    if not number:
        return None
    return "".join(number.split()).upper()


def detect_duplicate_submissions(documents: Iterable[DocumentRecord]) -> list[Pattern]:
    """
    Flag documents submitted more than once.

    Two documents match when they share a document number, or when vendor,
    amount and document type are all present and equal.
    """
    by_number = defaultdict(list)
    by_content = defaultdict(list)
    for doc in documents:
        number = _normalize_number(doc.document_number)
        if number:
            by_number[number].append(doc)
        vendor = doc.vendor_id or doc.vendor_name
        if vendor and doc.amount is not None and doc.document_type:
            by_content[(vendor.upper(), doc.amount, doc.document_type.lower())].append(doc)

    patterns = []
    reported = set()

    for number, docs in sorted(by_number.items()):
        ids = frozenset(d.document_id for d in docs)
        if len(ids) < 2:
            continue
        reported.add(ids)
        patterns.append(Pattern(
            type="Duplicate Document Submission",
            severity=RiskBand.HIGH,
            description=f"Document number {number} submitted {len(ids)} times",
            affected_subject_ids=ids,
            evidence={"match": "document_number", "document_number": number},
        ))

    for (vendor, amount, doc_type), docs in sorted(by_content.items()):
        ids = frozenset(d.document_id for d in docs)
        if len(ids) < 2 or ids in reported:
            continue
        reported.add(ids)
        patterns.append(Pattern(
            type="Duplicate Document Submission",
            severity=RiskBand.HIGH,
            description=(
                f"{len(ids)} {doc_type} documents from {vendor} for the same amount ₹{amount:,.0f}"
            ),
            affected_subject_ids=ids,
            evidence={
                "match": "vendor_amount_type",
                "vendor": vendor,
                "amount": amount,
                "document_type": doc_type,
            },
        ))

    return patterns


def build_department_clusters(transactions: Iterable[Transaction]) -> list[DepartmentCluster]:
    """Summarize spending per department, sorted by department name."""
    counts = defaultdict(int)
    totals = defaultdict(float)
    vendors = defaultdict(set)

    for txn in transactions:
        department = txn.department or "Unassigned"
        counts[department] += 1
        totals[department] += txn.amount
        if txn.vendor_id:
            vendors[department].add(txn.vendor_id)

    return [
        DepartmentCluster(
            department=department,
            transaction_count=counts[department],
            total_amount=totals[department],
            vendor_ids=frozenset(vendors[department]),
        )
        for department in sorted(counts)
    ]


def analyze_batch_patterns(
    transactions: Iterable[Transaction],
    documents: Iterable[DocumentRecord] = (),
    thresholds: Optional[PatternThresholds] = None,
) -> list[Pattern]:
    """Run every cross-record check over a fully materialized batch."""
    transactions = list(transactions)
    patterns = []
    patterns.extend(detect_multiple_department_payments(transactions, thresholds))
    patterns.extend(detect_rapid_transaction_sequence(transactions, thresholds))
    patterns.extend(detect_duplicate_submissions(documents))

    for pattern in patterns:
        logger.debug(
            f"pattern {pattern.type} [{pattern.severity.value}] "
            f"affects {', '.join(sorted(pattern.affected_subject_ids))}"
        )
    return patterns
