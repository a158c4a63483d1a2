"""
Tests for cross-record pattern detection and department clustering.
"""

from __future__ import annotations

from conftest import make_document, make_txn
from detectors.patterns import (
    analyze_batch_patterns,
    build_department_clusters,
    detect_duplicate_submissions,
    detect_multiple_department_payments,
    detect_rapid_transaction_sequence,
)
from risk_config import PatternThresholds, RiskBand


def _department_day(second_finance_amount: float):
    return [
        make_txn(0, amount=150_000, department="Finance", txn_id="T1"),
        make_txn(0, amount=150_000, department="Health", txn_id="T2"),
        make_txn(0, amount=150_000, department="Education", txn_id="T3"),
        make_txn(0, amount=second_finance_amount, department="Finance", txn_id="T4"),
    ]


def test_multiple_department_payments_flagged():
    patterns = detect_multiple_department_payments(_department_day(150_000))

    assert len(patterns) == 1
    pattern = patterns[0]
    assert pattern.type == "Multiple Department Payments"
    assert pattern.severity is RiskBand.HIGH
    assert pattern.affected_subject_ids == frozenset({"V1"})
    assert pattern.description == (
        "Same vendor received payments from 3 departments on the same day totaling ₹600,000"
    )
    assert pattern.evidence["departments"] == ["Education", "Finance", "Health"]
    assert pattern.evidence["transaction_ids"] == ["T1", "T2", "T3", "T4"]


def test_multiple_department_payments_below_amount():
    # 150k * 3 - 50k = 400k total
    assert detect_multiple_department_payments(_department_day(-50_000)) == []


def test_multiple_department_payments_needs_more_than_two_departments():
    txns = [
        make_txn(0, amount=400_000, department="Finance", txn_id="T1"),
        make_txn(0, amount=400_000, department="Health", txn_id="T2"),
    ]
    assert detect_multiple_department_payments(txns) == []


def test_multiple_department_payments_grouped_by_day():
    txns = [
        make_txn(0, amount=300_000, department="Finance", txn_id="T1"),
        make_txn(1, amount=300_000, department="Health", txn_id="T2"),
        make_txn(2, amount=300_000, department="Education", txn_id="T3"),
    ]
    assert detect_multiple_department_payments(txns) == []


def test_rapid_sequence_daily_payments():
    txns = [make_txn(d) for d in range(5)]
    patterns = detect_rapid_transaction_sequence(txns)

    assert len(patterns) == 1
    assert patterns[0].type == "Rapid Transaction Sequence"
    assert patterns[0].severity is RiskBand.MEDIUM
    assert patterns[0].description == "5 transactions in 5 days (avg gap: 1.0 days)"


def test_rapid_sequence_spread_out_payments():
    txns = [make_txn(d) for d in (0, 10, 20, 30, 40)]
    assert detect_rapid_transaction_sequence(txns) == []


def test_rapid_sequence_skips_small_groups():
    txns = [make_txn(d * 0.1) for d in range(4)]
    assert detect_rapid_transaction_sequence(txns) == []


def test_rapid_sequence_ignores_undated_and_vendorless():
    txns = [make_txn(d) for d in range(4)]
    txns.append(make_txn(None, txn_id="undated"))
    txns.append(make_txn(4, vendor_id=None, txn_id="anonymous"))
    assert detect_rapid_transaction_sequence(txns) == []


def test_rapid_sequence_custom_thresholds():
    txns = [make_txn(d * 3) for d in range(3)]
    thresholds = PatternThresholds(rapid_min_transactions=3, rapid_average_gap_days=5)
    patterns = detect_rapid_transaction_sequence(txns, thresholds)
    assert patterns[0].evidence["average_gap_days"] == 3.0


def test_duplicate_submission_by_normalized_number():
    docs = [
        make_document("D1", document_number="INV-001"),
        make_document("D2", document_number="inv-001 "),
        make_document("D3", document_number="INV-002", amount=5_000),
    ]
    patterns = detect_duplicate_submissions(docs)

    # D1/D2 also share vendor, amount and type but are reported once
    assert len(patterns) == 1
    assert patterns[0].affected_subject_ids == frozenset({"D1", "D2"})
    assert patterns[0].evidence["match"] == "document_number"
    assert patterns[0].severity is RiskBand.HIGH


def test_duplicate_submission_by_vendor_amount_type():
    docs = [
        make_document("D1", amount=42_000),
        make_document("D2", amount=42_000, vendor_name="ACME SUPPLIES"),
        make_document("D3", amount=42_000, document_type="receipt"),
    ]
    patterns = detect_duplicate_submissions(docs)

    assert len(patterns) == 1
    assert patterns[0].affected_subject_ids == frozenset({"D1", "D2"})
    assert patterns[0].description == "2 invoice documents from ACME SUPPLIES for the same amount ₹42,000"


def test_department_clusters_sorted_with_unassigned():
    txns = [
        make_txn(0, amount=100, department="Health", vendor_id="V1"),
        make_txn(1, amount=200, department="Finance", vendor_id="V1"),
        make_txn(2, amount=300, department="Finance", vendor_id="V2"),
        make_txn(3, amount=50, department=None, vendor_id="V3"),
    ]
    clusters = build_department_clusters(txns)

    assert [c.department for c in clusters] == ["Finance", "Health", "Unassigned"]
    finance = clusters[0]
    assert finance.transaction_count == 2
    assert finance.total_amount == 500
    assert finance.vendor_ids == frozenset({"V1", "V2"})


def test_analyze_batch_patterns_combines_detectors():
    txns = _department_day(150_000) + [make_txn(d, vendor_id="V2") for d in range(5)]
    docs = [make_document("D1"), make_document("D2", document_number="INV-D1")]

    patterns = analyze_batch_patterns(txns, docs)

    assert [p.type for p in patterns] == [
        "Multiple Department Payments",
        "Rapid Transaction Sequence",
        "Duplicate Document Submission",
    ]


def test_analyze_batch_patterns_is_deterministic():
    txns = [make_txn(d, vendor_id=v) for v in ("V2", "V1") for d in range(6)]
    first = analyze_batch_patterns(txns)
    second = analyze_batch_patterns(list(reversed(txns)))

    assert first == second
    assert [sorted(p.affected_subject_ids) for p in first] == [["V1"], ["V2"]]
