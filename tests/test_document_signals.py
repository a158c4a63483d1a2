"""
Tests for document signal extraction and document scoring.
"""

from __future__ import annotations

from datetime import timedelta

from conftest import DAY_ZERO, make_document, make_txn, make_vendor
from detectors.document import find_duplicates, missing_fields, vendor_transactions
from risk_config import RiskBand, SubjectType
from risk_evidence import FALLBACK_RECOMMENDATION


def _triggered(assessment):
    return [s.name for s in assessment.triggered_signals]


def test_clean_document_scores_base(scorer):
    assessment = scorer.assess_document(make_document())

    assert assessment.subject_type is SubjectType.DOCUMENT
    assert assessment.score == 20
    assert assessment.band is RiskBand.LOW
    assert assessment.recommendations == (FALLBACK_RECOMMENDATION,)


def test_signal_order(scorer):
    assessment = scorer.assess_document(make_document())
    assert [s.name for s in assessment.signals] == [
        "duplicate_identifier_risk",
        "price_anomaly_risk",
        "vendor_risk",
        "missing_fields_risk",
        "high_value_document",
        "rapid_sequence",
        "extraction_confidence",
    ]


def test_duplicate_number_against_prior_document(scorer):
    prior = make_document("D1", document_number="INV-777")
    document = make_document("D2", document_number="inv-777")

    assessment = scorer.assess_document(document, prior_documents=[prior])

    assert _triggered(assessment) == ["duplicate_identifier_risk"]
    assert assessment.score == 50
    assert assessment.band is RiskBand.MEDIUM
    assert "Possible duplicate payment claim" in assessment.compliance_issues


def test_upstream_flags_are_honoured(scorer):
    document = make_document(duplicate_risk=True, price_anomaly_risk=True, vendor_risk=True)
    assessment = scorer.assess_document(document)

    assert assessment.score == 20 + 30 + 25 + 20
    assert assessment.band is RiskBand.CRITICAL


def test_missing_fields_detected():
    document = make_document(document_number=None, vendor_name=None, amount=None)
    assert missing_fields(document) == ["document number", "vendor", "amount"]


def test_missing_fields_scored(scorer):
    document = make_document(document_number=None, amount=None)
    assessment = scorer.assess_document(document)

    assert _triggered(assessment) == ["missing_fields_risk"]
    assert assessment.score == 35
    assert assessment.findings[0].description == "Mandatory fields incomplete: Missing document number, amount"


def test_high_value_document(scorer):
    assessment = scorer.assess_document(make_document(amount=750_000))
    assert _triggered(assessment) == ["high_value_document"]
    assert assessment.score == 35


def test_rapid_sequence_uses_prior_vendor_transactions(scorer):
    document = make_document(vendor_id="V1", document_date=DAY_ZERO + timedelta(days=10))
    txns = [make_txn(d, vendor_id="V1") for d in (4, 7, 9)]
    # Other vendors and later payments are not considered
    txns += [make_txn(8, vendor_id="V2"), make_txn(9.5, vendor_id="V2")]

    assessment = scorer.assess_document(document, prior_transactions=txns)

    assert _triggered(assessment) == ["rapid_sequence"]
    assert assessment.score == 40


def test_rapid_sequence_ignores_later_transactions(scorer):
    document = make_document(vendor_id="V1", document_date=DAY_ZERO)
    txns = [make_txn(d, vendor_id="V1") for d in (1, 2, 3)]

    assessment = scorer.assess_document(document, prior_transactions=txns)
    assert _triggered(assessment) == []


def test_low_confidence_is_informational(scorer):
    assessment = scorer.assess_document(make_document(confidence=40))

    assert _triggered(assessment) == ["extraction_confidence"]
    assert assessment.score == 20
    assert assessment.recommendations == ("Manually verify extracted fields",)


def test_find_duplicates_by_vendor_amount_type():
    prior = [
        make_document("D1", amount=9_000, vendor_name="acme supplies"),
        make_document("D2", amount=9_000, document_type="receipt"),
        make_document("D3", amount=8_000),
    ]
    document = make_document("D4", amount=9_000)
    assert find_duplicates(document, prior) == ["D1"]


def test_find_duplicates_skips_itself():
    document = make_document("D1")
    assert find_duplicates(document, [document]) == []


def test_assess_documents_checks_whole_batch(scorer):
    docs = [
        make_document("D1", document_number="INV-1"),
        make_document("D2", document_number="INV-1"),
        make_document("D3", document_number="INV-3", amount=1_000),
    ]
    assessments = scorer.assess_documents(docs)

    assert [a.subject_id for a in assessments] == ["D1", "D2", "D3"]
    assert [a.score for a in assessments] == [50, 50, 20]


def test_missing_confidence_leaves_signal_unset(scorer):
    assessment = scorer.assess_document(make_document(confidence=None))

    assert _triggered(assessment) == []
    assert assessment.signals[-1].detail == "No extraction confidence"
    assert assessment.recommendations == (FALLBACK_RECOMMENDATION,)


def test_rapid_sequence_matches_name_only_transactions_through_registry(scorer):
    document = make_document(vendor_id="V1", vendor_name=None, document_date=DAY_ZERO + timedelta(days=10))
    txns = [make_txn(d, vendor_id=None, vendor_name="Vendor V1") for d in (4, 7, 9)]

    with_registry = scorer.assess_documents([document], txns, vendors={"V1": make_vendor("V1")})
    without_registry = scorer.assess_documents([document], txns)

    assert _triggered(with_registry[0]) == ["rapid_sequence"]
    assert _triggered(without_registry[0]) == []


def test_vendor_transactions_prefers_registry_ids():
    document = make_document(vendor_id="V1", vendor_name="Acme Supplies")
    txns = [
        make_txn(0, vendor_id="V1", txn_id="same-id"),
        make_txn(1, vendor_id="V2", vendor_name="Acme Supplies", txn_id="other-id"),
        make_txn(2, vendor_id=None, vendor_name="acme  supplies", txn_id="name-only"),
    ]
    matched = vendor_transactions(document, txns)
    assert [t.transaction_id for t in matched] == ["same-id", "name-only"]
