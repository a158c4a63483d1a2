"""
Document Signal Extraction

Signals for an uploaded document whose fields were already extracted:
- Duplicate identifiers (upstream flag, or a prior document with the same
  number / same vendor, amount and type)
- Price anomaly and vendor flags from the extraction step
- Missing mandatory fields
- High-value documents
- Invoice splitting against the vendor's prior payments
- Extraction confidence (informational, no weight)
"""

from typing import Iterable, Optional

from data_sources.records import DocumentRecord, Transaction
from risk_config import DOCUMENT_PROFILE, ScoringProfile, VendorThresholds

from .patterns import detect_invoice_splitting, normalize_name, resolve_vendor_id
from .signals import Signal, make_signal


def _same_vendor(doc: DocumentRecord, vendor_id: Optional[str], vendor_name: Optional[str]) -> bool:
    if doc.vendor_id and vendor_id:
        return doc.vendor_id == vendor_id
    if doc.vendor_name and vendor_name:
        return doc.vendor_name.strip().lower() == vendor_name.strip().lower()
    return False


def find_duplicates(document: DocumentRecord, prior_documents: Iterable[DocumentRecord]) -> list[str]:
    """IDs of prior documents that look like the same submission."""
    matches = []
    number = (document.document_number or "").strip().upper()
    for prior in prior_documents:
        if prior.document_id == document.document_id:
            continue
        if number and (prior.document_number or "").strip().upper() == number:
            matches.append(prior.document_id)
        elif (
            document.amount is not None
            and prior.amount == document.amount
            and document.document_type
            and prior.document_type == document.document_type
            and _same_vendor(prior, document.vendor_id, document.vendor_name)
        ):
            matches.append(prior.document_id)
    return matches


def vendor_transactions(
    document: DocumentRecord,
    transactions: Iterable[Transaction],
    name_index: Optional[dict] = None,
) -> list[Transaction]:
    """
    Transactions paid to the document's vendor.

    Registry ids are compared when both sides resolve to one (names go through
    ``name_index``); otherwise the normalized vendor names must agree.
    """
    doc_id = resolve_vendor_id(document.vendor_id, document.vendor_name, name_index)
    doc_name = normalize_name(document.vendor_name)

    matched = []
    for txn in transactions:
        txn_id = resolve_vendor_id(txn.vendor_id, txn.vendor_name, name_index)
        if doc_id and txn_id:
            if doc_id == txn_id:
                matched.append(txn)
        elif doc_name and normalize_name(txn.vendor_name) == doc_name:
            matched.append(txn)
    return matched


def missing_fields(document: DocumentRecord) -> list[str]:
    missing = []
    if not document.document_number:
        missing.append("document number")
    if not (document.vendor_name or document.vendor_id):
        missing.append("vendor")
    if document.amount is None:
        missing.append("amount")
    return missing


class DocumentSignalExtractor:
    """Signal extraction for a single document."""

    def __init__(
        self,
        thresholds: Optional[VendorThresholds] = None,
        profile: ScoringProfile = DOCUMENT_PROFILE,
    ):
        self.thresholds = thresholds or VendorThresholds()
        self.profile = profile

    def extract(
        self,
        document: DocumentRecord,
        prior_documents: Iterable[DocumentRecord] = (),
        prior_transactions: Iterable[Transaction] = (),
        name_index: Optional[dict] = None,
    ) -> list[Signal]:
        p, t = self.profile, self.thresholds

        duplicates = find_duplicates(document, prior_documents)
        duplicate_detail = (
            f"Matches prior documents {', '.join(duplicates)}" if duplicates
            else "Flagged at extraction" if document.duplicate_risk
            else "No duplicate found"
        )

        missing = missing_fields(document)
        missing_detail = (
            f"Missing {', '.join(missing)}" if missing
            else "Flagged at extraction" if document.missing_fields_risk
            else "All mandatory fields present"
        )

        amount = document.amount or 0.0

        vendor_txns = vendor_transactions(document, prior_transactions, name_index)
        splitting = detect_invoice_splitting(vendor_txns, p, t, as_of=document.document_date)

        confidence = document.confidence
        if confidence is None:
            confidence_signal = make_signal(p, "extraction_confidence", False, detail="No extraction confidence")
        else:
            confidence_signal = make_signal(
                p, "extraction_confidence", confidence < t.min_extraction_confidence,
                detail=f"Extraction confidence {confidence:.0f}%", value=confidence,
            )

        return [
            make_signal(
                p, "duplicate_identifier_risk", document.duplicate_risk or bool(duplicates),
                detail=duplicate_detail, value=len(duplicates),
            ),
            make_signal(p, "price_anomaly_risk", document.price_anomaly_risk, detail="Flagged at extraction"),
            make_signal(p, "vendor_risk", document.vendor_risk, detail="Flagged at extraction"),
            make_signal(
                p, "missing_fields_risk", document.missing_fields_risk or bool(missing),
                detail=missing_detail, value=len(missing),
            ),
            make_signal(
                p, "high_value_document", amount > t.document_high_value,
                detail=f"Document amount ₹{amount:,.2f}", value=amount,
            ),
            splitting,
            confidence_signal,
        ]
