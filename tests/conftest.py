"""
Pytest fixtures and record builders shared by the risk engine tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from data_sources.records import DocumentRecord, Transaction, VendorProfile
from risk_scorer import RiskScorer

DAY_ZERO = datetime(2024, 3, 1, 9, 0)


def make_txn(
    day: float | None,
    amount: float = 1_000.0,
    vendor_id: str | None = "V1",
    department: str | None = "Finance",
    txn_id: str | None = None,
    market_reference: float | None = None,
    vendor_name: str | None = None,
) -> Transaction:
    """Transaction dated ``day`` days after DAY_ZERO (None for undated)."""
    return Transaction(
        transaction_id=txn_id or f"T-{vendor_id or vendor_name}-{day}-{department}-{amount}",
        vendor_id=vendor_id,
        vendor_name=vendor_name,
        amount=amount,
        department=department,
        transaction_date=DAY_ZERO + timedelta(days=day) if day is not None else None,
        market_reference=market_reference,
    )


def make_vendor(vendor_id: str = "V1", documents: int | None = 3, registration: str | None = "GST-001"):
    return VendorProfile(
        vendor_id=vendor_id,
        name=f"Vendor {vendor_id}",
        registration_number=registration,
        documents_on_file=documents,
    )


def make_document(document_id: str = "D1", **fields) -> DocumentRecord:
    defaults = {
        "document_number": f"INV-{document_id}",
        "document_type": "invoice",
        "vendor_name": "Acme Supplies",
        "amount": 100_000.0,
        "confidence": 95.0,
    }
    defaults.update(fields)
    return DocumentRecord(document_id=document_id, **defaults)


@pytest.fixture
def scorer() -> RiskScorer:
    return RiskScorer(max_workers=4)
