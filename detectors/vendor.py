"""
Vendor & Transaction Signal Extraction

Turns a vendor's registry profile and payment history into signals:
- Transaction volume and cumulative value
- Rapid consecutive payments (invoice splitting)
- Documentation gaps in the vendor registry
- Pricing above the market reference
- Vendors missing from the approved registry

Every check is deterministic and reads only the records it is given.
"""

from collections import defaultdict
from typing import Iterable, Optional

from data_sources.records import Transaction, VendorProfile
from risk_config import (
    TRANSACTION_BATCH_PROFILE,
    VENDOR_PROFILE,
    ScoringProfile,
    VendorThresholds,
)

from .patterns import detect_invoice_splitting, vendor_key
from .signals import Signal, make_signal


def detect_high_volume(
    transactions: list[Transaction],
    profile: ScoringProfile,
    thresholds: VendorThresholds,
) -> Signal:
    count = len(transactions)
    return make_signal(
        profile, "high_volume", count > thresholds.high_volume_count,
        detail=f"{count} transactions", value=count,
    )


def detect_high_value(
    transactions: list[Transaction],
    profile: ScoringProfile,
    thresholds: VendorThresholds,
) -> Signal:
    total = sum(t.amount for t in transactions)
    return make_signal(
        profile, "high_value", total > thresholds.large_amount,
        detail=f"Cumulative amount ₹{total:,.2f}", value=total,
    )


def detect_incomplete_documentation(
    vendor: Optional[VendorProfile],
    profile: ScoringProfile,
    thresholds: VendorThresholds,
) -> Signal:
    """
    Registry documentation check.

    Only evaluated when a profile exists; a missing profile is reported by
    ``unknown_vendor`` instead.
    """
    if vendor is None:
        return make_signal(profile, "incomplete_documentation", False, detail="No vendor profile")

    on_file = vendor.documents_on_file or 0
    gaps = []
    if on_file < thresholds.min_documents_on_file:
        gaps.append(f"{on_file} of {thresholds.min_documents_on_file} required documents on file")
    if not vendor.registration_number:
        gaps.append("no registration number")

    return make_signal(
        profile, "incomplete_documentation", bool(gaps),
        detail="; ".join(gaps) or "Documentation complete", value=on_file,
    )


def detect_price_above_market(
    transactions: list[Transaction],
    profile: ScoringProfile,
    thresholds: VendorThresholds,
) -> Signal:
    """Mean premium over the market reference, across priced transactions."""
    premiums = [
        (t.amount - t.market_reference) / t.market_reference
        for t in transactions
        if t.market_reference is not None and t.market_reference > 0
    ]
    if not premiums:
        return make_signal(profile, "price_above_market", False, detail="No market reference")

    mean_premium = sum(premiums) / len(premiums)
    return make_signal(
        profile, "price_above_market", mean_premium >= thresholds.market_premium_threshold,
        detail=f"Mean premium {mean_premium:.0%} over {len(premiums)} priced transactions",
        value=mean_premium,
    )


def detect_unknown_vendor(vendor: Optional[VendorProfile], profile: ScoringProfile) -> Signal:
    if vendor is None:
        return make_signal(profile, "unknown_vendor", True, detail="Not in approved vendor registry")
    return make_signal(profile, "unknown_vendor", False, detail=f"Registered as {vendor.vendor_id}")


def detect_unattributed(transactions: list[Transaction], profile: ScoringProfile) -> Signal:
    missing = [t.transaction_id for t in transactions if vendor_key(t) is None]
    return make_signal(
        profile, "unattributed_transactions", bool(missing),
        detail=f"{len(missing)} transactions without a vendor", value=len(missing),
    )


class VendorSignalExtractor:
    """Signal extraction for vendors and transaction batches."""

    def __init__(
        self,
        thresholds: Optional[VendorThresholds] = None,
        profile: ScoringProfile = VENDOR_PROFILE,
        batch_profile: ScoringProfile = TRANSACTION_BATCH_PROFILE,
    ):
        self.thresholds = thresholds or VendorThresholds()
        self.profile = profile
        self.batch_profile = batch_profile

    def extract(
        self,
        vendor: Optional[VendorProfile],
        transactions: Optional[Iterable[Transaction]] = None,
    ) -> list[Signal]:
        """Signals for one vendor, in scoring order."""
        txns = list(transactions or [])
        p, t = self.profile, self.thresholds
        return [
            detect_high_volume(txns, p, t),
            detect_high_value(txns, p, t),
            detect_invoice_splitting(txns, p, t),
            detect_incomplete_documentation(vendor, p, t),
            detect_price_above_market(txns, p, t),
            detect_unknown_vendor(vendor, p),
        ]

    def extract_batch(self, transactions: Optional[Iterable[Transaction]] = None) -> list[Signal]:
        """
        Signals for an arbitrary transaction batch.

        The splitting check runs per vendor; the batch is flagged when any
        vendor's latest payments fall inside the window.
        """
        txns = list(transactions or [])
        p, t = self.batch_profile, self.thresholds

        by_vendor = defaultdict(list)
        for txn in txns:
            key = vendor_key(txn)
            if key is not None:
                by_vendor[key].append(txn)

        splitting = make_signal(p, "rapid_sequence", False, detail="No vendor with rapid payments")
        for key in sorted(by_vendor):
            candidate = detect_invoice_splitting(by_vendor[key], p, t)
            if candidate.triggered:
                splitting = make_signal(
                    p, "rapid_sequence", True,
                    detail=f"{key}: {candidate.detail}", value=candidate.value,
                )
                break

        return [
            detect_high_volume(txns, p, t),
            detect_high_value(txns, p, t),
            splitting,
            detect_price_above_market(txns, p, t),
            detect_unattributed(txns, p),
        ]
