"""
Evidence Builder

Explains an assessment. Each triggered signal becomes a finding (category,
severity, description) from a fixed template keyed by signal name; templates
may also carry a remedial recommendation and a compliance issue.

Recommendations are de-duplicated in first-seen order. When nothing yields
a recommendation the list is exactly FALLBACK_RECOMMENDATION, never empty.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from detectors.patterns import INVOICE_SPLITTING_ISSUE
from detectors.signals import Signal
from risk_config import RiskBand

FALLBACK_RECOMMENDATION = "Continue standard monitoring procedures"

VERIFY_VENDOR = "Initiate vendor verification and registration process"
MARKET_COMPARISON = "Conduct market rate comparison analysis"
CROSS_CHECK_ENTITIES = "Cross-check entities named in the article against the vendor registry"
TRACK_INVESTIGATION = "Track the investigation for outcomes affecting monitored vendors"


@dataclass(frozen=True)
class Finding:
    """Human-readable explanation of one triggered signal."""
    category: str
    severity: RiskBand
    description: str

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class EvidenceTemplate:
    category: str
    severity: RiskBand
    description: str  # str.format with signal fields and crore
    recommendation: Optional[str] = None
    compliance_issue: Optional[str] = None


@dataclass(frozen=True)
class Evidence:
    findings: tuple
    recommendations: tuple
    compliance_issues: tuple


EVIDENCE_TEMPLATES = {
    # Vendor / transaction batch
    "high_volume": EvidenceTemplate(
        "Transaction Volume", RiskBand.MEDIUM,
        "High transaction volume ({value:.0f} transactions) requires enhanced monitoring",
    ),
    "high_value": EvidenceTemplate(
        "Transaction Value", RiskBand.HIGH,
        "Total transaction value ₹{crore:.2f} Cr exceeds standard threshold",
        recommendation="Conduct detailed financial review for high-value vendor",
    ),
    "rapid_sequence": EvidenceTemplate(
        "Transaction Frequency", RiskBand.HIGH,
        "{detail} - possible invoice splitting",
        compliance_issue=INVOICE_SPLITTING_ISSUE,
    ),
    "incomplete_documentation": EvidenceTemplate(
        "Vendor Documentation", RiskBand.MEDIUM,
        "Incomplete vendor registration documents on file ({detail})",
        recommendation="Request updated vendor documentation",
        compliance_issue="Vendor registration documents incomplete",
    ),
    "price_above_market": EvidenceTemplate(
        "Price Variance", RiskBand.HIGH,
        "Pricing {value:.0%} above market average for similar services",
        recommendation=MARKET_COMPARISON,
    ),
    "unknown_vendor": EvidenceTemplate(
        "Vendor Profile", RiskBand.CRITICAL,
        "Vendor not found in approved vendor database",
        recommendation=VERIFY_VENDOR,
        compliance_issue="Vendor not registered in approved vendor list",
    ),
    "unattributed_transactions": EvidenceTemplate(
        "Vendor Attribution", RiskBand.HIGH,
        "{value:.0f} transactions carry no vendor reference",
        recommendation="Reconcile unattributed payments against the vendor registry",
    ),
    # Documents
    "duplicate_identifier_risk": EvidenceTemplate(
        "Duplicate Document", RiskBand.HIGH,
        "Possible duplicate submission: {detail}",
        recommendation="Verify the document against previously processed submissions",
        compliance_issue="Possible duplicate payment claim",
    ),
    "price_anomaly_risk": EvidenceTemplate(
        "Price Variance", RiskBand.HIGH,
        "Document pricing flagged as anomalous",
        recommendation=MARKET_COMPARISON,
    ),
    "vendor_risk": EvidenceTemplate(
        "Vendor Profile", RiskBand.MEDIUM,
        "Vendor not in pre-approved vendor list",
        recommendation=VERIFY_VENDOR,
    ),
    "missing_fields_risk": EvidenceTemplate(
        "Document Completeness", RiskBand.MEDIUM,
        "Mandatory fields incomplete: {detail}",
        recommendation="Request a complete copy of the document",
        compliance_issue="Missing mandatory document fields",
    ),
    "high_value_document": EvidenceTemplate(
        "Transaction Value", RiskBand.HIGH,
        "High value transaction (₹{value:,.0f}) exceeds standard threshold",
        recommendation="Route for senior approval before payment",
    ),
    "extraction_confidence": EvidenceTemplate(
        "Extraction Quality", RiskBand.LOW,
        "{detail} is below the review threshold",
        recommendation="Manually verify extracted fields",
    ),
    # News keywords
    "keyword:fraud": EvidenceTemplate(
        "Keyword Match", RiskBand.MEDIUM, "Article {detail}", recommendation=CROSS_CHECK_ENTITIES,
    ),
    "keyword:scam": EvidenceTemplate(
        "Keyword Match", RiskBand.MEDIUM, "Article {detail}", recommendation=CROSS_CHECK_ENTITIES,
    ),
    "keyword:corruption": EvidenceTemplate(
        "Keyword Match", RiskBand.MEDIUM, "Article {detail}", recommendation=CROSS_CHECK_ENTITIES,
    ),
    "keyword:embezzlement": EvidenceTemplate(
        "Keyword Match", RiskBand.MEDIUM, "Article {detail}", recommendation=CROSS_CHECK_ENTITIES,
    ),
    "keyword:bribery": EvidenceTemplate(
        "Keyword Match", RiskBand.MEDIUM, "Article {detail}", recommendation=CROSS_CHECK_ENTITIES,
    ),
    "keyword:money laundering": EvidenceTemplate(
        "Keyword Match", RiskBand.HIGH, "Article {detail}", recommendation=CROSS_CHECK_ENTITIES,
    ),
    "keyword:investigation": EvidenceTemplate(
        "Keyword Match", RiskBand.LOW, "Article {detail}", recommendation=TRACK_INVESTIGATION,
    ),
    "keyword:probe": EvidenceTemplate(
        "Keyword Match", RiskBand.LOW, "Article {detail}", recommendation=TRACK_INVESTIGATION,
    ),
}

# keyword:audit, keyword:violation and any unlisted signal
DEFAULT_TEMPLATE = EvidenceTemplate("General", RiskBand.LOW, "{detail}")


def describe(signal: Signal) -> Finding:
    template = EVIDENCE_TEMPLATES.get(signal.name, DEFAULT_TEMPLATE)
    description = template.description.format(
        name=signal.name,
        detail=signal.detail or signal.name,
        value=signal.value,
        crore=signal.value / 10_000_000,
    )
    return Finding(category=template.category, severity=template.severity, description=description)


def build_evidence(signals: Iterable[Signal]) -> Evidence:
    """Findings, recommendations and compliance issues for the triggered signals."""
    findings = []
    recommendations = []
    compliance_issues = []

    for signal in signals:
        if not signal.triggered:
            continue
        template = EVIDENCE_TEMPLATES.get(signal.name, DEFAULT_TEMPLATE)
        findings.append(describe(signal))
        if template.recommendation and template.recommendation not in recommendations:
            recommendations.append(template.recommendation)
        if template.compliance_issue and template.compliance_issue not in compliance_issues:
            compliance_issues.append(template.compliance_issue)

    if not recommendations:
        recommendations.append(FALLBACK_RECOMMENDATION)

    return Evidence(
        findings=tuple(findings),
        recommendations=tuple(recommendations),
        compliance_issues=tuple(compliance_issues),
    )
