"""
Alert Handoff

Turns high and critical assessments into alert records for the caller to
persist. The alert carries the assessment's signals and
recommendations verbatim as its explanation payload.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from risk_config import RiskBand
from risk_scorer import RiskAssessment

ALERT_TITLES = {
    "vendor": "High Risk Vendor Detected",
    "transaction-batch": "High Risk Transaction Batch Detected",
    "document": "High Risk Document Detected",
    "news-item": "High Relevance News Item",
}


@dataclass(frozen=True)
class Alert:
    subject_id: str
    subject_type: str
    severity: RiskBand
    title: str
    message: str
    signals: tuple
    recommendations: tuple

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "subject_type": self.subject_type,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "signals": [s.to_dict() for s in self.signals],
            "recommendations": list(self.recommendations),
        }


def build_alert(assessment: RiskAssessment) -> Optional[Alert]:
    """Alert for a high or critical assessment, None otherwise."""
    if not assessment.needs_alert:
        return None

    subject_type = assessment.subject_type.value
    return Alert(
        subject_id=assessment.subject_id,
        subject_type=subject_type,
        severity=assessment.band,
        title=ALERT_TITLES.get(subject_type, "High Risk Subject Detected"),
        message=(
            f"{subject_type.capitalize()} {assessment.subject_id} flagged with "
            f"{assessment.score}% risk score"
        ),
        signals=assessment.signals,
        recommendations=assessment.recommendations,
    )


def build_alerts(assessments: Iterable[RiskAssessment]) -> list[Alert]:
    return [alert for alert in map(build_alert, assessments) if alert is not None]
