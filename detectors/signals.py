"""
Signal type shared by every extractor.

A signal is one named observation about a subject. Extractors emit every
signal they evaluate, triggered or not, in a fixed order; only triggered
signals add their weight to the score.
"""

from dataclasses import dataclass

from risk_config import ScoringProfile


@dataclass(frozen=True)
class Signal:
    """A single weighted observation produced by an extractor."""
    name: str
    triggered: bool
    weight: int
    detail: str = ""
    value: float = 0.0  # continuous quantity behind the signal (amount, count, days)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "triggered": self.triggered,
            "weight": self.weight,
            "detail": self.detail,
            "value": self.value,
        }


def make_signal(
    profile: ScoringProfile,
    name: str,
    triggered: bool,
    detail: str = "",
    value: float = 0.0,
) -> Signal:
    """Build a signal whose weight comes from the profile's weight table."""
    return Signal(
        name=name,
        triggered=bool(triggered),
        weight=max(0, profile.weight(name)),
        detail=detail,
        value=float(value),
    )


def triggered_only(signals) -> list[Signal]:
    return [s for s in signals if s.triggered]
