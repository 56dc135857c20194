"""
Bounded trust score bookkeeping.
"""

from __future__ import annotations

import math
from enum import Enum

MIN_SCORE = 0.0
MAX_SCORE = 100.0


class ScoreTier(str, Enum):
    NOMINAL = "nominal"
    CAUTION = "caution"
    HIGH_RISK = "high_risk"

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]


_TIER_LABELS = {
    ScoreTier.NOMINAL: "LOW RISK",
    ScoreTier.CAUTION: "MODERATE",
    ScoreTier.HIGH_RISK: "HIGH RISK",
}


def tier_for(score: float) -> ScoreTier:
    """
    Presentation bucket for a score: >80 nominal, >50 caution, else high risk.
    """
    if score > 80:
        return ScoreTier.NOMINAL
    if score > 50:
        return ScoreTier.CAUTION
    return ScoreTier.HIGH_RISK


class TrustScoreLedger:
    """
    Trust score clamped to [0, 100].

    There is no time-based decay: the score only moves through explicit
    penalties and recoveries.
    """

    def __init__(self, initial: float = MAX_SCORE) -> None:
        if not MIN_SCORE <= initial <= MAX_SCORE:
            raise ValueError(f"Initial score must lie within [0, 100], got {initial}")
        self.score = float(initial)

    def penalize(self, amount: float) -> float:
        """
        Subtract ``amount`` (floored at 0). Returns the change actually applied.
        """
        _check_amount(amount)
        previous = self.score
        self.score = max(MIN_SCORE, self.score - amount)
        return self.score - previous

    def recover(self, amount: float) -> float:
        """
        Add ``amount`` (capped at 100). Returns the change actually applied.
        """
        _check_amount(amount)
        previous = self.score
        self.score = min(MAX_SCORE, self.score + amount)
        return self.score - previous

    @property
    def tier(self) -> ScoreTier:
        return tier_for(self.score)


def _check_amount(amount: float) -> None:
    if amount < 0 or not math.isfinite(amount):
        raise ValueError(f"Score adjustments must be finite and non-negative, got {amount}")
