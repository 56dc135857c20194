"""
Session summary built from the alerts an engine dispatched.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from .alerts import AlertKind
from .events import AlertRaised
from .scoring import ScoreTier, tier_for

EYE_ALERT_LIMIT = 5
HEAD_ALERT_LIMIT = 10


@dataclass
class SessionReport:
    score: float
    tier: ScoreTier
    total_alerts: int
    counts: Dict[str, int] = field(default_factory=dict)
    observations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "tier": self.tier.value,
            "risk": self.tier.label,
            "total_alerts": self.total_alerts,
            "counts": dict(self.counts),
            "observations": list(self.observations),
        }


class AlertTally:
    """
    Event sink that keeps running alert counts for a whole session.

    Counts are never evicted, so a report stays complete however long the
    session runs.
    """

    def __init__(self) -> None:
        self.counts: Counter = Counter()

    def __call__(self, event: Any) -> None:
        if isinstance(event, AlertRaised):
            self.counts[event.kind] += 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def report(self, score: float) -> SessionReport:
        return summarize_counts(self.counts, score)


def build_report(events: Iterable[Any], score: float) -> SessionReport:
    """
    Summarize dispatched alerts into counts per kind plus reviewer notes.

    Non-alert events in ``events`` are ignored.
    """
    tally = AlertTally()
    for event in events:
        tally(event)
    return tally.report(score)


def summarize_counts(tally: Mapping[AlertKind, int], score: float) -> SessionReport:
    """
    Build a report from per-kind alert counts.
    """
    counts = {kind.value: tally.get(kind, 0) for kind in AlertKind}
    total = sum(counts.values())

    observations: List[str] = []
    if counts[AlertKind.EYE.value] > EYE_ALERT_LIMIT:
        observations.append(
            "Persistent deviations: gaze repeatedly left the assessment area."
        )
    if counts[AlertKind.MULTIPLE_FACES.value] > 0:
        observations.append("Unauthorized presence: additional faces were detected.")
    if counts[AlertKind.HEAD.value] > HEAD_ALERT_LIMIT:
        observations.append("Pose flags: frequent irregular head rotation.")
    if counts[AlertKind.TAB_SWITCH.value] > 0:
        observations.append("Focus lost: the assessment tab was left during the session.")
    if not total:
        observations.append("No notable behavioral violations detected.")

    return SessionReport(
        score=score,
        tier=tier_for(score),
        total_alerts=total,
        counts=counts,
        observations=observations,
    )
