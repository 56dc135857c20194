"""
High-level orchestration for the integrity signal engine.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .alerts import (
    MULTIPLE_FACES_MESSAGE,
    NO_FACE_MESSAGE,
    TAB_SWITCH_MESSAGE,
    AlertKind,
    AlertThrottler,
    Clock,
    zone_message,
)
from .attention import ZoneSource, classify_attention
from .blink import BlinkDetector
from .config import EngineConfig
from .events import AlertRaised, EventSink, LoggingSink, ScoreChanged, safe_dispatch
from .gaze import IrisGazeEstimator
from .head_pose import HeadPoseClassifier, HeadPoseThresholds
from .hysteresis import HysteresisCounter
from .landmarks import Frame
from .presence import Presence, PresenceKind, classify_presence
from .scoring import ScoreTier, TrustScoreLedger

LOGGER = logging.getLogger(__name__)


class EngineLifecycle(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"


class EvaluationState(str, Enum):
    BLINKING = "blinking"
    CENTERED = "centered"
    FLAGGED = "flagged"


@dataclass(frozen=True)
class EngineState:
    """
    Point-in-time copy of everything the engine carries between frames.
    """

    trust_score: float
    gaze_out_counter: int
    last_alert_timestamp: Dict[str, float] = field(default_factory=dict)
    frames_processed: int = 0
    last_reported_score: float = 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trust_score": self.trust_score,
            "gaze_out_counter": self.gaze_out_counter,
            "last_alert_timestamp": dict(self.last_alert_timestamp),
            "frames_processed": self.frames_processed,
            "last_reported_score": self.last_reported_score,
        }


@dataclass(frozen=True)
class Verdict:
    presence: PresenceKind
    face_count: int
    blink: bool
    zone: Optional[str]
    state: EvaluationState
    score: float
    alerts: List[str]
    frame_index: int
    source: Optional[ZoneSource] = None
    malformed: bool = False
    ear: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "presence": self.presence.value,
            "face_count": self.face_count,
            "malformed": self.malformed,
            "blink": self.blink,
            "ear": self.ear,
            "zone": self.zone,
            "source": self.source.value if self.source else None,
            "state": self.state.value,
            "score": self.score,
            "alerts": list(self.alerts),
            "frame_index": self.frame_index,
        }


class IntegrityEngine:
    """
    Turn landmark frames into attention verdicts, a trust score and alerts.

    One engine serves one monitoring session. ``process`` is synchronous and
    must be called from a single writer; other threads should read through
    ``snapshot()``.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        sink: EventSink | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.sink = sink
        cfg = self.config

        self.blink_detector = BlinkDetector(cfg.blink_threshold)
        self.iris = IrisGazeEstimator(
            threshold_x=cfg.iris_threshold_x,
            threshold_y=cfg.iris_threshold_y,
            min_eye_height=cfg.min_eye_height,
            mirror=cfg.mirror,
        )
        self.head_pose = HeadPoseClassifier(
            HeadPoseThresholds(x=cfg.head_threshold_x, y=cfg.head_threshold_y),
            mirror=cfg.mirror,
        )
        self.hysteresis = HysteresisCounter(int(cfg.suspicion_threshold))
        self.ledger = TrustScoreLedger(cfg.initial_score)
        self.throttler = AlertThrottler(cfg.alert_window_seconds, clock=clock)

        self.lifecycle = EngineLifecycle.IDLE
        self.frames_processed = 0
        self._last_reported_score = self.ledger.score

    @property
    def score(self) -> float:
        return self.ledger.score

    @property
    def tier(self) -> ScoreTier:
        return self.ledger.tier

    def snapshot(self) -> EngineState:
        return EngineState(
            trust_score=self.ledger.score,
            gaze_out_counter=self.hysteresis.value,
            last_alert_timestamp=dict(self.throttler.last_emitted),
            frames_processed=self.frames_processed,
            last_reported_score=self._last_reported_score,
        )

    def process(self, frame: Frame) -> Verdict:
        """
        Classify one frame and update the session state.
        """
        self.lifecycle = EngineLifecycle.EVALUATING
        self.frames_processed += 1
        frame_index = self.frames_processed
        alerts: List[str] = []
        cfg = self.config

        presence = classify_presence(frame)
        if presence.kind is PresenceKind.NONE:
            self._presence_alert(
                AlertKind.NO_FACE, NO_FACE_MESSAGE, cfg.no_face_penalty, alerts
            )
            verdict = self._verdict(
                presence.kind,
                presence.count,
                EvaluationState.FLAGGED,
                alerts,
                malformed=presence.malformed,
            )
        elif presence.kind is PresenceKind.MULTIPLE:
            self._presence_alert(
                AlertKind.MULTIPLE_FACES,
                MULTIPLE_FACES_MESSAGE,
                cfg.multiple_faces_penalty,
                alerts,
            )
            verdict = self._verdict(
                presence.kind, presence.count, EvaluationState.FLAGGED, alerts
            )
        else:
            verdict = self._evaluate_face(presence, alerts)

        self._report_score()
        LOGGER.debug(
            "Frame %d: presence=%s zone=%s state=%s score=%.2f",
            frame_index,
            verdict.presence.value,
            verdict.zone,
            verdict.state.value,
            verdict.score,
        )
        return verdict

    def record_tab_switch(self) -> List[str]:
        """
        Apply the one-shot penalty for the candidate leaving the assessment tab.

        Returns the alert messages dispatched (empty if throttled).
        """
        self.ledger.penalize(self.config.tab_switch_penalty)
        alerts: List[str] = []
        self._dispatch_alert(AlertKind.TAB_SWITCH, TAB_SWITCH_MESSAGE, alerts)
        self._report_score()
        return alerts

    def _evaluate_face(self, presence: Presence, alerts: List[str]) -> Verdict:
        face = presence.face
        blink = self.blink_detector.measure(face)
        if blink.is_blinking:
            return self._verdict(
                presence.kind,
                presence.count,
                EvaluationState.BLINKING,
                alerts,
                blink=True,
                ear=blink.average_ear,
            )

        attention = classify_attention(face, self.iris, self.head_pose)
        if attention.on_screen:
            self.hysteresis.observe(False)
            self.ledger.recover(self.config.recovery_per_frame)
            state = EvaluationState.CENTERED
        else:
            if self.hysteresis.observe(True):
                self.ledger.penalize(self.config.gaze_penalty)
                kind = (
                    AlertKind.EYE
                    if attention.source is ZoneSource.IRIS
                    else AlertKind.HEAD
                )
                self._dispatch_alert(kind, zone_message(kind, attention.zone), alerts)
            state = EvaluationState.FLAGGED

        return self._verdict(
            presence.kind,
            presence.count,
            state,
            alerts,
            zone=attention.zone,
            source=attention.source,
            ear=blink.average_ear,
        )

    def _presence_alert(
        self, kind: AlertKind, message: str, penalty: float, alerts: List[str]
    ) -> None:
        # Presence penalties share the alert throttle so a sustained absence
        # costs one penalty per window, not one per frame.
        if not self.throttler.should_emit(message):
            return
        self.ledger.penalize(penalty)
        self._send_alert(kind, message, alerts)

    def _dispatch_alert(self, kind: AlertKind, message: str, alerts: List[str]) -> None:
        if self.throttler.should_emit(message):
            self._send_alert(kind, message, alerts)

    def _send_alert(self, kind: AlertKind, message: str, alerts: List[str]) -> None:
        alerts.append(message)
        LOGGER.info("Alert %r at frame %d", message, self.frames_processed)
        safe_dispatch(
            self.sink,
            AlertRaised(kind, message, self.ledger.score, self.frames_processed),
        )

    def _report_score(self) -> None:
        current = self.ledger.score
        if math.floor(current) == math.floor(self._last_reported_score):
            return
        event = ScoreChanged(
            previous=self._last_reported_score,
            current=current,
            tier=self.ledger.tier,
            frame_index=self.frames_processed,
        )
        self._last_reported_score = current
        safe_dispatch(self.sink, event)

    def _verdict(
        self,
        presence: PresenceKind,
        face_count: int,
        state: EvaluationState,
        alerts: List[str],
        *,
        blink: bool = False,
        zone: Optional[str] = None,
        source: Optional[ZoneSource] = None,
        malformed: bool = False,
        ear: Optional[float] = None,
    ) -> Verdict:
        return Verdict(
            presence=presence,
            face_count=face_count,
            blink=blink,
            zone=zone,
            state=state,
            score=self.ledger.score,
            alerts=alerts,
            frame_index=self.frames_processed,
            source=source,
            malformed=malformed,
            ear=ear,
        )


def load_default_engine(sink: EventSink | None = None) -> IntegrityEngine:
    """
    Convenience helper to build an engine with repository defaults.
    """

    return IntegrityEngine(sink=sink or LoggingSink())
