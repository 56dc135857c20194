"""
High-level package exports for the integrity signal engine.
"""

from .config import ConfigurationError, EngineConfig, load_config
from .events import AlertRaised, LoggingSink, RecordingSink, ScoreChanged, fan_out
from .landmarks import Face, Frame, LandmarkPoint, frame_from_mediapipe, frame_from_payload
from .pipeline import (
    EngineState,
    EvaluationState,
    IntegrityEngine,
    Verdict,
    load_default_engine,
)
from .presence import PresenceKind
from .report import AlertTally, SessionReport, build_report
from .scoring import ScoreTier, tier_for

__all__ = [
    "AlertRaised",
    "AlertTally",
    "ConfigurationError",
    "EngineConfig",
    "EngineState",
    "EvaluationState",
    "Face",
    "Frame",
    "IntegrityEngine",
    "LandmarkPoint",
    "LoggingSink",
    "PresenceKind",
    "RecordingSink",
    "ScoreChanged",
    "ScoreTier",
    "SessionReport",
    "Verdict",
    "build_report",
    "fan_out",
    "frame_from_mediapipe",
    "frame_from_payload",
    "load_config",
    "load_default_engine",
    "tier_for",
]
