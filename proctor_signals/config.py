"""
Centralised configuration helpers for the integrity signal engine.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping


# Iris offsets are expressed as a fraction of the eye half-width/half-height.
DEFAULT_IRIS_THRESHOLDS: Dict[str, float] = {
    "x": 0.30,
    "y": 0.35,
}

# Head offsets are expressed as a fraction of the face half-width/half-height.
DEFAULT_HEAD_POSE_THRESHOLDS: Dict[str, float] = {
    "x": 0.18,
    "y": 0.22,
}

DEFAULT_PENALTIES: Dict[str, float] = {
    "no_face": 1.0,
    "multiple_faces": 5.0,
    "gaze": 3.0,
    "tab_switch": 10.0,
}

CONFIG_ENV_VAR = "PROCTOR_CONFIG"


class ConfigurationError(ValueError):
    """
    Raised when an engine configuration value is out of range.
    """


@dataclass(frozen=True)
class EngineConfig:
    """
    Tunables for the integrity signal engine.
    """

    blink_threshold: float = 0.08
    iris_threshold_x: float = DEFAULT_IRIS_THRESHOLDS["x"]
    iris_threshold_y: float = DEFAULT_IRIS_THRESHOLDS["y"]
    min_eye_height: float = 0.003
    head_threshold_x: float = DEFAULT_HEAD_POSE_THRESHOLDS["x"]
    head_threshold_y: float = DEFAULT_HEAD_POSE_THRESHOLDS["y"]
    suspicion_threshold: int = 8
    no_face_penalty: float = DEFAULT_PENALTIES["no_face"]
    multiple_faces_penalty: float = DEFAULT_PENALTIES["multiple_faces"]
    gaze_penalty: float = DEFAULT_PENALTIES["gaze"]
    tab_switch_penalty: float = DEFAULT_PENALTIES["tab_switch"]
    recovery_per_frame: float = 0.1
    alert_window_seconds: float = 1.5
    initial_score: float = 100.0
    # Swap Left/Right labels for both estimators (selfie-style camera view).
    mirror: bool = False

    def __post_init__(self) -> None:
        for item in fields(self):
            if item.name == "mirror":
                if not isinstance(self.mirror, bool):
                    raise ConfigurationError(f"mirror must be true or false, got {self.mirror!r}")
                continue
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{item.name} must be numeric, got {value!r}")
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(
                    f"{item.name} must be a finite non-negative number, got {value!r}"
                )
        if self.blink_threshold == 0:
            raise ConfigurationError("blink_threshold must be positive")
        if int(self.suspicion_threshold) != self.suspicion_threshold:
            raise ConfigurationError("suspicion_threshold must be a whole number of frames")
        if self.suspicion_threshold < 1:
            raise ConfigurationError("suspicion_threshold must be at least 1")
        if self.initial_score > 100:
            raise ConfigurationError("initial_score must lie within [0, 100]")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EngineConfig":
        """
        Build a configuration from a plain mapping, rejecting unknown keys.
        """
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(values))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def resolve_path(path_like: Any) -> Path:
    """
    Convert a configuration value to a pathlib.Path, expanding user and vars.
    """
    if isinstance(path_like, Path):
        return path_like
    return Path(str(path_like)).expanduser().resolve()


def load_config(path_like: Any) -> EngineConfig:
    """
    Read an EngineConfig from a JSON document.

    Raises:
        ConfigurationError: When the file is not a JSON object or holds bad values.
    """
    path = resolve_path(path_like)
    with path.open("r", encoding="utf-8") as handle:
        try:
            raw = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration in {path} must be a JSON object")
    return EngineConfig.from_mapping(raw)
