"""
Fuse iris gaze and head pose into a single attention zone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .gaze import GazeEstimate, IrisGazeEstimator
from .head_pose import HeadPoseClassifier, HeadPoseEstimate
from .landmarks import Face

SCREEN_ZONE = "Screen"
ZONE_ARROW = "→"


class ZoneSource(str, Enum):
    IRIS = "iris"
    HEAD = "head"


@dataclass(frozen=True)
class AttentionResult:
    zone: str
    direction: str
    source: Optional[ZoneSource]
    gaze: GazeEstimate
    head: HeadPoseEstimate

    @property
    def on_screen(self) -> bool:
        return self.source is None


def classify_attention(
    face: Face,
    iris: IrisGazeEstimator,
    head_pose: HeadPoseClassifier,
) -> AttentionResult:
    """
    Iris deviation wins over head pose; a face with neither is on "Screen".
    """
    gaze = iris.estimate(face)
    head = head_pose.estimate(face)
    if gaze.outside_zone:
        return AttentionResult(
            f"Eye{ZONE_ARROW}{gaze.direction}", gaze.direction, ZoneSource.IRIS, gaze, head
        )
    if head.outside_zone:
        return AttentionResult(
            f"Head{ZONE_ARROW}{head.direction}", head.direction, ZoneSource.HEAD, gaze, head
        )
    return AttentionResult(SCREEN_ZONE, "Center", None, gaze, head)
