"""
Head pose analysis helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Tuple

from .landmarks import CHIN, FOREHEAD, LEFT_CHEEK, NOSE_TIP, RIGHT_CHEEK, Face
from .utils import compose_direction, normalized_offset


@dataclass
class HeadPoseThresholds:
    x: float = 0.18
    y: float = 0.22


@dataclass(frozen=True)
class HeadPoseEstimate:
    direction: str
    x_offset: float
    y_offset: float
    outside_zone: bool


class HeadPoseClassifier:
    """
    Classify coarse head orientation from the nose position inside the face box.

    Offsets are the nose displacement from the cheek midpoint (x) and the
    forehead/chin midpoint (y), in units of the face half-width/half-height.
    """

    def __init__(
        self,
        thresholds: HeadPoseThresholds | Mapping[str, float] | None = None,
        mirror: bool = False,
    ) -> None:
        if thresholds is None:
            thresholds = HeadPoseThresholds()
        elif isinstance(thresholds, Mapping):
            thresholds = HeadPoseThresholds(
                x=thresholds.get("x", 0.18),
                y=thresholds.get("y", 0.22),
            )
        if thresholds.x < 0 or thresholds.y < 0:
            raise ValueError("Head pose thresholds must be non-negative")
        self.thresholds = thresholds
        self.mirror = mirror

    def estimate(self, face: Face) -> HeadPoseEstimate:
        x_offset, y_offset = self.offsets(face)
        direction, outside = self.classify(x_offset, y_offset)
        return HeadPoseEstimate(direction, x_offset, y_offset, outside)

    def classify(self, x_offset: float, y_offset: float) -> Tuple[str, bool]:
        """
        Return a direction label for the provided offsets.
        """
        t = self.thresholds
        return compose_direction(x_offset, y_offset, t.x, t.y, mirror=self.mirror)

    @staticmethod
    def offsets(face: Face) -> Tuple[float, float]:
        coords = face.coords
        nose = coords[NOSE_TIP]
        left_cheek = coords[LEFT_CHEEK]
        right_cheek = coords[RIGHT_CHEEK]
        forehead = coords[FOREHEAD]
        chin = coords[CHIN]

        mid_x = (left_cheek[0] + right_cheek[0]) / 2.0
        face_width = abs(right_cheek[0] - left_cheek[0])
        mid_y = (forehead[1] + chin[1]) / 2.0
        face_height = abs(chin[1] - forehead[1])

        return (
            normalized_offset(nose[0], mid_x, face_width / 2.0),
            normalized_offset(nose[1], mid_y, face_height / 2.0),
        )
