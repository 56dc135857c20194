"""
Eye-aspect-ratio blink detection.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .landmarks import (
    LEFT_EYE_CORNERS,
    LEFT_EYE_LIDS,
    RIGHT_EYE_CORNERS,
    RIGHT_EYE_LIDS,
    Face,
)


@dataclass(frozen=True)
class BlinkMeasurement:
    left_ear: float
    right_ear: float
    is_blinking: bool

    @property
    def average_ear(self) -> float:
        return (self.left_ear + self.right_ear) / 2.0


class BlinkDetector:
    """
    Flag frames where the averaged eye aspect ratio drops below a threshold.
    """

    def __init__(self, threshold: float = 0.08) -> None:
        if threshold <= 0:
            raise ValueError("Blink threshold must be positive")
        self.threshold = threshold

    def measure(self, face: Face) -> BlinkMeasurement:
        coords = face.coords
        left = _eye_ear(coords, LEFT_EYE_LIDS, LEFT_EYE_CORNERS)
        right = _eye_ear(coords, RIGHT_EYE_LIDS, RIGHT_EYE_CORNERS)
        average = (left + right) / 2.0
        return BlinkMeasurement(left, right, average < self.threshold)

    def is_blinking(self, face: Face) -> bool:
        return self.measure(face).is_blinking


def eye_aspect_ratio(
    top_y: float, bottom_y: float, outer_x: float, inner_x: float
) -> float:
    """
    Lid gap over eye width. A zero-width eye reads as fully open (1.0).
    """
    width = abs(outer_x - inner_x)
    if width == 0:
        return 1.0
    return abs(top_y - bottom_y) / width


def _eye_ear(coords: np.ndarray, lids, corners) -> float:
    top, bottom = coords[lids[0]], coords[lids[1]]
    outer, inner = coords[corners[0]], coords[corners[1]]
    return float(eye_aspect_ratio(top[1], bottom[1], outer[0], inner[0]))
