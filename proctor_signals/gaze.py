"""
Eye gaze estimation from Face Mesh iris landmarks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .landmarks import (
    LEFT_EYE_CORNERS,
    LEFT_EYE_LIDS,
    LEFT_IRIS,
    RIGHT_EYE_CORNERS,
    RIGHT_EYE_LIDS,
    RIGHT_IRIS,
    Face,
)
from .utils import CENTER, compose_direction, normalized_offset

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GazeEstimate:
    direction: str
    horizontal_ratio: float
    vertical_ratio: float
    outside_zone: bool
    degenerate: bool = False


class IrisGazeEstimator:
    """
    Estimate coarse gaze direction from iris position inside each eye.

    Iris offsets are normalized by the eye half-width (x) and half-height (y)
    and averaged across both eyes, so 1.0 means the iris sits on the eye edge.
    """

    def __init__(
        self,
        threshold_x: float = 0.30,
        threshold_y: float = 0.35,
        min_eye_height: float = 0.003,
        mirror: bool = False,
    ) -> None:
        self.threshold_x = threshold_x
        self.threshold_y = threshold_y
        self.min_eye_height = min_eye_height
        self.mirror = mirror

    def estimate(self, face: Face) -> GazeEstimate:
        coords = face.coords
        left_x, left_y, left_height = _eye_offsets(
            coords, LEFT_EYE_CORNERS, LEFT_EYE_LIDS, LEFT_IRIS
        )
        right_x, right_y, right_height = _eye_offsets(
            coords, RIGHT_EYE_CORNERS, RIGHT_EYE_LIDS, RIGHT_IRIS
        )

        # Squashed eyes (extreme angles, squinting) give unreliable iris offsets.
        if left_height < self.min_eye_height or right_height < self.min_eye_height:
            LOGGER.debug(
                "Eye height below %.4f (left=%.4f right=%.4f); gaze treated as centered",
                self.min_eye_height,
                left_height,
                right_height,
            )
            return GazeEstimate(CENTER, 0.0, 0.0, False, degenerate=True)

        horizontal_ratio = float(np.mean([left_x, right_x]))
        vertical_ratio = float(np.mean([left_y, right_y]))
        direction, outside = compose_direction(
            horizontal_ratio,
            vertical_ratio,
            self.threshold_x,
            self.threshold_y,
            mirror=self.mirror,
        )
        return GazeEstimate(direction, horizontal_ratio, vertical_ratio, outside)


def _eye_offsets(
    coords: np.ndarray,
    eye_corners: Tuple[int, int],
    eyelids: Tuple[int, int],
    iris_index: int,
) -> Tuple[float, float, float]:
    outer_corner = coords[eye_corners[0]]
    inner_corner = coords[eye_corners[1]]
    top_lid = coords[eyelids[0]]
    bottom_lid = coords[eyelids[1]]
    iris_center = coords[iris_index]

    center_x = (outer_corner[0] + inner_corner[0]) / 2.0
    center_y = (top_lid[1] + bottom_lid[1]) / 2.0
    width = abs(outer_corner[0] - inner_corner[0])
    height = abs(bottom_lid[1] - top_lid[1])

    x_offset = normalized_offset(iris_center[0], center_x, width / 2.0)
    y_offset = normalized_offset(iris_center[1], center_y, height / 2.0)
    return x_offset, y_offset, float(height)
