"""
Shared fixtures: synthetic Face Mesh geometry and a controllable clock.
"""

from __future__ import annotations

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from proctor_signals.landmarks import Face, Frame

# Eye boxes are 0.06 wide (half-width 0.03) and, when open, 0.02 tall
# (half-height 0.01). The face box is 0.30 wide and 0.40 tall.
EYE_HALF_WIDTH = 0.03
EYE_Y = 0.40
FACE_HALF_WIDTH = 0.15
FACE_HALF_HEIGHT = 0.20


def make_face(
    gaze_x: float = 0.0,
    gaze_y: float = 0.0,
    head_x: float = 0.0,
    head_y: float = 0.0,
    eye_height: float = 0.02,
    n_points: int = 478,
) -> Face:
    """
    Build a face whose iris and nose offsets equal the requested normalized values.
    """
    coords = np.full((max(n_points, 478), 3), 0.5, dtype=np.float64)
    coords[:, 2] = 0.0
    half_eye_height = eye_height / 2.0

    eyes = (
        # outer, inner, top, bottom, iris, center x
        (33, 133, 159, 145, 468, 0.43),
        (263, 362, 386, 374, 473, 0.57),
    )
    for outer, inner, top, bottom, iris, center_x in eyes:
        coords[outer, :2] = (center_x - EYE_HALF_WIDTH, EYE_Y)
        coords[inner, :2] = (center_x + EYE_HALF_WIDTH, EYE_Y)
        coords[top, :2] = (center_x, EYE_Y - half_eye_height)
        coords[bottom, :2] = (center_x, EYE_Y + half_eye_height)
        coords[iris, :2] = (
            center_x + gaze_x * EYE_HALF_WIDTH,
            EYE_Y + gaze_y * half_eye_height,
        )

    coords[234, :2] = (0.5 - FACE_HALF_WIDTH, 0.5)
    coords[454, :2] = (0.5 + FACE_HALF_WIDTH, 0.5)
    coords[10, :2] = (0.5, 0.5 - FACE_HALF_HEIGHT)
    coords[152, :2] = (0.5, 0.5 + FACE_HALF_HEIGHT)
    coords[1, :2] = (0.5 + head_x * FACE_HALF_WIDTH, 0.5 + head_y * FACE_HALF_HEIGHT)
    return Face.from_array(coords[:n_points])


def make_frame(*faces: Face) -> Frame:
    return Frame(faces)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def centered_face():
    return make_face()


@pytest.fixture
def blinking_face():
    return make_face(eye_height=0.002)
