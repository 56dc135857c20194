"""
Landmark data model shared by every classifier.

Faces follow the MediaPipe Face Mesh topology with refined iris points, so
anatomical meaning is carried by index position.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, NamedTuple, Sequence, Tuple

import numpy as np


NOSE_TIP = 1
BROW_CENTER = 9
FOREHEAD = 10
MOUTH_CENTER = 13
CHIN = 152
LEFT_CHEEK = 234
RIGHT_CHEEK = 454

LEFT_EYE_CORNERS = (33, 133)  # outer, inner
RIGHT_EYE_CORNERS = (263, 362)
LEFT_EYE_LIDS = (159, 145)  # upper, lower
RIGHT_EYE_LIDS = (386, 374)
LEFT_IRIS = 468
RIGHT_IRIS = 473

MIN_LANDMARKS = 474

REQUIRED_INDICES: Tuple[int, ...] = tuple(
    sorted(
        {
            NOSE_TIP,
            FOREHEAD,
            CHIN,
            LEFT_CHEEK,
            RIGHT_CHEEK,
            LEFT_IRIS,
            RIGHT_IRIS,
            *LEFT_EYE_CORNERS,
            *RIGHT_EYE_CORNERS,
            *LEFT_EYE_LIDS,
            *RIGHT_EYE_LIDS,
        }
    )
)


class LandmarkPoint(NamedTuple):
    x: float
    y: float
    z: float = 0.0


class Face:
    """
    Immutable, ordered landmark sequence for one detected face.
    """

    __slots__ = ("_coords",)

    def __init__(self, points: Iterable[Any]) -> None:
        coords = np.array([_coerce_point(point) for point in points], dtype=np.float64)
        if coords.size == 0:
            coords = coords.reshape(0, 3)
        coords.setflags(write=False)
        self._coords = coords

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Face":
        values = np.asarray(array, dtype=np.float64)
        if values.ndim != 2 or values.shape[1] not in (2, 3):
            raise ValueError(f"Expected an (N, 2) or (N, 3) array, got {values.shape}")
        if values.shape[1] == 2:
            values = np.column_stack([values, np.zeros(len(values))])
        face = cls.__new__(cls)
        coords = values.copy()
        coords.setflags(write=False)
        face._coords = coords
        return face

    @property
    def coords(self) -> np.ndarray:
        return self._coords

    def __len__(self) -> int:
        return len(self._coords)

    def point(self, index: int) -> LandmarkPoint:
        x, y, z = self._coords[index]
        return LandmarkPoint(float(x), float(y), float(z))

    @property
    def is_complete(self) -> bool:
        """
        True when every landmark the classifiers read is present and finite.
        """
        if len(self._coords) < MIN_LANDMARKS:
            return False
        return bool(np.isfinite(self._coords[list(REQUIRED_INDICES)]).all())


class Frame:
    """
    Detector output for a single capture instant.
    """

    __slots__ = ("faces",)

    def __init__(self, faces: Sequence[Face] = ()) -> None:
        self.faces: Tuple[Face, ...] = tuple(faces)

    @property
    def face_count(self) -> int:
        return len(self.faces)


def frame_from_payload(payload: Mapping[str, Any]) -> Frame:
    """
    Build a Frame from a JSON-style mapping.

    Expected shape: ``{"faces": [[[x, y, z], ...], ...]}``. Points may also be
    ``{"x": .., "y": .., "z": ..}`` objects.

    Raises:
        ValueError: When the payload structure cannot be interpreted.
    """
    if not isinstance(payload, Mapping):
        raise ValueError("Landmark payload must be a JSON object")
    faces = payload.get("faces")
    if faces is None:
        raise ValueError("Landmark payload is missing 'faces'")
    if not isinstance(faces, (list, tuple)):
        raise ValueError("'faces' must be a list of landmark lists")
    parsed = []
    for idx, face in enumerate(faces):
        if not isinstance(face, (list, tuple)):
            raise ValueError(f"Face {idx} must be a list of points")
        try:
            parsed.append(Face(face))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Face {idx} has an invalid point: {exc}") from exc
    return Frame(parsed)


def frame_from_mediapipe(results: Any) -> Frame:
    """
    Convert a MediaPipe Face Mesh result into a Frame.

    Accepts any object exposing ``multi_face_landmarks`` whose entries carry a
    ``landmark`` sequence of objects with ``x``/``y``/``z`` attributes.
    """
    mesh_landmarks = getattr(results, "multi_face_landmarks", None) or []
    faces = []
    for landmarks in mesh_landmarks:
        points = getattr(landmarks, "landmark", landmarks)
        faces.append(
            Face(
                (landmark.x, landmark.y, getattr(landmark, "z", 0.0))
                for landmark in points
            )
        )
    return Frame(faces)


def _coerce_point(point: Any) -> Tuple[float, float, float]:
    if isinstance(point, Mapping):
        return (
            float(point["x"]),
            float(point["y"]),
            float(point.get("z", 0.0)),
        )
    if hasattr(point, "x") and hasattr(point, "y"):
        return float(point.x), float(point.y), float(getattr(point, "z", 0.0))
    values = tuple(point)
    if len(values) == 2:
        return float(values[0]), float(values[1]), 0.0
    if len(values) != 3:
        raise ValueError(f"Expected 2 or 3 coordinates, got {len(values)}")
    return float(values[0]), float(values[1]), float(values[2])
