"""
Face presence classification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .landmarks import Face, Frame

LOGGER = logging.getLogger(__name__)


class PresenceKind(str, Enum):
    NONE = "none"
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class Presence:
    kind: PresenceKind
    count: int
    face: Optional[Face] = None
    # Set when a lone face was dropped for missing landmarks.
    malformed: bool = False


def classify_presence(frame: Frame) -> Presence:
    """
    Count the faces in a frame.

    A single face lacking any required landmark is reported as NONE with
    ``malformed=True`` so the caller treats it as "no signal" rather than
    failing.
    """
    count = frame.face_count
    if count == 0:
        return Presence(PresenceKind.NONE, 0)
    if count > 1:
        return Presence(PresenceKind.MULTIPLE, count)

    face = frame.faces[0]
    if not face.is_complete:
        LOGGER.warning(
            "Face with %d landmarks is missing required points; treating as absent",
            len(face),
        )
        return Presence(PresenceKind.NONE, 0, malformed=True)
    return Presence(PresenceKind.SINGLE, 1, face=face)
