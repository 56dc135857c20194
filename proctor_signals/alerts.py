"""
Alert vocabulary and time-window de-duplication.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Dict, Optional

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], float]


class AlertKind(str, Enum):
    NO_FACE = "no_face"
    MULTIPLE_FACES = "multiple_faces"
    EYE = "eye"
    HEAD = "head"
    TAB_SWITCH = "tab_switch"


NO_FACE_MESSAGE = "⚠️ No face detected"
MULTIPLE_FACES_MESSAGE = "👥 Multiple faces detected"
TAB_SWITCH_MESSAGE = "🚫 Tab switched"
EYE_ICON = "👁️"
HEAD_ICON = "🔄"


def zone_message(kind: AlertKind, zone: str) -> str:
    """
    Alert text for a sustained off-screen zone, e.g. "👁️ Eye→Right".
    """
    icon = EYE_ICON if kind is AlertKind.EYE else HEAD_ICON
    return f"{icon} {zone}"


class AlertThrottler:
    """
    Drop repeats of the same message inside a sliding time window.

    Keys are the message text; each key remembers when it was last let
    through. The clock must be monotonic.
    """

    def __init__(self, window: float = 1.5, clock: Optional[Clock] = None) -> None:
        if window < 0:
            raise ValueError("Alert window must be non-negative")
        self.window = window
        self.clock = clock or time.monotonic
        self.last_emitted: Dict[str, float] = {}

    def should_emit(self, message: str) -> bool:
        """
        Record and allow ``message`` unless it was allowed within the window.
        """
        now = self.clock()
        previous = self.last_emitted.get(message)
        if previous is not None and now - previous < self.window:
            LOGGER.debug("Suppressed repeat alert %r (%.3fs ago)", message, now - previous)
            return False
        self.last_emitted[message] = now
        return True

    def emit(self, message: str, dispatch: Callable[[str], None]) -> bool:
        """
        Dispatch ``message`` if the throttle allows it. Returns whether it was sent.
        """
        if not self.should_emit(message):
            return False
        dispatch(message)
        return True
