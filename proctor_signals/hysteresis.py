"""
Net frame counter that turns sustained off-screen attention into a single trip.
"""

from __future__ import annotations


class HysteresisCounter:
    """
    Count off-zone frames, decrementing (not resetting) on on-screen frames.

    Brief glances are absorbed by later centered frames; a deviation that keeps
    the count above ``threshold`` trips once and starts over from zero.
    """

    def __init__(self, threshold: int = 8) -> None:
        if threshold < 1:
            raise ValueError("Hysteresis threshold must be at least 1")
        self.threshold = int(threshold)
        self.value = 0

    def observe(self, off_zone: bool) -> bool:
        """
        Feed one evaluated frame. Returns True when the counter trips.
        """
        if not off_zone:
            self.value = max(0, self.value - 1)
            return False
        self.value += 1
        if self.value > self.threshold:
            self.value = 0
            return True
        return False

    def reset(self) -> None:
        self.value = 0
