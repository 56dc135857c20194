"""
Small numeric helpers shared by the gaze and head pose estimators.
"""

from __future__ import annotations

from typing import Any, Tuple

CENTER = "Center"


def to_float(value: Any) -> float:
    """
    Convert numeric-like values (including numpy scalars) to primitive float.
    """
    return float(value)


def normalized_offset(value: float, center: float, half_extent: float) -> float:
    """
    Offset of ``value`` from ``center`` in units of ``half_extent``; 0 when degenerate.
    """
    if half_extent == 0:
        return 0.0
    return to_float((value - center) / half_extent)


def compose_direction(
    x_offset: float,
    y_offset: float,
    threshold_x: float,
    threshold_y: float,
    mirror: bool = False,
) -> Tuple[str, bool]:
    """
    Map signed offsets to a label such as "Right", "Up" or "Right-Up".

    Positive x reads as "Right" and positive y as "Down" (image axes);
    ``mirror`` swaps the horizontal labels.

    Returns:
        (direction, outside_zone). Direction is "Center" when neither axis trips.
    """
    direction = ""
    if x_offset > threshold_x:
        direction = "Left" if mirror else "Right"
    elif x_offset < -threshold_x:
        direction = "Right" if mirror else "Left"

    if y_offset < -threshold_y:
        direction = f"{direction}-Up" if direction else "Up"
    elif y_offset > threshold_y:
        direction = f"{direction}-Down" if direction else "Down"

    if not direction:
        return CENTER, False
    return direction, True
