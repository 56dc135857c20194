"""
Events emitted by the engine and a few ready-made sinks.

A sink is any callable accepting one event. The engine never lets a sink
failure propagate back into frame processing.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Union

from .alerts import AlertKind
from .scoring import ScoreTier

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertRaised:
    kind: AlertKind
    message: str
    score: float
    frame_index: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = "alert"
        data["kind"] = self.kind.value
        return data


@dataclass(frozen=True)
class ScoreChanged:
    previous: float
    current: float
    tier: ScoreTier
    frame_index: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = "score"
        data["tier"] = self.tier.value
        return data


EngineEvent = Union[AlertRaised, ScoreChanged]
EventSink = Callable[[EngineEvent], None]


class RecordingSink:
    """
    Keep the most recent events in memory.
    """

    def __init__(self, maxlen: Optional[int] = None) -> None:
        self._events: Deque[EngineEvent] = deque(maxlen=maxlen)

    def __call__(self, event: EngineEvent) -> None:
        self._events.append(event)

    def __iter__(self) -> Iterator[EngineEvent]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> List[EngineEvent]:
        return list(self._events)

    @property
    def alerts(self) -> List[AlertRaised]:
        return [event for event in self._events if isinstance(event, AlertRaised)]

    @property
    def score_changes(self) -> List[ScoreChanged]:
        return [event for event in self._events if isinstance(event, ScoreChanged)]


class LoggingSink:
    """
    Write every event to a logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or LOGGER

    def __call__(self, event: EngineEvent) -> None:
        if isinstance(event, AlertRaised):
            self.logger.info(
                "Alert %s at frame %d (score %.1f)",
                event.message,
                event.frame_index,
                event.score,
            )
        else:
            self.logger.info(
                "Trust score %.1f -> %.1f (%s) at frame %d",
                event.previous,
                event.current,
                event.tier.value,
                event.frame_index,
            )


def fan_out(*sinks: EventSink) -> EventSink:
    """
    Combine sinks; each receives every event, failures are isolated per sink.
    """

    def _dispatch(event: EngineEvent) -> None:
        for sink in sinks:
            safe_dispatch(sink, event)

    return _dispatch


def safe_dispatch(sink: Optional[EventSink], event: EngineEvent) -> None:
    """
    Deliver ``event`` to ``sink``, logging (not raising) any sink error.
    """
    if sink is None:
        return
    try:
        sink(event)
    except Exception:
        LOGGER.exception("Event sink %r failed for %s", sink, type(event).__name__)
