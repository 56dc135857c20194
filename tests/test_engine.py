"""
IntegrityEngine behaviour across frame sequences.
"""

from __future__ import annotations

import pytest

from conftest import FakeClock, make_face, make_frame
from proctor_signals.alerts import AlertKind
from proctor_signals.attention import ZoneSource
from proctor_signals.config import EngineConfig
from proctor_signals.events import AlertRaised, RecordingSink, ScoreChanged
from proctor_signals.pipeline import (
    EngineLifecycle,
    EvaluationState,
    IntegrityEngine,
    load_default_engine,
)
from proctor_signals.presence import PresenceKind

NO_FACE = "⚠️ No face detected"
MULTIPLE = "👥 Multiple faces detected"


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def engine(clock, sink):
    return IntegrityEngine(sink=sink, clock=clock)


def _run(engine, frames, clock=None, step=0.0):
    verdicts = []
    for frame in frames:
        verdicts.append(engine.process(frame))
        if clock is not None:
            clock.advance(step)
    return verdicts


# ─── Presence ─────────────────────────────────────────────────

def test_empty_frame_reports_no_face_without_gaze_evaluation(engine):
    verdict = engine.process(make_frame())
    assert verdict.presence is PresenceKind.NONE
    assert verdict.zone is None
    assert verdict.state is EvaluationState.FLAGGED
    assert verdict.alerts == [NO_FACE]
    assert engine.snapshot().gaze_out_counter == 0


def test_no_face_alerts_and_penalties_are_throttled_together(engine, clock, sink):
    verdicts = _run(engine, [make_frame()] * 3, clock, step=0.3)
    assert [v.alerts for v in verdicts] == [[NO_FACE], [], []]
    assert engine.score == pytest.approx(99.0)
    assert len(sink.alerts) == 1

    clock.advance(1.0)
    assert engine.process(make_frame()).alerts == [NO_FACE]
    assert engine.score == pytest.approx(98.0)


def test_repeated_multiple_faces_within_window_alert_once(engine, centered_face, sink):
    frame = make_frame(centered_face, centered_face)
    verdicts = _run(engine, [frame] * 5)
    assert all(v.presence is PresenceKind.MULTIPLE for v in verdicts)
    assert verdicts[0].face_count == 2
    assert sum(len(v.alerts) for v in verdicts) == 1
    assert [a.message for a in sink.alerts] == [MULTIPLE]
    assert engine.score == pytest.approx(95.0)


def test_malformed_face_is_treated_as_absent(engine, sink):
    verdict = engine.process(make_frame(make_face(n_points=300)))
    assert verdict.presence is PresenceKind.NONE
    assert verdict.malformed
    assert verdict.alerts == [NO_FACE]
    assert sink.alerts[0].kind is AlertKind.NO_FACE
    assert engine.score == pytest.approx(99.0)


# ─── Blink ────────────────────────────────────────────────────

def test_blink_frames_are_neither_penalized_nor_counted(engine, blinking_face):
    off = make_frame(make_face(gaze_x=0.5))
    _run(engine, [off] * 5)
    verdicts = _run(engine, [make_frame(blinking_face)] * 20)
    assert all(v.blink for v in verdicts)
    assert all(v.state is EvaluationState.BLINKING for v in verdicts)
    assert all(v.zone is None and not v.alerts for v in verdicts)
    assert engine.snapshot().gaze_out_counter == 5
    assert engine.score == 100.0


# ─── Gaze hysteresis ──────────────────────────────────────────

def test_sustained_iris_deviation_alerts_once_at_ninth_frame(engine, sink):
    frame = make_frame(make_face(gaze_x=0.5))
    verdicts = _run(engine, [frame] * 9)

    assert all(v.zone == "Eye→Right" for v in verdicts)
    assert all(v.source is ZoneSource.IRIS for v in verdicts)
    assert [bool(v.alerts) for v in verdicts] == [False] * 8 + [True]
    assert verdicts[-1].alerts == ["👁️ Eye→Right"]
    assert [v.score for v in verdicts[:8]] == [100.0] * 8
    assert verdicts[-1].score == pytest.approx(97.0)
    assert engine.snapshot().gaze_out_counter == 0
    assert sink.alerts[0].kind is AlertKind.EYE


def test_glance_shorter_than_threshold_never_alerts(engine, centered_face):
    off = make_frame(make_face(gaze_x=0.5))
    verdicts = _run(engine, [off] * 7 + [make_frame(centered_face)])
    assert not any(v.alerts for v in verdicts)
    assert engine.snapshot().gaze_out_counter == 6


def test_centered_frame_after_threshold_frames_gives_no_second_alert(engine, centered_face):
    off = make_frame(make_face(head_x=0.4))
    verdicts = _run(engine, [off] * 8 + [make_frame(centered_face)])
    assert not any(v.alerts for v in verdicts)
    assert verdicts[-1].state is EvaluationState.CENTERED
    assert engine.snapshot().gaze_out_counter == 7


def test_gaze_penalty_applies_every_trip_while_alert_is_throttled(engine, sink):
    frame = make_frame(make_face(head_y=-0.5))
    verdicts = _run(engine, [frame] * 18)
    assert verdicts[8].alerts == ["🔄 Head→Up"]
    assert verdicts[17].alerts == []
    assert engine.score == pytest.approx(94.0)
    assert len(sink.alerts) == 1


def test_centered_frames_recover_score(engine, centered_face):
    engine.process(make_frame())
    _run(engine, [make_frame(centered_face)] * 5)
    assert engine.score == pytest.approx(99.5)


def test_mirrored_view_swaps_labels(clock):
    engine = IntegrityEngine(EngineConfig(mirror=True, suspicion_threshold=1), clock=clock)
    verdicts = _run(engine, [make_frame(make_face(gaze_x=0.5))] * 2)
    assert verdicts[0].zone == "Eye→Left"
    assert verdicts[1].alerts == ["👁️ Eye→Left"]


def test_thresholds_are_configurable(clock):
    config = EngineConfig(iris_threshold_x=0.6, suspicion_threshold=2)
    engine = IntegrityEngine(config, clock=clock)
    assert engine.process(make_frame(make_face(gaze_x=0.5))).zone == "Screen"
    verdicts = _run(engine, [make_frame(make_face(gaze_x=0.7))] * 3)
    assert verdicts[-1].alerts == ["👁️ Eye→Right"]


# ─── Score bounds and events ──────────────────────────────────

def test_score_floor_under_sustained_penalties(engine, clock):
    _run(engine, [make_frame()] * 150, clock, step=2.0)
    assert engine.score == 0.0
    assert engine.snapshot().trust_score == 0.0


def test_score_change_events_follow_alerts(engine, sink):
    engine.process(make_frame())
    assert isinstance(sink.events[0], AlertRaised)
    change = sink.events[1]
    assert isinstance(change, ScoreChanged)
    assert (change.previous, change.current) == (100.0, 99.0)
    assert change.frame_index == 1


def test_fractional_recovery_does_not_spam_score_events(engine, sink, centered_face):
    engine.process(make_frame())
    _run(engine, [make_frame(centered_face)] * 5)
    assert len(sink.score_changes) == 1


def test_tab_switch_penalty_is_one_shot_and_alert_is_throttled(engine):
    assert engine.record_tab_switch() == ["🚫 Tab switched"]
    assert engine.score == pytest.approx(90.0)
    assert engine.record_tab_switch() == []
    assert engine.score == pytest.approx(80.0)


def test_sink_failures_do_not_reach_process(clock):
    def broken_sink(event):
        raise RuntimeError("transport down")

    engine = IntegrityEngine(sink=broken_sink, clock=clock)
    verdict = engine.process(make_frame())
    assert verdict.alerts == [NO_FACE]
    assert engine.score == pytest.approx(99.0)


# ─── Facade ───────────────────────────────────────────────────

def test_lifecycle_moves_from_idle_to_evaluating(engine, centered_face):
    assert engine.lifecycle is EngineLifecycle.IDLE
    engine.process(make_frame(centered_face))
    assert engine.lifecycle is EngineLifecycle.EVALUATING


def test_snapshot_is_a_copy(engine):
    engine.process(make_frame())
    snapshot = engine.snapshot()
    snapshot.last_alert_timestamp.clear()
    assert NO_FACE in engine.snapshot().last_alert_timestamp
    assert snapshot.frames_processed == 1


def test_identical_engines_produce_identical_verdicts():
    frames = (
        [make_frame(make_face(gaze_x=0.5))] * 10
        + [make_frame()] * 3
        + [make_frame(make_face(eye_height=0.002))] * 2
        + [make_frame(make_face(head_x=-0.3))] * 12
        + [make_frame(make_face())] * 4
    )
    first_clock, second_clock = FakeClock(), FakeClock()
    first = _run(IntegrityEngine(clock=first_clock), frames, first_clock, step=0.05)
    second = _run(IntegrityEngine(clock=second_clock), frames, second_clock, step=0.05)
    assert first == second


def test_verdict_serializes_to_plain_types(engine):
    data = engine.process(make_frame(make_face(gaze_x=0.5))).to_dict()
    assert data["presence"] == "single"
    assert data["zone"] == "Eye→Right"
    assert data["source"] == "iris"
    assert data["state"] == "flagged"
    assert data["frame_index"] == 1


def test_load_default_engine_uses_defaults():
    engine = load_default_engine()
    assert engine.score == 100.0
    assert engine.config.suspicion_threshold == 8
