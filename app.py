"""
Flask entry-point exposing the integrity signal engine as a REST API.

Each monitoring session gets its own engine, created on the first frame and
kept in memory until the session is ended.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict

from flask import Flask, jsonify, request

from proctor_signals import (
    AlertTally,
    EngineConfig,
    IntegrityEngine,
    LoggingSink,
    fan_out,
    frame_from_payload,
    load_config,
)
from proctor_signals.config import CONFIG_ENV_VAR

LOGGER = logging.getLogger(__name__)

# Sessions that receive no calls for this long are dropped.
SESSION_IDLE_SECONDS = 30 * 60


@dataclass
class MonitoredSession:
    engine: IntegrityEngine
    alerts: AlertTally
    lock: threading.Lock = field(default_factory=threading.Lock)
    last_seen: float = field(default_factory=time.monotonic)


def _load_engine_config() -> EngineConfig:
    path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return EngineConfig()
    LOGGER.info("Loading engine configuration from %s", path)
    return load_config(path)


app = Flask(__name__)
ENGINE_CONFIG = _load_engine_config()
SESSIONS: Dict[str, MonitoredSession] = {}
SESSIONS_LOCK = threading.Lock()


@app.route("/health", methods=["GET"])
def health() -> Any:
    return jsonify({"status": "ok", "sessions": len(SESSIONS)})


@app.route("/api/sessions/<session_id>/frames", methods=["POST"])
def process_frame(session_id: str) -> Any:
    payload = request.get_json(silent=True)
    try:
        frame = frame_from_payload(payload)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    session = _get_or_create_session(session_id)
    with session.lock:
        verdict = session.engine.process(frame)
    return jsonify(verdict.to_dict())


@app.route("/api/sessions/<session_id>/tab-switch", methods=["POST"])
def tab_switch(session_id: str) -> Any:
    session = _touch_session(session_id)
    if session is None:
        return _unknown_session(session_id)
    with session.lock:
        alerts = session.engine.record_tab_switch()
        score = session.engine.score
    return jsonify({"score": score, "alerts": alerts})


@app.route("/api/sessions/<session_id>", methods=["GET"])
def session_state(session_id: str) -> Any:
    session = SESSIONS.get(session_id)
    if session is None:
        return _unknown_session(session_id)
    with session.lock:
        snapshot = session.engine.snapshot()
        tier = session.engine.tier
    data = snapshot.to_dict()
    data["tier"] = tier.value
    return jsonify(data)


@app.route("/api/sessions/<session_id>/report", methods=["GET"])
def session_report(session_id: str) -> Any:
    session = SESSIONS.get(session_id)
    if session is None:
        return _unknown_session(session_id)
    with session.lock:
        report = session.alerts.report(session.engine.score)
    return jsonify(report.to_dict())


@app.route("/api/sessions/<session_id>", methods=["DELETE"])
def end_session(session_id: str) -> Any:
    with SESSIONS_LOCK:
        session = SESSIONS.pop(session_id, None)
    if session is None:
        return _unknown_session(session_id)
    with session.lock:
        report = session.alerts.report(session.engine.score)
    LOGGER.info("Ended monitoring for session %s", session_id)
    return jsonify(report.to_dict())


def _get_or_create_session(session_id: str) -> MonitoredSession:
    with SESSIONS_LOCK:
        _evict_idle_sessions()
        session = SESSIONS.get(session_id)
        if session is None:
            alerts = AlertTally()
            engine = IntegrityEngine(ENGINE_CONFIG, sink=fan_out(alerts, LoggingSink()))
            session = MonitoredSession(engine, alerts)
            SESSIONS[session_id] = session
            LOGGER.info("Started monitoring for session %s", session_id)
        session.last_seen = time.monotonic()
        return session


def _touch_session(session_id: str) -> MonitoredSession | None:
    with SESSIONS_LOCK:
        session = SESSIONS.get(session_id)
        if session is not None:
            session.last_seen = time.monotonic()
        return session


def _evict_idle_sessions() -> None:
    # Caller holds SESSIONS_LOCK.
    now = time.monotonic()
    stale = [
        session_id
        for session_id, session in SESSIONS.items()
        if now - session.last_seen > SESSION_IDLE_SECONDS
    ]
    for session_id in stale:
        del SESSIONS[session_id]
        LOGGER.info("Dropped idle session %s", session_id)


def _unknown_session(session_id: str) -> Any:
    return jsonify({"error": f"Unknown session '{session_id}'"}), 404


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(host="0.0.0.0", port=8000, debug=False)
