"""API tests for the Orrery HTTP and WebSocket endpoints.

Covers:
- /health, /bodies
- /bodies/{name}/elements, /position, /trajectory
- /snapshot
- /time/julian-date, /time/calendar
- /ws/ephemeris/stream
"""

import asyncio
import json

import pytest

from ephemeris.keplerian import default_ephemeris
from serialization.encoder import decode_snapshot, decode_trajectory


# --------------------------------------------------------------------------- #
#  Basic Endpoints
# --------------------------------------------------------------------------- #

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_bodies(client):
    resp = client.get("/bodies")
    assert resp.status_code == 200
    bodies = resp.json()
    assert [b["name"] for b in bodies] == [
        "mercury", "venus", "earth", "mars", "jupiter", "saturn", "uranus", "neptune",
    ]
    earth = bodies[2]
    assert earth["color"] == "blue"
    assert earth["elements"]["e"] == {"value": 0.01671123, "rate": -0.00004392}


# --------------------------------------------------------------------------- #
#  Elements / Position
# --------------------------------------------------------------------------- #

def test_elements_at_epoch(client):
    resp = client.get("/bodies/earth/elements", params={"jd": 2451545.0})
    assert resp.status_code == 200
    data = resp.json()
    assert data["e"] == 0.01671123
    assert data["mean_anomaly_deg"] == pytest.approx(357.52688973)


def test_position(client):
    resp = client.get("/bodies/earth/position", params={"jd": 2451545.0})
    assert resp.status_code == 200
    data = resp.json()
    assert data["x"] == pytest.approx(-0.1771, abs=1e-3)
    assert data["y"] == pytest.approx(0.9672, abs=1e-3)
    assert data["epoch_iso"].startswith("2000-01-01T12:00:00")
    assert data["scene_units"] is False


def test_position_matches_core(client):
    resp = client.get("/bodies/Mars/position", params={"date": "2026-09-01"})
    assert resp.status_code == 200
    data = resp.json()
    core = default_ephemeris().position("mars", data["epoch_jd"])
    assert (data["x"], data["y"], data["z"]) == pytest.approx(tuple(core))


def test_position_scene_units(client):
    resp = client.get("/bodies/neptune/position", params={"jd": 2451545.0, "scene_units": True})
    data = resp.json()
    scene_r = (data["x"] ** 2 + data["y"] ** 2 + data["z"] ** 2) ** 0.5
    assert data["distance_au"] > 29.0
    assert scene_r < data["distance_au"] * 10  # compressed, not AU * scale
    assert scene_r > 10.0


def test_position_defaults_to_now(client):
    resp = client.get("/bodies/venus/position")
    assert resp.status_code == 200
    assert resp.json()["epoch_jd"] > 2460000.0


def test_unknown_body(client):
    resp = client.get("/bodies/pluto/position", params={"jd": 2451545.0})
    assert resp.status_code == 404
    assert "pluto" in resp.json()["detail"]


def test_invalid_date(client):
    resp = client.get("/bodies/earth/position", params={"date": "not-a-date"})
    assert resp.status_code == 422


def test_jd_and_date_conflict(client):
    resp = client.get("/bodies/earth/position", params={"jd": 2451545.0, "date": "2000-01-01"})
    assert resp.status_code == 422


# --------------------------------------------------------------------------- #
#  Trajectory
# --------------------------------------------------------------------------- #

def test_trajectory_json(client):
    resp = client.get("/bodies/mars/trajectory", params={
        "start_jd": 2451545.0, "count": 10, "scene_units": False,
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["n_points"] == 10
    assert len(data["points"]) == 10
    core = default_ephemeris().position("mars", 2451545.0 + 3)
    assert data["points"][3] == pytest.approx(list(core))


def test_trajectory_empty(client):
    resp = client.get("/bodies/mars/trajectory", params={"start_jd": 2451545.0, "count": 0})
    assert resp.status_code == 200
    assert resp.json()["points"] == []


def test_trajectory_negative_count(client):
    resp = client.get("/bodies/mars/trajectory", params={"count": -1})
    assert resp.status_code == 422


def test_trajectory_binary(client):
    resp = client.get("/bodies/jupiter/trajectory", params={
        "start_jd": 2451545.0, "count": 5, "step_days": 10, "binary": True,
    })
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/octet-stream"
    start, step, positions = decode_trajectory(resp.content)
    assert (start, step) == (2451545.0, 10.0)
    assert positions.shape == (5, 3)


def test_trajectory_unknown_body(client):
    resp = client.get("/bodies/ceres/trajectory", params={"count": 5})
    assert resp.status_code == 404


# --------------------------------------------------------------------------- #
#  Snapshot / Time
# --------------------------------------------------------------------------- #

def test_snapshot(client):
    resp = client.get("/snapshot", params={"jd": 2451545.0, "scene_units": False})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["bodies"]) == 8
    assert data["bodies"][2]["name"] == "earth"
    assert data["bodies"][2]["body_index"] == 2


def test_snapshot_binary(client):
    resp = client.get("/snapshot", params={"date": "2030-01-01", "binary": True})
    assert resp.status_code == 200
    epoch, bodies = decode_snapshot(resp.content)
    assert epoch == 2462502.5
    assert [b["body_index"] for b in bodies] == list(range(8))


def test_time_conversions(client):
    resp = client.get("/time/julian-date", params={"date": "2000-01-01T12:00:00"})
    assert resp.status_code == 200
    assert resp.json()["jd"] == 2451545.0
    assert resp.json()["unix_ms"] == 946_728_000_000

    resp = client.get("/time/calendar", params={"jd": 2451545.0})
    assert resp.status_code == 200
    assert resp.json()["iso"].startswith("2000-01-01T12:00:00.000")

    resp = client.get("/time/julian-date", params={"date": "yesterday"})
    assert resp.status_code == 422


# --------------------------------------------------------------------------- #
#  WebSocket stream
# --------------------------------------------------------------------------- #

def test_ws_stream_json(client):
    with client.websocket_connect("/ws/ephemeris/stream") as ws:
        ws.send_text(json.dumps({
            "start_jd": 2451545.0,
            "bodies": ["earth"],
            "scene_units": False,
            "fps": 60,
        }))
        frame = ws.receive_json()
        assert frame["epoch_jd"] == 2451545.0
        assert [b["name"] for b in frame["bodies"]] == ["earth"]
        assert frame["bodies"][0]["position"][0] == pytest.approx(-0.1771, abs=1e-3)
        ws.send_text("stop")


def test_ws_stream_binary(client):
    with client.websocket_connect("/ws/ephemeris/stream") as ws:
        ws.send_text(json.dumps({
            "start_jd": 2451545.0,
            "bodies": ["mars", "venus"],
            "binary": True,
        }))
        epoch, bodies = decode_snapshot(ws.receive_bytes())
        assert epoch == 2451545.0
        assert [b["body_index"] for b in bodies] == [3, 1]
        ws.send_text("stop")


def test_ws_stream_rejects_unknown_body(client):
    with client.websocket_connect("/ws/ephemeris/stream") as ws:
        ws.send_text(json.dumps({"bodies": ["pluto"]}))
        msg = ws.receive_json()
        assert msg["status"] == "error"
        assert "pluto" in msg["message"]
        ws.send_text("stop")


def test_ws_stream_outside_calendar_range(client):
    with client.websocket_connect("/ws/ephemeris/stream") as ws:
        ws.send_text(json.dumps({"start_jd": 0.0, "bodies": ["earth"], "scene_units": False}))
        frame = ws.receive_json()
        assert frame["epoch_jd"] == 0.0
        assert frame["epoch_iso"] is None
        core = default_ephemeris().position("earth", 0.0)
        assert frame["bodies"][0]["position"] == pytest.approx(list(core))
        ws.send_text("stop")


@pytest.mark.parametrize("bodies", [None, 5, "earth", {"earth": 1}])
def test_ws_stream_rejects_malformed_bodies(client, bodies):
    with client.websocket_connect("/ws/ephemeris/stream") as ws:
        ws.send_text(json.dumps({"bodies": bodies}))
        msg = ws.receive_json()
        assert msg["status"] == "error"
        assert "bodies" in msg["message"]
        ws.send_text("stop")


def test_ws_rejected_config_is_not_partially_applied(client):
    with client.websocket_connect("/ws/ephemeris/stream") as ws:
        ws.send_text(json.dumps({
            "start_jd": 2451545.0, "bodies": ["earth"], "scene_units": False, "speed": 0.0,
        }))
        assert ws.receive_json()["bodies"][0]["name"] == "earth"
        ws.send_text(json.dumps({"bodies": ["mars"], "start_jd": "later"}))
        while True:
            msg = ws.receive_json()
            if msg.get("status") == "error":
                break
        assert "start_jd" in msg["message"]
        frame = ws.receive_json()
        assert [b["name"] for b in frame["bodies"]] == ["earth"]
        assert frame["epoch_jd"] == 2451545.0
        ws.send_text("stop")


# --------------------------------------------------------------------------- #
#  Event loop
# --------------------------------------------------------------------------- #

def test_trajectory_sampled_off_event_loop(client, monkeypatch):
    ephemeris = client.app.state.ephemeris
    sample = ephemeris.trajectory
    loops = []

    def recording_trajectory(*args, **kwargs):
        try:
            loops.append(asyncio.get_running_loop())
        except RuntimeError:
            loops.append(None)
        return sample(*args, **kwargs)

    monkeypatch.setattr(ephemeris, "trajectory", recording_trajectory)
    resp = client.get("/bodies/earth/trajectory", params={"start_jd": 2451545.0, "count": 3})
    assert resp.status_code == 200
    assert loops == [None]
