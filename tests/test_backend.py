"""HTTP tests for the FastAPI backend; the LLM is monkeypatched out."""

import json
import math

import pytest
from fastapi.testclient import TestClient

from rep_backend import main
from rep_backend import llm_agent


@pytest.fixture
def client():
    return TestClient(main.app)


def _joints(elbow_angle):
    rad = math.radians(elbow_angle)
    return {
        "shoulder": {"x": 100.0, "y": 0.0},
        "elbow": {"x": 0.0, "y": 0.0},
        "wrist": {"x": 100.0 * math.cos(rad), "y": 100.0 * math.sin(rad)},
        "hip": {"x": 0.0, "y": 200.0},
        "knee": {"x": 30.0, "y": 270.0},
        "ankle": {"x": 60.0, "y": 330.0},
    }


def _new_session(client, **body):
    resp = client.post("/sessions", json=body)
    assert resp.status_code == 201
    return resp.json()["session_id"]


def test_health(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_exercise_profiles(client):
    resp = client.get("/exercises")
    assert resp.status_code == 200
    assert [p["variation"] for p in resp.json()] == ["standard", "wide", "diamond", "incline", "decline"]

    diamond = client.get("/exercises/diamond").json()
    assert diamond["title"] == "Diamond Push Up"
    assert diamond["body_focus"] == {"arms": 90, "chest": 60, "core": 50}

    assert client.get("/exercises/one_handed").status_code == 404


def test_session_counts_reps(client):
    session_id = _new_session(client, variation="wide")

    counts = []
    for angle in [170, 170, 80, 80, 170]:
        resp = client.post(f"/sessions/{session_id}/frames", json={"joints": _joints(angle)})
        assert resp.status_code == 200
        counts.append(resp.json()["rep_count"])

    assert counts == [0, 0, 0, 0, 1]
    body = resp.json()
    assert body["phase"] == "up"
    assert body["completed_rep"]["rep_id"] == 1
    assert body["completed_rep"]["variation"] == "wide"
    assert body["elapsed"] == "00:00"


def test_collapsed_frame_reports_no_signal(client):
    session_id = _new_session(client)
    joints = {name: {"x": 5.0, "y": 5.0} for name in _joints(90)}

    body = client.post(f"/sessions/{session_id}/frames", json={"joints": joints}).json()

    assert body["phase"] == "no_signal"
    assert body["angle_degrees"] is None
    assert body["rep_count"] == 0


def test_missing_joint_is_422(client):
    session_id = _new_session(client)
    joints = _joints(90)
    del joints["ankle"]

    resp = client.post(f"/sessions/{session_id}/frames", json={"joints": joints})

    assert resp.status_code == 422
    assert "ankle" in resp.json()["detail"]


def test_reset_and_delete(client):
    session_id = _new_session(client)
    for angle in [80, 170]:
        client.post(f"/sessions/{session_id}/frames", json={"joints": _joints(angle)})

    assert client.post(f"/sessions/{session_id}/reset").status_code == 200
    body = client.post(f"/sessions/{session_id}/frames", json={"joints": _joints(170)}).json()
    assert body["rep_count"] == 0

    assert client.delete(f"/sessions/{session_id}").status_code == 204
    assert client.delete(f"/sessions/{session_id}").status_code == 404
    resp = client.post(f"/sessions/{session_id}/frames", json={"joints": _joints(170)})
    assert resp.status_code == 404


def test_unknown_variation_session_is_404(client):
    assert client.post("/sessions", json={"variation": "one_handed"}).status_code == 404


REP = {
    "rep_id": 1,
    "exercise_hint": "pushup",
    "variation": "standard",
    "duration_s": 1.4,
    "min_angle": 85.0,
    "max_angle": 172.0,
    "frames": 40,
}


def test_analyze_rep(client, monkeypatch):
    seen = {}

    def fake_llm(rep_summary):
        seen.update(rep_summary)
        return {"exercise": "pushup", "main_issue": "shallow_depth",
                "severity": "low", "message": "Go a little lower"}

    monkeypatch.setattr(main, "analyze_rep_with_llm", fake_llm)

    resp = client.post("/analyze_rep", json=REP)

    assert resp.status_code == 200
    assert resp.json()["message"] == "Go a little lower"
    assert seen["min_angle"] == 85.0


def test_analyze_rep_llm_failure_is_502(client, monkeypatch):
    monkeypatch.setattr(main, "analyze_rep_with_llm", lambda rep: None)
    assert client.post("/analyze_rep", json=REP).status_code == 502


def test_analyze_rep_rejects_bad_summary(client):
    bad = dict(REP, min_angle=200.0)
    assert client.post("/analyze_rep", json=bad).status_code == 422


class _FakeReply:
    def __init__(self, content):
        self.content = content


class _FakeLLM:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.messages = None

    def invoke(self, messages):
        self.messages = messages
        if self.error:
            raise self.error
        return _FakeReply(self.content)


def test_llm_agent_parses_fenced_json(monkeypatch):
    fake = _FakeLLM('```json\n{"main_issue": null, "severity": "none", "message": "Nice rep"}\n```')
    monkeypatch.setattr(llm_agent, "get_llm", lambda: fake)

    parsed = llm_agent.analyze_rep_with_llm(REP)

    assert parsed == {"main_issue": None, "severity": "none",
                      "message": "Nice rep", "exercise": "pushup"}
    assert "Variation: standard" in fake.messages[1].content


def test_llm_agent_extracts_embedded_json(monkeypatch):
    fake = _FakeLLM('Sure! {"exercise": "pushup", "severity": "none", "message": "Good"} done')
    monkeypatch.setattr(llm_agent, "get_llm", lambda: fake)
    assert llm_agent.analyze_rep_with_llm(REP)["message"] == "Good"


def test_llm_agent_returns_none_on_garbage_or_error(monkeypatch):
    monkeypatch.setattr(llm_agent, "get_llm", lambda: _FakeLLM("no json here"))
    assert llm_agent.analyze_rep_with_llm(REP) is None

    monkeypatch.setattr(llm_agent, "get_llm", lambda: _FakeLLM(error=RuntimeError("timeout")))
    assert llm_agent.analyze_rep_with_llm(REP) is None


def test_unknown_exercise_session_is_404(client):
    resp = client.post("/sessions", json={"exercise": "burpee"})
    assert resp.status_code == 404
    assert "burpee" in resp.json()["detail"]


@pytest.mark.parametrize("bad", [float("nan"), float("inf")])
def test_non_finite_coordinate_is_422(client, bad):
    session_id = _new_session(client)
    joints = _joints(90)
    joints["wrist"]["x"] = bad
    # json.dumps writes NaN/Infinity literals, which the endpoint must refuse
    body = json.dumps({"joints": joints})

    resp = client.post(f"/sessions/{session_id}/frames", content=body,
                       headers={"content-type": "application/json"})

    assert resp.status_code == 422
