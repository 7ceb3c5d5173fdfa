import threading
import time

import pytest
from fastapi.testclient import TestClient

from bodytrack.config import AppConfig
from bodytrack.motion_log import MovementEvent
from conftest import FakeCamera, FakeProvider
from server import create_app


def _wait_for(client, predicate, timeout=3.0):
	deadline = time.monotonic() + timeout
	while time.monotonic() < deadline:
		status = client.get("/status").json()
		if predicate(status):
			return status
		time.sleep(0.02)
	raise AssertionError("condition not reached; last status: %r" % (status,))


@pytest.fixture
def camera():
	return FakeCamera()


@pytest.fixture
def client(camera, confident_frame):
	provider = FakeProvider([confident_frame])
	app = create_app(AppConfig(), camera=camera, provider_factory=lambda _cfg: provider)
	with TestClient(app) as c:
		_wait_for(c, lambda s: s["model_loaded"])
		yield c


def test_status_reports_settings_and_legend(client, camera):
	status = client.get("/status").json()
	assert status["model_loaded"] is True
	assert status["model_error"] is None
	assert status["detecting"] is False
	assert status["settings"]["smoothing_window"] == 5
	assert status["settings"]["torso_threshold_px"] == 22.5
	assert [e["part"] for e in status["legend"]][0] == "head"
	assert status["camera"]["running"] is True
	assert camera.running


def test_start_and_stop_detection(client):
	resp = client.post("/detection/start")
	assert resp.status_code == 200
	assert resp.json()["detecting"] is True
	_wait_for(client, lambda s: s["frame_count"] >= 2)
	assert client.post("/detection/start").json()["detail"] == "Detection already running."
	resp = client.post("/detection/stop")
	assert resp.json() == {"detail": "Detection stopped.", "detecting": False}
	assert client.get("/status").json()["detecting"] is False


def test_toggle_flips_state(client):
	assert client.post("/detection/toggle").json()["detecting"] is True
	assert client.post("/detection/toggle").json()["detecting"] is False


def test_log_is_newest_first_and_clear_is_idempotent(client):
	state = client.app.state.state
	state.motion_log.record([MovementEvent(text="Head turned left", time="10:00:00", part="head", magnitude_px=20.0)])
	state.motion_log.record([MovementEvent(text="Body moved", time="10:00:01", part="torso", magnitude_px=30.0)])
	body = client.get("/log").json()
	assert body["capacity"] == 10
	assert [e["text"] for e in body["entries"]] == ["Body moved", "Head turned left"]
	for _ in range(2):
		resp = client.post("/log/clear")
		assert resp.status_code == 200
		assert resp.json()["entries"] == []


def test_log_survives_stop(client):
	state = client.app.state.state
	state.motion_log.record([MovementEvent(text="Left arm moved", time="10:00:00")])
	client.post("/detection/start")
	client.post("/detection/stop")
	assert [e["text"] for e in client.get("/log").json()["entries"]] == ["Left arm moved"]


def test_index_page_and_legend(client):
	resp = client.get("/")
	assert resp.status_code == 200
	assert "Motion Log" in resp.text
	legend = client.get("/api/legend").json()
	assert {e["part"] for e in legend} == {"head", "left_arm", "right_arm", "left_leg", "right_leg", "torso"}


def test_snapshot_uses_camera_preview_when_idle(client):
	resp = client.get("/video/snapshot.jpg")
	assert resp.status_code == 200
	assert resp.headers["content-type"] == "image/jpeg"
	assert resp.content == b"\xff\xd8preview\xff\xd9"


def test_video_disconnect_stops_camera(client, camera):
	resp = client.post("/video/disconnect")
	assert resp.status_code == 200
	assert camera.running is False
	assert client.post("/video/connect").status_code == 200
	assert camera.running is True


def test_websocket_sends_snapshot_on_connect(client):
	with client.websocket_connect("/ws") as ws:
		first = ws.receive_json()
		assert first["type"] == "status"
		assert first["model_loaded"] is True
		second = ws.receive_json()
		assert second == {"type": "motion", "events": [], "log": []}


def test_start_while_model_loading_is_rejected(camera, confident_frame):
	release = threading.Event()

	def slow_factory(_cfg):
		release.wait(5.0)
		return FakeProvider([confident_frame])

	app = create_app(AppConfig(), camera=camera, provider_factory=slow_factory)
	with TestClient(app) as c:
		try:
			status = c.get("/status").json()
			assert status["model_loaded"] is False
			resp = c.post("/detection/start")
			assert resp.status_code == 409
			assert "wait for the model" in resp.json()["detail"]
		finally:
			release.set()
		_wait_for(c, lambda s: s["model_loaded"])
		assert c.post("/detection/start").status_code == 200


def test_model_load_failure_is_terminal(camera):
	def broken_factory(_cfg):
		raise RuntimeError("network error while fetching model")

	app = create_app(AppConfig(), camera=camera, provider_factory=broken_factory)
	with TestClient(app) as c:
		status = _wait_for(c, lambda s: s["model_error"] is not None)
		assert status["model_loaded"] is False
		assert status["model_error"] == "Failed to load model. Check your internet connection."
		resp = c.post("/detection/start")
		assert resp.status_code == 503
