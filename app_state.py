"""
Explicit app state: single source of truth for runtime lifecycle.
Created in lifespan, attached to app.state.state; injected into routes via Depends(get_state).
"""
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from bodytrack.body_parts import legend
from bodytrack.camera import CameraSource
from bodytrack.config import AppConfig
from bodytrack.detection_loop import DetectionLoop
from bodytrack.motion_log import MotionLog
from bodytrack.pose.base import PoseProvider


class AppState:
	"""
	Holds all runtime state for one server process.
	Populated in server lifespan; routers receive this instance via deps.get_state.
	"""
	# WebSocket and UI (set at app load)
	manager: Any = None
	get_page_html: Optional[Callable[[str], str]] = None
	UI_DIR: Optional[Path] = None

	cfg: AppConfig
	camera: CameraSource
	motion_log: MotionLog
	detection: DetectionLoop

	# Pose model lifecycle: loading -> loaded, or loading -> error (no retry).
	pose_provider: Optional[PoseProvider] = None
	model_loaded: bool = False
	model_error: Optional[str] = None
	model_task: Any = None

	# Helpers (callables set in server after creation)
	log_to_clients: Callable[[str], None]
	notify_clients: Callable[[Dict[str, Any]], None]

	def __init__(self, cfg: AppConfig, camera: CameraSource) -> None:
		self.cfg = cfg
		self.camera = camera
		self.motion_log = MotionLog(capacity=cfg.tracking.log_capacity)
		self.log_to_clients = lambda _msg: None
		self.notify_clients = lambda _msg: None
		self.detection = DetectionLoop(
			camera=camera,
			motion_log=self.motion_log,
			provider_fn=self.get_provider,
			config=cfg.tracking,
			jpeg_quality=cfg.camera.jpeg_quality,
			notify=self._on_detection_message,
		)

	def _on_detection_message(self, msg: Dict[str, Any]) -> None:
		if msg.get("type") == "status":
			# Loop status lacks model and camera fields; send the full picture.
			msg = {"type": "status", **self.status()}
		self.notify_clients(msg)

	def get_provider(self) -> Optional[PoseProvider]:
		return self.pose_provider if self.model_loaded else None

	def latest_display_jpeg(self) -> Tuple[Optional[bytes], Optional[float]]:
		"""Overlay frame while detecting, plain mirrored preview otherwise."""
		if self.detection.active:
			jpeg, t = self.detection.get_latest_jpeg()
			if jpeg is not None:
				return jpeg, t
		return self.camera.get_latest_jpeg()

	def status(self) -> Dict[str, Any]:
		t = self.cfg.tracking
		return {
			"model_loaded": bool(self.model_loaded),
			"model_error": self.model_error,
			**self.detection.get_status(),
			"settings": {
				"smoothing_window": t.smoothing_window,
				"confidence_threshold": t.confidence_threshold,
				"movement_threshold_px": t.movement_threshold_px,
				"torso_threshold_px": t.movement_threshold_px * t.torso_threshold_factor,
				"frame_skip": t.frame_skip,
				"log_capacity": t.log_capacity,
				"pose_backend": self.cfg.pose.backend,
			},
			"legend": legend(),
			"camera": self.camera.get_status(),
		}
