from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TrackingConfig:
	# Number of recent frames averaged per keypoint.
	smoothing_window: int = 5
	# Keypoints below this score are ignored for averaging and part centers.
	confidence_threshold: float = 0.5
	# Minimum displacement (pixels) between analyzed frames to count as movement.
	movement_threshold_px: float = 15.0
	# Torso threshold = movement_threshold_px * torso_threshold_factor.
	torso_threshold_factor: float = 1.5
	# Movement analysis runs once every `frame_skip` processed frames.
	frame_skip: int = 5
	# Most recent motion events kept for display.
	log_capacity: int = 10


@dataclass(frozen=True)
class PoseConfig:
	backend: str = "mediapipe"
	model_complexity: int = 1
	min_detection_confidence: float = 0.5
	min_tracking_confidence: float = 0.5


@dataclass(frozen=True)
class CameraConfig:
	# NOTE: 0 is a valid OpenCV device index.
	index: int = 0
	width: int = 640
	height: int = 480
	preview_fps: int = 15
	jpeg_quality: int = 80


@dataclass(frozen=True)
class LoggingConfig:
	level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
	tracking: TrackingConfig = field(default_factory=TrackingConfig)
	pose: PoseConfig = field(default_factory=PoseConfig)
	camera: CameraConfig = field(default_factory=CameraConfig)
	logging: LoggingConfig = field(default_factory=LoggingConfig)


_CONFIG_PATH: Optional[Path] = None
_CONFIG_CACHE: Optional[AppConfig] = None


def _repo_root() -> Path:
	# bodytrack/config.py -> repo root is one level up.
	return Path(__file__).resolve().parents[1]


def get_default_config_path() -> Path:
	env = os.getenv("BODYTRACK_CONFIG")
	if env:
		return Path(env).expanduser().resolve()
	return _repo_root() / "config.json"


def set_config_path(path: str | Path) -> None:
	"""
	Override the config path (must be called before first get_config()).
	Used by the `bodytrack.replay` command line (--config).
	"""
	global _CONFIG_PATH
	global _CONFIG_CACHE
	_CONFIG_PATH = Path(path).expanduser().resolve()
	_CONFIG_CACHE = None


def _deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
	cur: Any = d
	for k in keys:
		if not isinstance(cur, dict):
			return default
		cur = cur.get(k)
	return cur if cur is not None else default


def _as_int(v: Any, default: int) -> int:
	try:
		return int(v)
	except Exception:
		return int(default)


def _as_str(v: Any, default: str = "") -> str:
	return str(v) if v is not None else str(default)


def _as_float(v: Any, default: float) -> float:
	try:
		return float(v)
	except Exception:
		return float(default)


def _positive_int(v: Any, default: int) -> int:
	n = _as_int(v, default)
	return n if n > 0 else int(default)


def _positive_float(v: Any, default: float) -> float:
	x = _as_float(v, default)
	return x if x > 0.0 else float(default)


def parse_config(raw: Dict[str, Any]) -> AppConfig:
	"""Build an AppConfig from a decoded config.json object. Invalid values fall back to defaults."""
	if not isinstance(raw, dict):
		return AppConfig()

	conf_th = _as_float(_deep_get(raw, ["tracking", "confidence_threshold"], 0.5), 0.5)
	if not (0.0 <= conf_th <= 1.0):
		conf_th = 0.5

	tracking = TrackingConfig(
		smoothing_window=_positive_int(_deep_get(raw, ["tracking", "smoothing_window"], 5), 5),
		confidence_threshold=conf_th,
		movement_threshold_px=_positive_float(_deep_get(raw, ["tracking", "movement_threshold_px"], 15.0), 15.0),
		torso_threshold_factor=_positive_float(_deep_get(raw, ["tracking", "torso_threshold_factor"], 1.5), 1.5),
		frame_skip=_positive_int(_deep_get(raw, ["tracking", "frame_skip"], 5), 5),
		log_capacity=_positive_int(_deep_get(raw, ["tracking", "log_capacity"], 10), 10),
	)

	complexity = _as_int(_deep_get(raw, ["pose", "model_complexity"], 1), 1)
	pose = PoseConfig(
		backend=_as_str(_deep_get(raw, ["pose", "backend"], "mediapipe"), "mediapipe").strip().lower() or "mediapipe",
		model_complexity=complexity if complexity in (0, 1, 2) else 1,
		min_detection_confidence=_as_float(_deep_get(raw, ["pose", "min_detection_confidence"], 0.5), 0.5),
		min_tracking_confidence=_as_float(_deep_get(raw, ["pose", "min_tracking_confidence"], 0.5), 0.5),
	)

	cam_index = _as_int(_deep_get(raw, ["camera", "index"], 0), 0)
	quality = _as_int(_deep_get(raw, ["camera", "jpeg_quality"], 80), 80)
	camera = CameraConfig(
		index=cam_index if cam_index >= 0 else 0,
		width=_positive_int(_deep_get(raw, ["camera", "width"], 640), 640),
		height=_positive_int(_deep_get(raw, ["camera", "height"], 480), 480),
		preview_fps=_positive_int(_deep_get(raw, ["camera", "preview_fps"], 15), 15),
		jpeg_quality=quality if 1 <= quality <= 95 else 80,
	)

	level = _as_str(_deep_get(raw, ["logging", "level"], "INFO"), "INFO").strip().upper() or "INFO"

	return AppConfig(
		tracking=tracking,
		pose=pose,
		camera=camera,
		logging=LoggingConfig(level=level),
	)


def load_config(path: Optional[str | Path] = None) -> AppConfig:
	p = Path(path).expanduser().resolve() if path else (_CONFIG_PATH or get_default_config_path())
	if not p.exists():
		# Defaults-only config; app can still run.
		return AppConfig()
	try:
		raw = json.loads(p.read_text(encoding="utf-8"))
	except Exception:
		# If config is malformed, fail safe to defaults (but keep app running).
		return AppConfig()
	return parse_config(raw)


def get_config() -> AppConfig:
	global _CONFIG_CACHE
	if _CONFIG_CACHE is None:
		_CONFIG_CACHE = load_config()
	return _CONFIG_CACHE
