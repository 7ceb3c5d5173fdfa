from __future__ import annotations

from typing import Optional

from bodytrack.config import PoseConfig
from bodytrack.pose.base import PoseProvider


def get_pose_provider(cfg: Optional[PoseConfig] = None) -> PoseProvider:
	"""
	Create the configured pose provider. May take several seconds (model download/init);
	callers run it off the event loop.
	"""
	cfg = cfg or PoseConfig()
	backend = (cfg.backend or "mediapipe").strip().lower()
	if backend in ("mediapipe", "mp"):
		from bodytrack.pose.mediapipe_provider import MediaPipePoseProvider

		return MediaPipePoseProvider(
			model_complexity=cfg.model_complexity,
			min_detection_confidence=cfg.min_detection_confidence,
			min_tracking_confidence=cfg.min_tracking_confidence,
		)
	raise ValueError(f"Unknown pose backend: {cfg.backend!r}")


def describe_load_error(exc: BaseException) -> str:
	"""User-facing message for a failed model load."""
	text = str(exc) or exc.__class__.__name__
	lowered = text.lower()
	msg = "Failed to load model. "
	if "fetch" in lowered or "network" in lowered or "download" in lowered or "urlopen" in lowered:
		return msg + "Check your internet connection."
	return msg + text
