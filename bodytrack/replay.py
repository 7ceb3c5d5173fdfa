"""
Headless body tracking over a video file or camera, without the web server.

Runs the configured pose provider and the tracking pipeline on every frame and
logs each movement event, e.g.:

	python -m bodytrack.replay --source clip.mp4
	python -m bodytrack.replay --source 0 --frames 300
"""
from __future__ import annotations

import logging
import sys
import time
from typing import Iterable, Iterator, List, Optional

from bodytrack.config import AppConfig, get_config, set_config_path
from bodytrack.motion_log import MotionLog, MovementEvent
from bodytrack.pose.base import PoseProvider
from bodytrack.pose.loader import get_pose_provider
from bodytrack.pose.types import PoseFrame
from bodytrack.tracking_pipeline import TrackingPipeline

logger = logging.getLogger("bodytrack.replay")


def replay_frames(
	frames: Iterable[PoseFrame],
	pipeline: TrackingPipeline,
	motion_log: Optional[MotionLog] = None,
) -> List[MovementEvent]:
	"""Feed pose frames through the pipeline; returns every event in emission order."""
	all_events: List[MovementEvent] = []
	for frame in frames:
		if not frame.detected:
			continue
		result = pipeline.process(frame)
		if result.events:
			all_events.extend(result.events)
			if motion_log is not None:
				motion_log.record(result.events)
	return all_events


def _iter_video_rgb(source: str, max_frames: Optional[int]) -> Iterator:
	import cv2  # type: ignore

	cap = cv2.VideoCapture(int(source) if source.isdigit() else source)
	if not cap or not cap.isOpened():
		raise RuntimeError(f"Unable to open video source {source!r}")
	n = 0
	try:
		while max_frames is None or n < max_frames:
			ok, frame_bgr = cap.read()
			if not ok:
				break
			n += 1
			yield cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
	finally:
		cap.release()


def _estimate_all(provider: PoseProvider, source: str, max_frames: Optional[int]) -> Iterator[PoseFrame]:
	for rgb in _iter_video_rgb(source, max_frames):
		try:
			yield provider.infer_rgb(rgb, t_host=time.time())
		except Exception:
			logger.exception("Error during pose detection")


def run(source: str, cfg: AppConfig, max_frames: Optional[int] = None) -> int:
	provider = get_pose_provider(cfg.pose)
	try:
		pipeline = TrackingPipeline(cfg.tracking)
		motion_log = MotionLog(capacity=cfg.tracking.log_capacity)
		events = replay_frames(_estimate_all(provider, source, max_frames), pipeline, motion_log)
	finally:
		provider.close()
	logger.info(
		"Processed %d frames, %d movement events (last %d kept in log)",
		pipeline.frame_count,
		len(events),
		len(motion_log),
	)
	return len(events)


def main() -> None:
	import argparse

	parser = argparse.ArgumentParser(description="Run body-part movement detection on a video or camera.")
	parser.add_argument("--source", default="0", help="Video file path or camera index (default: 0).")
	parser.add_argument("--frames", type=int, default=None, help="Stop after this many frames.")
	parser.add_argument("--config", default=None, help="Path to config.json (default: repo root).")
	parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
	args = parser.parse_args()

	if args.config:
		set_config_path(args.config)
	cfg = get_config()
	level = logging.DEBUG if args.debug else getattr(logging, cfg.logging.level, logging.INFO)
	logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

	try:
		run(args.source, cfg, max_frames=args.frames)
	except KeyboardInterrupt:
		print("\nInterrupted by user.")
	except Exception as e:
		logging.exception("Fatal error: %s", e)
		sys.exit(1)


if __name__ == "__main__":
	main()
