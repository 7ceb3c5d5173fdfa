from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from bodytrack.camera import CameraSource
from bodytrack.config import TrackingConfig
from bodytrack.motion_log import MotionLog
from bodytrack.overlay import encode_jpeg, render_overlay
from bodytrack.pose.base import PoseProvider
from bodytrack.pose.types import PoseFrame
from bodytrack.tracking_pipeline import PipelineResult, TrackingPipeline

logger = logging.getLogger(__name__)


class ModelNotReadyError(RuntimeError):
	"""Detection was requested before the pose model finished loading."""


class DetectionLoop:
	"""
	The frame-driven detection loop.

	One asyncio task runs `step()` back to back. Each step awaits the pose
	estimate for the newest camera frame (in the default executor) before the
	next one starts. All pipeline state is touched only from this task.

	Cancelling the task does not stop a worker thread that is already inside
	`infer_rgb`, so estimates are serialized by `_estimate_lock` as well: after a
	quick stop/start the new session's first estimate waits for the old one.

	Per-frame estimation errors are logged and the frame is skipped. An estimate
	that completes after `stop()` is discarded. Movement events are recorded
	before the overlay is rendered.
	"""

	def __init__(
		self,
		camera: CameraSource,
		motion_log: MotionLog,
		provider_fn: Callable[[], Optional[PoseProvider]],
		config: Optional[TrackingConfig] = None,
		jpeg_quality: int = 80,
		notify: Optional[Callable[[Dict[str, Any]], None]] = None,
		idle_sleep_s: float = 0.01,
	) -> None:
		self._camera = camera
		self._motion_log = motion_log
		self._provider_fn = provider_fn
		self.config = config or TrackingConfig()
		self._jpeg_quality = int(jpeg_quality)
		self._notify: Callable[[Dict[str, Any]], None] = notify or (lambda _msg: None)
		self._idle_sleep_s = float(idle_sleep_s)

		self._active = False
		self._task: Optional[asyncio.Task] = None
		self.pipeline: Optional[TrackingPipeline] = None
		self._last_frame_t: Optional[float] = None
		self._estimate_lock = threading.Lock()

		self._jpeg_lock = threading.Lock()
		self._latest_jpeg: Optional[bytes] = None
		self._latest_jpeg_t: Optional[float] = None

		self.estimation_failures = 0

	@property
	def active(self) -> bool:
		return self._active

	@property
	def frame_count(self) -> int:
		return self.pipeline.frame_count if self.pipeline else 0

	def get_status(self) -> Dict[str, Any]:
		return {
			"detecting": self._active,
			"frame_count": self.frame_count,
			"estimation_failures": int(self.estimation_failures),
		}

	def get_latest_jpeg(self) -> Tuple[Optional[bytes], Optional[float]]:
		with self._jpeg_lock:
			return self._latest_jpeg, self._latest_jpeg_t

	async def start(self, run_loop: bool = True) -> None:
		"""
		Begin a new detection session from frame zero.
		With run_loop=False no task is spawned and the caller drives `step()`.
		"""
		if self._active:
			return
		if self._provider_fn() is None:
			raise ModelNotReadyError("Please wait for the model to load first!")

		self.pipeline = TrackingPipeline(self.config)
		self._last_frame_t = None
		self.estimation_failures = 0
		self._active = True
		logger.info("BODY TRACKING STARTED")
		self._notify({"type": "status", **self.get_status()})
		if run_loop:
			self._task = asyncio.create_task(self._run(), name="detection-loop")

	async def stop(self) -> None:
		was_active = self._active
		self._active = False
		task = self._task
		self._task = None
		if task is not None and not task.done():
			task.cancel()
			try:
				await task
			except asyncio.CancelledError:
				pass
		with self._jpeg_lock:
			self._latest_jpeg = None
			self._latest_jpeg_t = None
		if was_active:
			logger.info("Body tracking paused")
			self._notify({"type": "status", **self.get_status()})

	async def toggle(self) -> bool:
		if self._active:
			await self.stop()
		else:
			await self.start()
		return self._active

	async def _run(self) -> None:
		while self._active:
			try:
				result = await self.step()
			except asyncio.CancelledError:
				raise
			except Exception:
				# Rendering/bookkeeping failure for one frame must not end the session.
				logger.exception("Detection step failed")
				result = None
			await asyncio.sleep(0 if result is not None else self._idle_sleep_s)

	async def step(self) -> Optional[PipelineResult]:
		"""
		Run one cycle on the newest camera frame.
		Returns None when nothing was processed (no new frame, estimation failed,
		nobody detected, or the session ended meanwhile).
		"""
		pipeline = self.pipeline
		provider = self._provider_fn()
		if not self._active or pipeline is None or provider is None:
			return None

		rgb, t_host = self._camera.get_latest_rgb()
		if rgb is None or t_host is None or t_host == self._last_frame_t:
			return None
		self._last_frame_t = t_host

		loop = asyncio.get_running_loop()
		try:
			pose: Optional[PoseFrame] = await loop.run_in_executor(None, self._estimate, provider, rgb, t_host)
		except Exception:
			self.estimation_failures += 1
			logger.exception("Error during pose detection")
			return None

		if not self._active or pipeline is not self.pipeline:
			return None
		if pose is None or not pose.detected:
			return None

		result = pipeline.process(pose)

		# The detector baseline has already advanced; publish before anything else can fail.
		if result.events:
			self._motion_log.record(result.events)
			self._notify(
				{
					"type": "motion",
					"events": [ev.to_dict() for ev in result.events],
					"log": self._motion_log.to_list(),
				}
			)

		jpeg = await loop.run_in_executor(None, self._render, rgb, result.smoothed)
		with self._jpeg_lock:
			self._latest_jpeg = jpeg
			self._latest_jpeg_t = time.time()
		return result

	def _estimate(self, provider: PoseProvider, rgb, t_host: float) -> PoseFrame:
		with self._estimate_lock:
			return provider.infer_rgb(rgb, t_host)

	def _render(self, rgb, smoothed: PoseFrame) -> bytes:
		image = render_overlay(rgb, smoothed, self.config.confidence_threshold)
		return encode_jpeg(image, quality=self._jpeg_quality)
