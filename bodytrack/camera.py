from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from bodytrack.config import CameraConfig
from bodytrack.overlay import encode_jpeg, mirror_image

logger = logging.getLogger(__name__)


class CameraSource(ABC):
	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def start(self) -> None: ...

	@abstractmethod
	def stop(self) -> None: ...

	@abstractmethod
	def is_running(self) -> bool: ...

	@abstractmethod
	def get_status(self) -> Dict[str, Any]: ...

	@abstractmethod
	def get_latest_rgb(self) -> Tuple[Optional[Any], Optional[float]]:
		"""Latest RGB frame (H,W,3 uint8 ndarray) and its host timestamp. Thread-safe."""
		...

	@abstractmethod
	def get_latest_jpeg(self) -> Tuple[Optional[bytes], Optional[float]]:
		"""Latest mirrored preview JPEG and its host timestamp. Thread-safe."""
		...


class OpenCvCamera(CameraSource):
	"""
	Local webcam via OpenCV.

	A capture thread keeps only the newest frame; consumers never queue frames,
	so a slow pose model just sees fewer of them.
	"""

	def __init__(self, cfg: Optional[CameraConfig] = None) -> None:
		self._cfg = cfg or CameraConfig()
		self._lock = threading.Lock()
		self._running = False
		self._thread: Optional[threading.Thread] = None
		self._last_error: Optional[str] = None

		self._latest_rgb = None
		self._latest_t_host: Optional[float] = None
		self._latest_jpeg: Optional[bytes] = None
		self._latest_jpeg_t: Optional[float] = None
		self._last_preview_encode_t: float = 0.0
		self._frame_idx: int = 0
		self._frame_size: Optional[Tuple[int, int]] = None

	def name(self) -> str:
		return f"opencv:{int(self._cfg.index)}"

	def is_running(self) -> bool:
		with self._lock:
			return bool(self._running)

	def get_status(self) -> Dict[str, Any]:
		with self._lock:
			return {
				"backend": self.name(),
				"running": bool(self._running),
				"has_frame": self._latest_rgb is not None,
				"t_last_frame": self._latest_t_host,
				"frame_idx": int(self._frame_idx),
				"frame_size": list(self._frame_size) if self._frame_size else None,
				"preview_fps": int(self._cfg.preview_fps),
				"error": self._last_error,
			}

	def get_latest_rgb(self) -> Tuple[Optional[Any], Optional[float]]:
		with self._lock:
			return self._latest_rgb, self._latest_t_host

	def get_latest_jpeg(self) -> Tuple[Optional[bytes], Optional[float]]:
		with self._lock:
			return self._latest_jpeg, self._latest_jpeg_t

	def start(self) -> None:
		with self._lock:
			if self._running:
				return
			self._running = True
			self._last_error = None

		t = threading.Thread(target=self._run_capture_loop, name="opencv-capture", daemon=True)
		self._thread = t
		t.start()

	def stop(self) -> None:
		with self._lock:
			self._running = False
		t = self._thread
		if t and t.is_alive():
			t.join(timeout=2.0)
		self._thread = None

	def _fail(self, message: str) -> None:
		logger.error("[Camera] %s", message)
		with self._lock:
			self._last_error = message
			self._running = False

	def _run_capture_loop(self) -> None:
		try:
			import cv2  # type: ignore
		except Exception as e:
			self._fail(f"OpenCV import failed: {e!r}. Install `opencv-python` (pip).")
			return

		cap = cv2.VideoCapture(int(self._cfg.index))
		if not cap or not cap.isOpened():
			self._fail(f"Unable to open camera index {int(self._cfg.index)}. Check camera permissions.")
			return
		cap.set(cv2.CAP_PROP_FRAME_WIDTH, int(self._cfg.width))
		cap.set(cv2.CAP_PROP_FRAME_HEIGHT, int(self._cfg.height))
		logger.info("[Camera] Capture started on %s", self.name())

		try:
			while self.is_running():
				ok, frame_bgr = cap.read()
				if not ok or frame_bgr is None:
					self._fail("Camera read failed (device disconnected?)")
					break
				rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
				now = time.time()
				with self._lock:
					self._latest_rgb = rgb
					self._latest_t_host = now
					self._frame_idx += 1
					self._frame_size = (int(rgb.shape[1]), int(rgb.shape[0]))
					target_dt = 1.0 / max(1.0, float(self._cfg.preview_fps))
					do_preview = (now - self._last_preview_encode_t) >= target_dt
					if do_preview:
						self._last_preview_encode_t = now

				if do_preview:
					try:
						jpg = encode_jpeg(mirror_image(rgb), quality=self._cfg.jpeg_quality)
						with self._lock:
							self._latest_jpeg = jpg
							self._latest_jpeg_t = now
					except Exception:
						# Keep preview best-effort; don't kill capture on encode errors.
						logger.debug("[Camera] preview encode failed", exc_info=True)
		finally:
			cap.release()
			logger.info("[Camera] Capture stopped on %s", self.name())
