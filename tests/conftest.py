import itertools
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pytest

from bodytrack.camera import CameraSource
from bodytrack.pose.base import PoseProvider
from bodytrack.pose.types import NUM_KEYPOINTS, Keypoint, PoseFrame


def make_frame(
	points: Optional[Dict[int, Tuple[float, float, float]]] = None,
	default: Tuple[float, float, float] = (0.0, 0.0, 0.0),
	width: int = 640,
	height: int = 480,
) -> PoseFrame:
	"""17-keypoint frame; `points` maps index -> (x, y, score), others use `default`."""
	points = points or {}
	kps = []
	for i in range(NUM_KEYPOINTS):
		x, y, s = points.get(i, default)
		kps.append(Keypoint(index=i, x_px=float(x), y_px=float(y), score=float(s)))
	return PoseFrame(backend="fake", width=width, height=height, keypoints=tuple(kps))


def shifted(frame: PoseFrame, indices: Iterable[int], dx: float = 0.0, dy: float = 0.0) -> PoseFrame:
	moved = set(indices)
	kps = tuple(
		Keypoint(index=k.index, x_px=k.x_px + dx, y_px=k.y_px + dy, score=k.score) if k.index in moved else k
		for k in frame.keypoints
	)
	return PoseFrame(backend=frame.backend, width=frame.width, height=frame.height, keypoints=kps)


class FakeProvider(PoseProvider):
	"""Returns scripted frames in order (the last one repeats); Exceptions in the script are raised."""

	def __init__(self, script: List[object]) -> None:
		self.script = list(script)
		self.calls = 0
		self.closed = False

	def name(self) -> str:
		return "fake_pose"

	def infer_rgb(self, rgb, t_host=None) -> PoseFrame:
		item = self.script[min(self.calls, len(self.script) - 1)]
		self.calls += 1
		if isinstance(item, Exception):
			raise item
		return item

	def close(self) -> None:
		self.closed = True


class FakeCamera(CameraSource):
	"""Hands out a new black frame with an increasing timestamp on every read."""

	def __init__(self, width: int = 64, height: int = 48) -> None:
		self.width = width
		self.height = height
		self.running = False
		self._t = itertools.count(1)

	def name(self) -> str:
		return "fake"

	def start(self) -> None:
		self.running = True

	def stop(self) -> None:
		self.running = False

	def is_running(self) -> bool:
		return self.running

	def get_status(self):
		return {"backend": "fake", "running": self.running, "error": None}

	def get_latest_rgb(self):
		return np.zeros((self.height, self.width, 3), dtype=np.uint8), float(next(self._t))

	def get_latest_jpeg(self):
		return b"\xff\xd8preview\xff\xd9", 1.0


@pytest.fixture
def confident_frame() -> PoseFrame:
	"""Everyone visible: keypoint i at (100 + 10*i, 200), score 0.9."""
	return make_frame({i: (100.0 + 10 * i, 200.0, 0.9) for i in range(NUM_KEYPOINTS)})
