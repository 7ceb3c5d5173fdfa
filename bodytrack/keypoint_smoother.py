from __future__ import annotations

from collections import deque
from dataclasses import replace
from typing import Deque

from bodytrack.pose.types import Keypoint, PoseFrame


class KeypointSmoother:
	"""
	Confidence-weighted moving average over the last `window` pose frames.

	For each keypoint index, only history entries scoring at least
	`min_score` contribute; if none do, the newest raw keypoint is kept so the
	output always has all 17 points.
	"""

	def __init__(self, window: int = 5, min_score: float = 0.5) -> None:
		self.window = int(window) if int(window) > 0 else 5
		self.min_score = float(min_score)
		self._history: Deque[PoseFrame] = deque(maxlen=self.window)

	@property
	def history_len(self) -> int:
		return len(self._history)

	def reset(self) -> None:
		self._history.clear()

	def smooth(self, frame: PoseFrame) -> PoseFrame:
		self._history.append(frame)
		if len(self._history) < 2:
			return frame

		smoothed = []
		for i, kp in enumerate(frame.keypoints):
			sum_x = 0.0
			sum_y = 0.0
			sum_score = 0.0
			count = 0
			for past in self._history:
				if i >= len(past):
					continue
				p = past[i]
				if p.score >= self.min_score:
					sum_x += p.x_px
					sum_y += p.y_px
					sum_score += p.score
					count += 1
			if count == 0:
				smoothed.append(kp)
				continue
			smoothed.append(
				Keypoint(
					index=kp.index,
					x_px=sum_x / count,
					y_px=sum_y / count,
					score=sum_score / count,
				)
			)
		return replace(frame, keypoints=tuple(smoothed))
