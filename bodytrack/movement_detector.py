from __future__ import annotations

import logging
import math
import time
from typing import Callable, Dict, List, Mapping, Optional

from bodytrack.body_parts import PART_LABELS, Point
from bodytrack.motion_log import MovementEvent

_log = logging.getLogger(__name__)

LIMB_PARTS = ("left_arm", "right_arm", "left_leg", "right_leg")


def _wall_clock() -> str:
	return time.strftime("%H:%M:%S")


class MovementDetector:
	"""
	Compares body-part centers between consecutive analyzed frames.

	State machine:
	  - no baseline (`previous is None`): the first call only stores the centers.
	  - baseline: each call emits events for parts whose center moved past the
	    threshold, then replaces the baseline.

	Rules per part:
	  - head: x and y checked separately against `threshold_px`
	    (dx > 0 -> "turned left", dy > 0 -> "tilted down"), so 0..2 events.
	  - limbs: Euclidean distance > `threshold_px`.
	  - torso: Euclidean distance > `threshold_px * torso_factor`, reported as "Body moved".

	Parts missing in either frame are skipped. Comparisons are strict (>), with no
	hysteresis: a part sitting right at the threshold may flicker.
	"""

	def __init__(
		self,
		threshold_px: float = 15.0,
		torso_factor: float = 1.5,
		logger: Optional[Callable[[str], None]] = None,
		clock: Optional[Callable[[], str]] = None,
	) -> None:
		self.threshold_px = float(threshold_px)
		self.torso_factor = float(torso_factor)
		self.logger: Callable[[str], None] = logger or _log.info
		self._clock: Callable[[], str] = clock or _wall_clock
		self.previous: Optional[Dict[str, Optional[Point]]] = None

	@property
	def torso_threshold_px(self) -> float:
		return self.threshold_px * self.torso_factor

	def reset(self) -> None:
		self.previous = None

	def detect(self, current: Mapping[str, Optional[Point]]) -> List[MovementEvent]:
		if self.previous is None:
			self.previous = dict(current)
			return []

		previous = self.previous
		stamp = self._clock()
		events: List[MovementEvent] = []

		def emit(part: str, text: str, magnitude: float) -> None:
			events.append(MovementEvent(text=text, time=stamp, part=part, magnitude_px=round(magnitude, 1)))
			self.logger(f"{text} ({magnitude:.1f}px)")

		head_cur = current.get("head")
		head_prev = previous.get("head")
		if head_cur is not None and head_prev is not None:
			dx = head_cur[0] - head_prev[0]
			dy = head_cur[1] - head_prev[1]
			if abs(dx) > self.threshold_px:
				emit("head", f"Head turned {'left' if dx > 0 else 'right'}", abs(dx))
			if abs(dy) > self.threshold_px:
				emit("head", f"Head tilted {'down' if dy > 0 else 'up'}", abs(dy))

		for part in LIMB_PARTS:
			cur = current.get(part)
			prev = previous.get(part)
			if cur is None or prev is None:
				continue
			distance = math.hypot(cur[0] - prev[0], cur[1] - prev[1])
			if distance > self.threshold_px:
				emit(part, f"{PART_LABELS[part]} moved", distance)

		torso_cur = current.get("torso")
		torso_prev = previous.get("torso")
		if torso_cur is not None and torso_prev is not None:
			distance = math.hypot(torso_cur[0] - torso_prev[0], torso_cur[1] - torso_prev[1])
			if distance > self.torso_threshold_px:
				emit("torso", "Body moved", distance)

		self.previous = dict(current)
		return events
