from __future__ import annotations

import threading
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Dict, Iterable, List


@dataclass(frozen=True)
class MovementEvent:
	"""
	One thresholded body-part movement.

	- text: human-readable description shown in the UI ("Head turned left").
	- time: wall-clock time string (HH:MM:SS) of the analyzed frame.
	- part: body part key (see bodytrack.body_parts.BODY_PARTS).
	- magnitude_px: displacement that triggered the event.
	"""

	text: str
	time: str
	part: str = ""
	magnitude_px: float = 0.0

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


class MotionLog:
	"""
	Most-recent-first feed of movement events, bounded to `capacity` entries.
	Written by the detection loop, read by HTTP handlers.
	"""

	def __init__(self, capacity: int = 10) -> None:
		self.capacity = int(capacity) if int(capacity) > 0 else 10
		self._lock = threading.Lock()
		self._entries: Deque[MovementEvent] = deque(maxlen=self.capacity)

	def record(self, events: Iterable[MovementEvent]) -> None:
		batch = list(events)
		if not batch:
			return
		with self._lock:
			# appendleft in reverse keeps batch order at the front; maxlen drops the oldest.
			for ev in reversed(batch):
				self._entries.appendleft(ev)

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()

	def entries(self) -> List[MovementEvent]:
		with self._lock:
			return list(self._entries)

	def to_list(self) -> List[Dict[str, Any]]:
		return [ev.to_dict() for ev in self.entries()]

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)
