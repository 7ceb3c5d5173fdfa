from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


COCO17_NAMES: Tuple[str, ...] = (
	"nose",
	"left_eye",
	"right_eye",
	"left_ear",
	"right_ear",
	"left_shoulder",
	"right_shoulder",
	"left_elbow",
	"right_elbow",
	"left_wrist",
	"right_wrist",
	"left_hip",
	"right_hip",
	"left_knee",
	"right_knee",
	"left_ankle",
	"right_ankle",
)

NUM_KEYPOINTS = len(COCO17_NAMES)


@dataclass(frozen=True)
class Keypoint:
	"""
	A single 2D keypoint in pixel coordinates.
	"""

	index: int
	x_px: float
	y_px: float
	score: float  # confidence/visibility [0..1] best-effort


@dataclass(frozen=True)
class PoseFrame:
	"""
	Single-person pose output for one video frame.

	- `keypoints` is either empty (nobody detected) or exactly 17 entries in
	  COCO order, so index i always refers to the same landmark.
	- Coordinates are in pixel space of the source frame (not mirrored).
	"""

	backend: str
	width: int
	height: int
	t_host: Optional[float] = None
	keypoints: Tuple[Keypoint, ...] = field(default_factory=tuple)

	@property
	def detected(self) -> bool:
		return len(self.keypoints) == NUM_KEYPOINTS

	def __len__(self) -> int:
		return len(self.keypoints)

	def __getitem__(self, index: int) -> Keypoint:
		return self.keypoints[index]
