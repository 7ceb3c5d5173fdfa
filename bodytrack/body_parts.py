from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from bodytrack.pose.types import PoseFrame


Point = Tuple[float, float]

# Keypoint indices (COCO-17) grouped into the six tracked body parts.
# Order matters: it is the order centers are computed and displayed in.
BODY_PARTS: Dict[str, Tuple[int, ...]] = {
	"head": (0, 1, 2, 3, 4),
	"left_arm": (5, 7, 9),
	"right_arm": (6, 8, 10),
	"left_leg": (11, 13, 15),
	"right_leg": (12, 14, 16),
	"torso": (5, 6, 11, 12),
}

PART_LABELS: Dict[str, str] = {
	"head": "Head",
	"left_arm": "Left arm",
	"right_arm": "Right arm",
	"left_leg": "Left leg",
	"right_leg": "Right leg",
	"torso": "Torso",
}

# RGB stroke color and legend name per part.
PART_COLORS: Dict[str, Tuple[Tuple[int, int, int], str]] = {
	"head": ((255, 0, 0), "Red"),
	"left_arm": ((255, 0, 255), "Magenta"),
	"right_arm": ((0, 255, 255), "Cyan"),
	"left_leg": ((0, 255, 0), "Green"),
	"right_leg": ((255, 255, 0), "Yellow"),
	"torso": ((255, 165, 0), "Orange"),
}

SKELETON_EDGES: Tuple[Tuple[int, int], ...] = (
	(5, 6), (5, 7), (7, 9), (6, 8), (8, 10),
	(5, 11), (6, 12), (11, 12),
	(11, 13), (13, 15), (12, 14), (14, 16),
	(0, 1), (0, 2), (1, 3), (2, 4),
)


def part_center(frame: PoseFrame, indices: Sequence[int], min_score: float = 0.5) -> Optional[Point]:
	"""
	Mean (x, y) of the keypoints in `indices` scoring at least `min_score`.
	Returns None when no keypoint qualifies.
	"""
	sum_x = 0.0
	sum_y = 0.0
	count = 0
	for idx in indices:
		if idx >= len(frame):
			continue
		kp = frame[idx]
		if kp.score >= min_score:
			sum_x += kp.x_px
			sum_y += kp.y_px
			count += 1
	if count == 0:
		return None
	return (sum_x / count, sum_y / count)


def compute_part_centers(frame: PoseFrame, min_score: float = 0.5) -> Dict[str, Optional[Point]]:
	return {part: part_center(frame, indices, min_score) for part, indices in BODY_PARTS.items()}


def legend() -> List[Dict[str, str]]:
	"""Color legend for the UI."""
	out = []
	for part, ((r, g, b), color_name) in PART_COLORS.items():
		out.append(
			{
				"part": part,
				"label": PART_LABELS[part],
				"color": f"#{r:02x}{g:02x}{b:02x}",
				"color_name": color_name,
			}
		)
	return out
