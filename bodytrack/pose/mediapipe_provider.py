from __future__ import annotations

from typing import Optional

from bodytrack.pose.base import PoseProvider
from bodytrack.pose.types import COCO17_NAMES, Keypoint, PoseFrame


class MediaPipePoseProvider(PoseProvider):
	"""
	MediaPipe Pose provider that outputs the COCO-17 keypoint set in COCO order.

	Notes:
	- MediaPipe uses normalized coordinates; we convert to pixel space.
	- `visibility` is used as score (best-effort).
	"""

	def __init__(
		self,
		model_complexity: int = 1,
		min_detection_confidence: float = 0.5,
		min_tracking_confidence: float = 0.5,
	) -> None:
		try:
			import mediapipe as mp  # type: ignore
		except Exception as e:
			raise RuntimeError("MediaPipe is not installed. Install it with: pip install mediapipe") from e

		self._mp = mp
		# smooth_landmarks stays off: temporal smoothing is done by KeypointSmoother.
		self._pose = mp.solutions.pose.Pose(
			static_image_mode=False,
			model_complexity=int(model_complexity),
			enable_segmentation=False,
			smooth_landmarks=False,
			min_detection_confidence=float(min_detection_confidence),
			min_tracking_confidence=float(min_tracking_confidence),
		)
		PL = mp.solutions.pose.PoseLandmark
		self._landmark_ids = tuple(int(getattr(PL, name.upper())) for name in COCO17_NAMES)

	def name(self) -> str:
		return "mediapipe_pose"

	def infer_rgb(self, rgb, t_host: Optional[float] = None) -> PoseFrame:
		# rgb: HxWx3
		h, w = int(rgb.shape[0]), int(rgb.shape[1])
		res = self._pose.process(rgb)
		if not res or not getattr(res, "pose_landmarks", None):
			return PoseFrame(backend=self.name(), width=w, height=h, t_host=t_host)

		lm = res.pose_landmarks.landmark
		keypoints = []
		for i, idx in enumerate(self._landmark_ids):
			p = lm[idx]
			keypoints.append(
				Keypoint(
					index=i,
					x_px=float(p.x) * float(w),
					y_px=float(p.y) * float(h),
					score=min(1.0, max(0.0, float(getattr(p, "visibility", 0.0) or 0.0))),
				)
			)
		return PoseFrame(backend=self.name(), width=w, height=h, t_host=t_host, keypoints=tuple(keypoints))

	def close(self) -> None:
		try:
			if self._pose:
				self._pose.close()
		except Exception:
			pass
