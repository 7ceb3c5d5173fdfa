from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from bodytrack.body_parts import compute_part_centers
from bodytrack.config import TrackingConfig
from bodytrack.keypoint_smoother import KeypointSmoother
from bodytrack.motion_log import MovementEvent
from bodytrack.movement_detector import MovementDetector
from bodytrack.pose.types import PoseFrame


@dataclass(frozen=True)
class PipelineResult:
	smoothed: PoseFrame
	frame_index: int
	analyzed: bool = False
	events: List[MovementEvent] = field(default_factory=list)


class TrackingPipeline:
	"""
	Per-session keypoint pipeline: smoothing every frame, part aggregation and
	movement detection every `frame_skip` frames.

	One instance per detection session; a fresh instance starts from frame zero
	with empty history and no movement baseline.
	"""

	def __init__(
		self,
		config: Optional[TrackingConfig] = None,
		logger: Optional[Callable[[str], None]] = None,
		clock: Optional[Callable[[], str]] = None,
	) -> None:
		self.config = config or TrackingConfig()
		self.smoother = KeypointSmoother(
			window=self.config.smoothing_window,
			min_score=self.config.confidence_threshold,
		)
		self.detector = MovementDetector(
			threshold_px=self.config.movement_threshold_px,
			torso_factor=self.config.torso_threshold_factor,
			logger=logger,
			clock=clock,
		)
		self.frame_skip = int(self.config.frame_skip) if int(self.config.frame_skip) > 0 else 5
		self.frame_count = 0

	def process(self, frame: PoseFrame) -> PipelineResult:
		smoothed = self.smoother.smooth(frame)
		self.frame_count += 1
		if self.frame_count % self.frame_skip != 0:
			return PipelineResult(smoothed=smoothed, frame_index=self.frame_count)

		centers = compute_part_centers(smoothed, self.config.confidence_threshold)
		events = self.detector.detect(centers)
		return PipelineResult(smoothed=smoothed, frame_index=self.frame_count, analyzed=True, events=events)
