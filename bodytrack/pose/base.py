from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from bodytrack.pose.types import PoseFrame


class PoseProvider(ABC):
	"""
	Model adapter interface.

	Implementations take an RGB image (H,W,3 uint8) and return a PoseFrame whose
	keypoints are empty when no person is found. Errors propagate to the caller;
	the detection loop treats them as "no detection this frame".
	"""

	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def infer_rgb(self, rgb, t_host: Optional[float] = None) -> PoseFrame: ...

	@abstractmethod
	def close(self) -> None: ...
