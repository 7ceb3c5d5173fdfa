"""Pydantic response models for the tracking API."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MovementEventModel(BaseModel):
	"""One motion log entry."""

	text: str = Field(..., description="Human-readable movement, e.g. 'Head turned left'")
	time: str = Field(..., description="Wall-clock time HH:MM:SS")
	part: str = ""
	magnitude_px: float = 0.0


class MotionLogResponse(BaseModel):
	"""Response from GET /log and POST /log/clear. Newest entry first."""

	entries: List[MovementEventModel]
	capacity: int


class LegendEntry(BaseModel):
	part: str
	label: str
	color: str
	color_name: str


class StatusResponse(BaseModel):
	"""Response from GET /status."""

	model_loaded: bool
	model_error: Optional[str] = None
	detecting: bool
	frame_count: int
	estimation_failures: int
	settings: Dict[str, Any]
	legend: List[LegendEntry]
	camera: Dict[str, Any]


class DetectionResponse(BaseModel):
	"""Response from POST /detection/start, /stop and /toggle."""

	detail: str
	detecting: bool
