"""Pydantic response models for API validation and docs."""
from schemas.responses import (
	DetectionResponse,
	LegendEntry,
	MotionLogResponse,
	MovementEventModel,
	StatusResponse,
)

__all__ = [
	"DetectionResponse",
	"LegendEntry",
	"MotionLogResponse",
	"MovementEventModel",
	"StatusResponse",
]
