"""Detection control and motion log. Routes: /status, /detection/*, /log*."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from app_state import AppState
from bodytrack.detection_loop import ModelNotReadyError
from deps import get_state
from schemas import DetectionResponse, MotionLogResponse, StatusResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["tracking"])


def _log_response(state: AppState) -> dict:
	return {"entries": state.motion_log.to_list(), "capacity": state.motion_log.capacity}


def _ensure_model_usable(state: AppState) -> None:
	if state.model_error:
		raise HTTPException(status_code=503, detail=state.model_error)
	if not state.model_loaded:
		raise HTTPException(status_code=409, detail="Please wait for the model to load first!")


@router.get("/status", response_model=StatusResponse)
async def get_status(state: AppState = Depends(get_state)):
	return state.status()


@router.post("/detection/start", response_model=DetectionResponse)
async def start_detection(state: AppState = Depends(get_state)):
	"""Start a new detection session (frame counter, smoothing history and baseline reset)."""
	_ensure_model_usable(state)
	if state.detection.active:
		return {"detail": "Detection already running.", "detecting": True}
	try:
		await state.detection.start()
	except ModelNotReadyError as e:
		raise HTTPException(status_code=409, detail=str(e)) from e
	state.log_to_clients("[Tracking] BODY TRACKING STARTED")
	return {"detail": "Detection started.", "detecting": True}


@router.post("/detection/stop", response_model=DetectionResponse)
async def stop_detection(state: AppState = Depends(get_state)):
	"""Pause detection. The motion log is kept."""
	was_active = state.detection.active
	await state.detection.stop()
	if was_active:
		state.log_to_clients("[Tracking] Body tracking paused")
	return {"detail": "Detection stopped.", "detecting": False}


@router.post("/detection/toggle", response_model=DetectionResponse)
async def toggle_detection(state: AppState = Depends(get_state)):
	if state.detection.active:
		return await stop_detection(state)
	return await start_detection(state)


@router.get("/log", response_model=MotionLogResponse)
async def get_motion_log(state: AppState = Depends(get_state)):
	"""Most recent movement events, newest first."""
	return _log_response(state)


@router.post("/log/clear", response_model=MotionLogResponse)
async def clear_motion_log(state: AppState = Depends(get_state)):
	state.motion_log.clear()
	logger.info("Motion log cleared!")
	state.log_to_clients("[Tracking] Motion log cleared!")
	state.notify_clients({"type": "motion", "events": [], "log": []})
	return _log_response(state)
