"""Camera routes. Routes: /video/connect, disconnect, status, mjpeg, snapshot.jpg."""
import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response, StreamingResponse

from app_state import AppState
from bodytrack.video_stream import BOUNDARY, mjpeg_from_latest
from deps import get_state

router = APIRouter(tags=["video"])

_NO_CACHE = {
	"Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
	"Pragma": "no-cache",
}


@router.post("/video/connect")
async def video_connect(state: AppState = Depends(get_state)):
	"""Open the camera and start capturing frames."""
	try:
		state.camera.start()
		await asyncio.sleep(0.2)
		st = state.camera.get_status()
	except Exception as e:
		raise HTTPException(status_code=500, detail=f"Video connect failed: {e!r}")
	if not st.get("running") and st.get("error"):
		raise HTTPException(status_code=500, detail=str(st.get("error")))
	return {"detail": "Video streaming started.", "status": st}


@router.post("/video/disconnect")
async def video_disconnect(state: AppState = Depends(get_state)):
	"""Stop detection (if running) and release the camera."""
	await state.detection.stop()
	try:
		state.camera.stop()
	except Exception as e:
		raise HTTPException(status_code=500, detail=f"Video disconnect failed: {e!r}")
	return {"detail": "Video streaming stopped.", "status": state.camera.get_status()}


@router.get("/video/status")
async def video_status(state: AppState = Depends(get_state)):
	return state.camera.get_status()


@router.get("/video/mjpeg")
async def video_mjpeg(fps: Optional[float] = None, state: AppState = Depends(get_state)):
	"""Live MJPEG stream: skeleton overlay while detecting, mirrored preview otherwise."""
	return StreamingResponse(
		mjpeg_from_latest(state.latest_display_jpeg, fps=fps or state.cfg.camera.preview_fps),
		media_type=f"multipart/x-mixed-replace; boundary={BOUNDARY}",
		headers={**_NO_CACHE, "Connection": "keep-alive"},
	)


@router.get("/video/snapshot.jpg")
async def video_snapshot(state: AppState = Depends(get_state)):
	"""Return a single latest JPEG frame."""
	jpeg, _t = state.latest_display_jpeg()
	if jpeg is None:
		raise HTTPException(status_code=404, detail="No JPEG frame available yet")
	return Response(content=jpeg, media_type="image/jpeg", headers=_NO_CACHE)
