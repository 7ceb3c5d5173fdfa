"""HTML page handlers. Routes: /, /api/legend."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from app_state import AppState
from bodytrack.body_parts import legend
from deps import get_state
from schemas import LegendEntry

router = APIRouter(tags=["pages"])


def _get_html(state: AppState, filename: str) -> str:
	"""Load page HTML lazily. 404 if UI template missing."""
	if state.get_page_html is None:
		raise HTTPException(status_code=503, detail="Server not ready")
	try:
		return state.get_page_html(filename)
	except FileNotFoundError as e:
		raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/", response_class=HTMLResponse)
async def index(state: AppState = Depends(get_state)):
	html = _get_html(state, "index.html")
	return HTMLResponse(content=html, headers={"Cache-Control": "no-store, no-cache, must-revalidate"})


@router.get("/api/legend", response_model=List[LegendEntry])
async def get_legend():
	"""Body-part color legend used by the overlay."""
	return legend()
