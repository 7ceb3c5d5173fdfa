"""
FastAPI dependencies. Route handlers take `state: AppState = Depends(get_state)`.
"""
from fastapi import Request, WebSocket

from app_state import AppState


def get_state(request: Request) -> AppState:
	"""Return the app state instance attached in lifespan."""
	return request.app.state.state


def get_ws_state(websocket: WebSocket) -> AppState:
	return websocket.app.state.state
