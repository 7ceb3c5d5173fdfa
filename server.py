import asyncio
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app_state import AppState
from bodytrack.camera import CameraSource, OpenCvCamera
from bodytrack.config import AppConfig, PoseConfig, get_config
from bodytrack.pose.base import PoseProvider
from bodytrack.pose.loader import describe_load_error, get_pose_provider
from routers import pages, tracking, video, ws

logger = logging.getLogger("bodytrack.server")

# UI directory path
UI_DIR = Path(__file__).parent / "UI"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@lru_cache(maxsize=None)
def load_html_template(filename: str) -> str:
	"""
	Load an HTML template file from the UI directory (cached after first request).

	Raises:
		FileNotFoundError: If the file doesn't exist
	"""
	file_path = UI_DIR / filename
	if not file_path.exists():
		raise FileNotFoundError(f"UI template not found: {file_path}")
	with open(file_path, "r", encoding="utf-8") as f:
		return f.read()


def configure_logging(cfg: AppConfig) -> None:
	level = getattr(logging, cfg.logging.level, logging.INFO)
	logging.basicConfig(level=level, format=LOG_FORMAT)


def _fire_and_forget(state: AppState, message: Dict[str, Any]) -> None:
	"""
	Broadcast to all WebSocket clients without awaiting.
	Safe to call from non-async code.
	"""
	if state.manager is None:
		return
	try:
		asyncio.get_running_loop().create_task(state.manager.broadcast_json(message))
	except RuntimeError:
		# No running loop yet; ignore
		pass


async def _load_pose_model(state: AppState, factory: Callable[[PoseConfig], PoseProvider]) -> None:
	"""
	Create the pose provider off the event loop. A failure is terminal for this
	process: the message is kept for the UI and never retried.
	"""
	loop = asyncio.get_running_loop()
	logger.info("Loading pose model (%s)...", state.cfg.pose.backend)
	try:
		provider = await loop.run_in_executor(None, factory, state.cfg.pose)
	except Exception as e:
		state.model_error = describe_load_error(e)
		logger.error("Error loading pose model: %r", e)
		state.log_to_clients(f"[Model] {state.model_error}")
	else:
		state.pose_provider = provider
		state.model_loaded = True
		logger.info("Pose model loaded: %s", provider.name())
		state.log_to_clients(f"[Model] Pose model loaded ({provider.name()})")
	state.notify_clients({"type": "status", **state.status()})


def create_app(
	cfg: Optional[AppConfig] = None,
	camera: Optional[CameraSource] = None,
	provider_factory: Optional[Callable[[PoseConfig], PoseProvider]] = None,
) -> FastAPI:
	"""
	Build the FastAPI app. Camera and pose provider factory are injectable so the
	service can run headless (tests) without a webcam or model download.
	"""
	cfg = cfg or get_config()
	factory = provider_factory or get_pose_provider

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		state = AppState(cfg, camera or OpenCvCamera(cfg.camera))
		state.manager = ws.ConnectionManager()
		state.get_page_html = load_html_template
		state.UI_DIR = UI_DIR
		state.log_to_clients = lambda msg: _fire_and_forget(state, {"type": "log", "msg": msg})
		state.notify_clients = lambda msg: _fire_and_forget(state, msg)
		app.state.state = state

		try:
			state.camera.start()
		except Exception as e:
			# Camera problems are visible in /video/status; the page can retry via /video/connect.
			logger.error("Camera start failed: %r", e)
		state.model_task = asyncio.create_task(_load_pose_model(state, factory))

		try:
			yield
		finally:
			await state.detection.stop()
			task = state.model_task
			if task and not task.done():
				task.cancel()
				try:
					await task
				except asyncio.CancelledError:
					pass
			try:
				state.camera.stop()
			except Exception as e:
				logger.warning("Camera stop failed: %r", e)
			if state.pose_provider is not None:
				state.pose_provider.close()

	app = FastAPI(title="bodytrack", lifespan=lifespan)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=["*"],
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.include_router(pages.router)
	app.include_router(tracking.router)
	app.include_router(video.router)
	app.include_router(ws.router)
	return app


_CFG = get_config()
configure_logging(_CFG)
app = create_app(_CFG)
