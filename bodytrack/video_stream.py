from __future__ import annotations

import asyncio
import time
from typing import AsyncIterator, Callable, Optional, Tuple

BOUNDARY = "frame"
DEFAULT_FPS = 15.0


def multipart_jpeg(jpeg: bytes) -> bytes:
	"""One multipart/x-mixed-replace part carrying a JPEG image."""
	header = (
		f"--{BOUNDARY}\r\n"
		"Content-Type: image/jpeg\r\n"
		f"Content-Length: {len(jpeg)}\r\n\r\n"
	).encode("ascii")
	return header + jpeg + b"\r\n"


async def mjpeg_from_latest(
	get_latest_jpeg_fn: Callable[[], Tuple[Optional[bytes], Optional[float]]],
	fps: Optional[float] = None,
) -> AsyncIterator[bytes]:
	"""
	Stream whatever display JPEG is current (overlay or plain preview).
	A frame is sent only when its timestamp changes, at most `fps` per second.
	"""
	rate = float(fps) if fps and fps > 0 else DEFAULT_FPS
	min_interval = 1.0 / rate
	sent_t: Optional[float] = None
	next_send = 0.0

	while True:
		jpeg, t = get_latest_jpeg_fn()
		if jpeg is None or t is None or t == sent_t:
			await asyncio.sleep(0.05 if jpeg is None else 0.01)
			continue
		wait = next_send - time.monotonic()
		if wait > 0:
			await asyncio.sleep(wait)
			continue
		sent_t = t
		next_send = time.monotonic() + min_interval
		yield multipart_jpeg(jpeg)
