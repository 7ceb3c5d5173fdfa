from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageDraw, ImageOps

from bodytrack.body_parts import BODY_PARTS, PART_COLORS, SKELETON_EDGES
from bodytrack.pose.types import PoseFrame

POINT_RADIUS = 6
PART_LINE_WIDTH = 3
EDGE_LINE_WIDTH = 2
FILL_ALPHA = 128
EDGE_COLOR = (255, 255, 255, 153)


def mirror_image(rgb) -> Image.Image:
	"""Selfie-view copy of an RGB ndarray (H,W,3 uint8)."""
	return ImageOps.mirror(Image.fromarray(rgb))


def render_overlay(rgb, frame: PoseFrame, min_score: float = 0.5) -> Image.Image:
	"""
	Draw the smoothed skeleton over a mirrored copy of the frame.

	Keypoints are in unmirrored pixel space, so x is drawn at `width - x`.
	Parts with 2+ confident keypoints get a translucent polygon; every confident
	keypoint gets a dot; skeleton edges connect confident pairs.
	"""
	base = mirror_image(rgb).convert("RGBA")
	width = base.width
	layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
	draw = ImageDraw.Draw(layer)

	if frame.detected:
		for part, indices in BODY_PARTS.items():
			(r, g, b), _name = PART_COLORS[part]
			pts = [
				(width - frame[i].x_px, frame[i].y_px)
				for i in indices
				if frame[i].score >= min_score
			]
			if not pts:
				continue
			if len(pts) >= 2:
				draw.polygon(pts, fill=(r, g, b, FILL_ALPHA))
				draw.line(pts + [pts[0]], fill=(r, g, b, 255), width=PART_LINE_WIDTH)
			for x, y in pts:
				draw.ellipse(
					(x - POINT_RADIUS, y - POINT_RADIUS, x + POINT_RADIUS, y + POINT_RADIUS),
					fill=(r, g, b, 255),
					outline=(255, 255, 255, 255),
					width=2,
				)

		for i, j in SKELETON_EDGES:
			kp1 = frame[i]
			kp2 = frame[j]
			if kp1.score >= min_score and kp2.score >= min_score:
				draw.line(
					[(width - kp1.x_px, kp1.y_px), (width - kp2.x_px, kp2.y_px)],
					fill=EDGE_COLOR,
					width=EDGE_LINE_WIDTH,
				)

	return Image.alpha_composite(base, layer).convert("RGB")


def encode_jpeg(image: Image.Image, quality: int = 80) -> bytes:
	buf = BytesIO()
	image.save(buf, format="JPEG", quality=int(quality), optimize=True)
	return buf.getvalue()
