import pytest

from bodytrack.body_parts import BODY_PARTS, compute_part_centers, legend, part_center
from conftest import make_frame


def test_center_is_mean_of_confident_points():
	frame = make_frame({0: (0.0, 0.0, 0.9), 1: (10.0, 10.0, 0.9)})
	assert part_center(frame, [0, 1], 0.5) == pytest.approx((5.0, 5.0))


def test_low_confidence_points_are_ignored():
	frame = make_frame({0: (0.0, 0.0, 0.9), 1: (10.0, 10.0, 0.9), 2: (500.0, 500.0, 0.49)})
	assert part_center(frame, [0, 1, 2], 0.5) == pytest.approx((5.0, 5.0))


def test_threshold_is_inclusive():
	frame = make_frame({5: (4.0, 8.0, 0.5)})
	assert part_center(frame, [5], 0.5) == pytest.approx((4.0, 8.0))


def test_no_confident_points_gives_none():
	frame = make_frame(default=(1.0, 1.0, 0.2))
	assert part_center(frame, BODY_PARTS["torso"], 0.5) is None


def test_six_parts_in_fixed_order(confident_frame):
	centers = compute_part_centers(confident_frame, 0.5)
	assert list(centers) == ["head", "left_arm", "right_arm", "left_leg", "right_leg", "torso"]
	# torso = shoulders 5,6 and hips 11,12 -> x = 100 + 10 * mean(5, 6, 11, 12)
	assert centers["torso"] == pytest.approx((185.0, 200.0))


def test_part_groups_match_coco_layout():
	assert BODY_PARTS["head"] == (0, 1, 2, 3, 4)
	assert BODY_PARTS["left_arm"] == (5, 7, 9)
	assert BODY_PARTS["right_leg"] == (12, 14, 16)
	assert set(BODY_PARTS["torso"]) == {5, 6, 11, 12}


def test_legend_has_hex_colors():
	entries = {e["part"]: e for e in legend()}
	assert entries["head"]["color"] == "#ff0000"
	assert entries["torso"]["color_name"] == "Orange"
	assert len(entries) == 6
