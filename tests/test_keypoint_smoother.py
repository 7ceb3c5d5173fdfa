import pytest

from bodytrack.keypoint_smoother import KeypointSmoother
from conftest import make_frame


def test_single_frame_is_returned_unchanged(confident_frame):
	smoother = KeypointSmoother(window=5, min_score=0.5)
	out = smoother.smooth(confident_frame)
	assert out == confident_frame


def test_history_never_exceeds_window():
	smoother = KeypointSmoother(window=5)
	for i in range(12):
		smoother.smooth(make_frame(default=(float(i), 0.0, 0.9)))
		assert smoother.history_len <= 5
	assert smoother.history_len == 5


def test_averages_position_and_score_over_confident_history():
	smoother = KeypointSmoother(window=5, min_score=0.5)
	smoother.smooth(make_frame({0: (0.0, 0.0, 0.6)}))
	out = smoother.smooth(make_frame({0: (10.0, 20.0, 1.0)}))
	assert out[0].x_px == pytest.approx(5.0)
	assert out[0].y_px == pytest.approx(10.0)
	assert out[0].score == pytest.approx(0.8)


def test_low_confidence_entries_are_left_out_of_the_average():
	smoother = KeypointSmoother(window=5, min_score=0.5)
	smoother.smooth(make_frame({3: (100.0, 100.0, 0.4)}))
	smoother.smooth(make_frame({3: (10.0, 10.0, 0.9)}))
	out = smoother.smooth(make_frame({3: (20.0, 30.0, 0.7)}))
	assert out[3].x_px == pytest.approx(15.0)
	assert out[3].y_px == pytest.approx(20.0)
	assert out[3].score == pytest.approx(0.8)


def test_all_sub_threshold_falls_back_to_latest_raw_keypoint():
	smoother = KeypointSmoother(window=5, min_score=0.5)
	for x in (1.0, 2.0, 3.0):
		smoother.smooth(make_frame({7: (x, x, 0.4)}))
	latest = make_frame({7: (42.0, 43.0, 0.4)})
	out = smoother.smooth(latest)
	assert out[7] == latest[7]


def test_evicted_frames_no_longer_contribute():
	smoother = KeypointSmoother(window=2, min_score=0.5)
	smoother.smooth(make_frame({0: (1000.0, 1000.0, 0.9)}))
	smoother.smooth(make_frame({0: (10.0, 10.0, 0.9)}))
	out = smoother.smooth(make_frame({0: (20.0, 20.0, 0.9)}))
	assert out[0].x_px == pytest.approx(15.0)


def test_output_is_complete_and_keeps_frame_metadata(confident_frame):
	smoother = KeypointSmoother()
	smoother.smooth(confident_frame)
	out = smoother.smooth(confident_frame)
	assert len(out) == 17
	assert [kp.index for kp in out.keypoints] == list(range(17))
	assert (out.width, out.height, out.backend) == (confident_frame.width, confident_frame.height, "fake")


def test_reset_clears_history(confident_frame):
	smoother = KeypointSmoother()
	smoother.smooth(confident_frame)
	smoother.smooth(confident_frame)
	smoother.reset()
	assert smoother.history_len == 0
