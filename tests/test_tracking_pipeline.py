from bodytrack.config import TrackingConfig
from bodytrack.tracking_pipeline import TrackingPipeline
from conftest import shifted


def _pipeline(**kw):
	return TrackingPipeline(TrackingConfig(**kw), logger=lambda _m: None, clock=lambda: "00:00:00")


def test_analysis_runs_every_fifth_frame(confident_frame):
	pipe = _pipeline()
	analyzed = [pipe.process(confident_frame).analyzed for _ in range(15)]
	assert [i + 1 for i, a in enumerate(analyzed) if a] == [5, 10, 15]
	assert pipe.frame_count == 15


def test_first_analysis_is_baseline_only(confident_frame):
	pipe = _pipeline()
	results = [pipe.process(confident_frame) for _ in range(5)]
	assert results[-1].analyzed
	assert results[-1].events == []


def test_movement_between_analyzed_frames_is_reported(confident_frame):
	pipe = _pipeline(smoothing_window=1)
	for _ in range(5):
		pipe.process(confident_frame)
	moved = shifted(confident_frame, [9], dx=60.0)  # left wrist -> left arm center moves 20px
	results = [pipe.process(moved) for _ in range(5)]
	assert [e.text for e in results[-1].events] == ["Left arm moved"]
	assert all(r.events == [] for r in results[:-1])


def test_smoothed_frame_is_returned_every_frame(confident_frame):
	pipe = _pipeline()
	first = pipe.process(confident_frame)
	second = pipe.process(shifted(confident_frame, [0], dx=10.0))
	assert first.smoothed == confident_frame
	assert second.smoothed[0].x_px == confident_frame[0].x_px + 5.0
	assert (first.frame_index, second.frame_index) == (1, 2)


def test_custom_frame_skip(confident_frame):
	pipe = _pipeline(frame_skip=1)
	assert all(pipe.process(confident_frame).analyzed for _ in range(3))


def test_non_positive_frame_skip_falls_back_to_default(confident_frame):
	pipe = _pipeline(frame_skip=0)
	assert pipe.frame_skip == 5
	analyzed = [pipe.process(confident_frame).analyzed for _ in range(5)]
	assert analyzed == [False, False, False, False, True]
