import numpy as np
import pytest

from conftest import feed, make_landmarks
from pupil_focus.config import TrackerConfig
from pupil_focus.session import SessionState, TrackerState
from pupil_focus.smoothing import smooth
from pupil_focus.tracker import ConcentrationTracker, process_frame


def test_smooth_is_weighted_average():
    assert smooth(0.0, 100.0, 0.3) == pytest.approx(70.0)
    assert smooth(50.0, 50.0, 0.9) == pytest.approx(50.0)


def test_idle_tracker_ignores_frames():
    tracker = ConcentrationTracker()
    metrics = tracker.observe(make_landmarks(4.0))
    assert metrics.status is TrackerState.IDLE
    assert tracker.state.frame_count == 0
    assert len(tracker.state.pupil_size_history) == 0


def test_process_frame_on_explicit_state():
    state = SessionState(config=TrackerConfig(calibration_frames=3))
    state.status = TrackerState.CALIBRATING
    for _ in range(3):
        metrics = process_frame(state, make_landmarks(4.0))
    assert metrics.is_calibrated
    assert state.baseline_diameter == pytest.approx(4.0)


def test_calibration_completes_and_level_stays_zero(tracker):
    metrics = feed(tracker, 4.0, 30)
    assert metrics.is_calibrated
    assert metrics.status is TrackerState.TRACKING
    assert tracker.baseline_diameter == pytest.approx(4.0)
    assert metrics.level == 0.0
    assert metrics.calibration_progress == 100.0


def test_dilated_frame_scenario(calibrated_tracker):
    tracker = calibrated_tracker
    previous = tracker.concentration_level

    metrics = feed(tracker, 4.6, 1)
    raw = metrics.level / (1 - tracker.config.smoothing_factor)
    assert raw == pytest.approx(70.0, abs=3.0)
    assert previous < metrics.level < 70.0
    assert metrics.dilation_ratio == pytest.approx(1.15)

    levels = [feed(tracker, 4.6, 1).level for _ in range(40)]
    assert levels[-1] == pytest.approx(70.0, abs=0.5)
    assert all(level <= 70.0 + 1e-9 for level in levels)


def test_closed_eye_decays_toward_zero(calibrated_tracker):
    tracker = calibrated_tracker
    feed(tracker, 5.2, 20)
    high = tracker.concentration_level
    assert high > 50.0
    history_len = len(tracker.state.pupil_size_history)

    levels = [feed(tracker, 8.0, 1, left_openness=0.02).level for _ in range(10)]
    assert levels[0] < high
    assert levels == sorted(levels, reverse=True)
    assert levels[-1] < 1.0
    assert len(tracker.state.pupil_size_history) == history_len
    assert tracker.state.left_pupil_size == 0.0


def test_no_detection_decays_without_touching_calibration(calibrated_tracker):
    tracker = calibrated_tracker
    feed(tracker, 4.6, 5)
    level = tracker.concentration_level
    metrics = tracker.observe(None)
    assert metrics.level == pytest.approx(level * tracker.config.smoothing_factor)
    assert metrics.is_calibrated


def test_out_of_range_diameter_is_excluded(tracker):
    tracker.configure(max_pupil_diameter=10.0)
    feed(tracker, 40.0, 10)
    assert len(tracker.state.pupil_size_history) == 0
    assert tracker.state.valid_frame_count == 0


@pytest.mark.parametrize(
    "landmarks",
    [
        None,
        [],
        [None] * 478,
        ["garbage"] * 478,
        np.zeros((478, 3)),
        np.full((478, 2), np.nan),
        42,
    ],
)
def test_malformed_input_never_raises(calibrated_tracker, landmarks):
    metrics = calibrated_tracker.observe(landmarks)
    assert 0.0 <= metrics.level <= 100.0
    assert metrics.is_calibrated


def test_level_bounded_on_random_input(tracker):
    rng = np.random.default_rng(7)
    for _ in range(300):
        diameter = float(rng.uniform(0.5, 12.0))
        openness = float(rng.choice([0.02, 0.3]))
        metrics = tracker.observe(make_landmarks(diameter, left_openness=openness))
        assert 0.0 <= metrics.level <= 100.0
        assert len(tracker.state.pupil_size_history) <= tracker.config.max_history_size


def test_stop_resets_to_idle(calibrated_tracker):
    tracker = calibrated_tracker
    feed(tracker, 4.6, 5)
    tracker.stop()
    assert tracker.status is TrackerState.IDLE
    assert not tracker.is_calibrated
    assert tracker.concentration_level == 0.0
    assert len(tracker.state.pupil_size_history) == 0


def test_recalibrate_ignored_while_idle():
    tracker = ConcentrationTracker()
    tracker.recalibrate()
    assert tracker.status is TrackerState.IDLE


def test_recalibrate_keeps_config(calibrated_tracker):
    tracker = calibrated_tracker
    tracker.configure(sensitivity=3.0)
    tracker.recalibrate()
    assert tracker.config.sensitivity == 3.0
    assert tracker.status is TrackerState.CALIBRATING
    assert not tracker.is_calibrated


def test_configure_clamps_adjustable_fields(tracker):
    cfg = tracker.configure(sensitivity=500.0, smoothing_factor=1.5, frame_rate=0.0)
    assert cfg.sensitivity == 10.0
    assert cfg.smoothing_factor == 0.99
    assert cfg.frame_rate == 1.0


def test_configure_shrinks_history(tracker):
    feed(tracker, 4.0, 60)
    tracker.configure(max_history_size=40)
    assert len(tracker.state.pupil_size_history) == 40
    feed(tracker, 4.0, 5)
    assert len(tracker.state.pupil_size_history) == 40


def test_inconsistent_config_raises():
    with pytest.raises(ValueError):
        TrackerConfig(calibration_frames=0)
    with pytest.raises(ValueError):
        TrackerConfig(calibration_frames=50, max_history_size=10)
    with pytest.raises(ValueError):
        TrackerConfig(min_pupil_diameter=5.0, max_pupil_diameter=5.0)
    with pytest.raises(ValueError):
        TrackerConfig().with_updates(calibration_frames=500)
