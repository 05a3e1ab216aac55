from typing import List, Tuple

import pytest

from pupil_focus.config import TrackerConfig
from pupil_focus.landmarks import EYELID_INDICES, IRIS_INDICES, REFINED_LANDMARK_COUNT
from pupil_focus.tracker import ConcentrationTracker

EYE_CENTERS = {"left": (200.0, 240.0), "right": (400.0, 240.0)}


def make_landmarks(
    left_diameter: float = 4.0,
    right_diameter: float | None = None,
    left_openness: float = 0.3,
    right_openness: float | None = None,
    eye_width: float = 30.0,
    count: int = REFINED_LANDMARK_COUNT,
) -> List[Tuple[float, float]]:
    """Synthetic face mesh with axis-aligned eyes and circular irises."""

    right_diameter = left_diameter if right_diameter is None else right_diameter
    right_openness = left_openness if right_openness is None else right_openness
    points: List[Tuple[float, float]] = [(0.0, 0.0)] * count

    eyes = {
        "left": (left_diameter, left_openness),
        "right": (right_diameter, right_openness),
    }
    for side, (diameter, openness) in eyes.items():
        cx, cy = EYE_CENTERS[side]
        lid = EYELID_INDICES[side]
        iris = IRIS_INDICES[side]
        half_h = openness * eye_width / 2.0
        half_d = diameter / 2.0

        def put(index: int, point: Tuple[float, float]) -> None:
            if index < count:
                points[index] = point

        put(lid.outer_corner, (cx - eye_width / 2.0, cy))
        put(lid.inner_corner, (cx + eye_width / 2.0, cy))
        put(lid.top, (cx, cy - half_h))
        put(lid.bottom, (cx, cy + half_h))
        put(iris.top, (cx, cy - half_d))
        put(iris.bottom, (cx, cy + half_d))
        put(iris.left, (cx - half_d, cy))
        put(iris.right, (cx + half_d, cy))
    return points


def feed(tracker: ConcentrationTracker, diameter: float, frames: int, **kwargs):
    metrics = None
    for _ in range(frames):
        metrics = tracker.observe(make_landmarks(diameter, **kwargs))
    return metrics


@pytest.fixture
def config() -> TrackerConfig:
    return TrackerConfig(calibration_frames=30, max_history_size=100)


@pytest.fixture
def tracker(config) -> ConcentrationTracker:
    t = ConcentrationTracker(config)
    t.start()
    return t


@pytest.fixture
def calibrated_tracker(tracker) -> ConcentrationTracker:
    feed(tracker, 4.0, tracker.config.calibration_frames)
    assert tracker.is_calibrated
    return tracker
