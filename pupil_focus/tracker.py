"""Per-frame concentration engine and its session lifecycle.

``process_frame`` is the core: it takes the caller-owned ``SessionState`` and
one frame's landmarks, updates the state in place and returns the metrics
snapshot. ``ConcentrationTracker`` wraps a state with the start/stop/
recalibrate commands used by a host application.

State machine::

    IDLE --start--> CALIBRATING --baseline learned--> TRACKING
    CALIBRATING/TRACKING --recalibrate--> CALIBRATING
    any --stop--> IDLE
"""
from __future__ import annotations

import logging
from typing import Optional

from .calibration import observe_sample, reset_session
from .config import TrackerConfig
from .geometry import measure_eye
from .landmarks import LandmarkSet
from .scoring import average_diameter, concentration_score, is_valid_sample
from .session import ConcentrationMetrics, SessionState, TrackerState
from .smoothing import decay_level, smooth_level

logger = logging.getLogger(__name__)


def _decay(state: SessionState) -> None:
    state.concentration_level = decay_level(state.concentration_level, state.config.smoothing_factor)
    state.last_dilation_ratio = 0.0


def process_frame(state: SessionState, landmarks: Optional[LandmarkSet]) -> ConcentrationMetrics:
    """Advance ``state`` by one frame of landmarks.

    ``landmarks`` may be ``None`` (no face detected). Unusable input never
    raises; it only decays the output toward zero. Frames observed while the
    session is idle are ignored.
    """

    if state.status is TrackerState.IDLE:
        return state.snapshot()

    cfg = state.config
    state.frame_count += 1

    left = measure_eye(landmarks, "left", cfg)
    right = measure_eye(landmarks, "right", cfg)

    if left.is_open and right.is_open:
        state.left_pupil_size = left.pupil_diameter
        state.right_pupil_size = right.pupil_diameter
    else:
        state.left_pupil_size = 0.0
        state.right_pupil_size = 0.0

    if not is_valid_sample(left, right, cfg):
        logger.debug(
            "Frame %s rejected (open=%s/%s, diameters=%.3f/%.3f)",
            state.frame_count,
            left.is_open,
            right.is_open,
            left.pupil_diameter,
            right.pupil_diameter,
        )
        _decay(state)
        return state.snapshot()

    state.valid_frame_count += 1
    avg = average_diameter(left, right)

    # The frame that completes calibration belongs to the calibration window
    was_calibrated = state.is_calibrated
    observe_sample(state, avg)

    if not was_calibrated:
        _decay(state)
        return state.snapshot()

    breakdown = concentration_score(avg, state.baseline_diameter, state.pupil_size_history, cfg)
    state.concentration_level = smooth_level(
        state.concentration_level, breakdown.raw_score, cfg.smoothing_factor
    )
    state.last_dilation_ratio = breakdown.dilation_ratio
    state.last_stability = breakdown.stability
    return state.snapshot()


class ConcentrationTracker:
    """Session owner exposing the host-facing commands."""

    def __init__(self, config: Optional[TrackerConfig] = None) -> None:
        self.state = SessionState(config=config or TrackerConfig())

    @property
    def config(self) -> TrackerConfig:
        return self.state.config

    @property
    def status(self) -> TrackerState:
        return self.state.status

    @property
    def is_tracking(self) -> bool:
        return self.state.status is not TrackerState.IDLE

    @property
    def concentration_level(self) -> float:
        return self.state.concentration_level

    @property
    def is_calibrated(self) -> bool:
        return self.state.is_calibrated

    @property
    def baseline_diameter(self) -> float:
        return self.state.baseline_diameter

    @property
    def calibration_progress(self) -> float:
        return self.state.calibration_progress

    def metrics(self) -> ConcentrationMetrics:
        return self.state.snapshot()

    def start(self) -> None:
        reset_session(self.state)
        self.state.frame_count = 0
        self.state.valid_frame_count = 0
        self.state.status = TrackerState.CALIBRATING
        logger.info("Tracking started (calibration window: %s frames)", self.config.calibration_frames)

    def stop(self) -> None:
        reset_session(self.state)
        self.state.status = TrackerState.IDLE
        logger.info("Tracking stopped after %s frames", self.state.frame_count)

    def recalibrate(self) -> None:
        if not self.is_tracking:
            logger.debug("Recalibrate ignored while idle")
            return
        reset_session(self.state)
        self.state.status = TrackerState.CALIBRATING
        logger.info("Recalibrating")

    def configure(self, **changes) -> TrackerConfig:
        """Apply runtime config changes; sensitivity, smoothing and frame rate are clamped."""
        self.state.config = self.state.config.with_updates(**changes)
        if "max_history_size" in changes:
            self.state.resize_history()
        logger.debug("Configuration updated: %s", changes)
        return self.state.config

    def observe(self, landmarks: Optional[LandmarkSet]) -> ConcentrationMetrics:
        return process_frame(self.state, landmarks)
