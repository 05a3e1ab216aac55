"""Baseline learning from the first window of valid pupil samples."""
from __future__ import annotations

import logging
from statistics import fmean

from .session import SessionState, TrackerState

logger = logging.getLogger(__name__)


def in_bounds(diameter: float, state: SessionState) -> bool:
    cfg = state.config
    return cfg.min_pupil_diameter <= diameter <= cfg.max_pupil_diameter


def try_calibrate(state: SessionState) -> bool:
    """Freeze the baseline once the calibration window is full.

    The first ``calibration_frames`` samples are filtered to the configured
    diameter bounds; at least half of them must survive. A rejected window is
    not re-filled: it only moves once ``max_history_size`` is reached and the
    oldest samples are evicted, so a later window made of newer samples may
    still calibrate without a reset.
    """

    if state.is_calibrated:
        return True

    cfg = state.config
    history = state.pupil_size_history
    if len(history) < cfg.calibration_frames:
        return False

    window = list(history)[: cfg.calibration_frames]
    survivors = [d for d in window if in_bounds(d, state)]
    if len(survivors) < cfg.calibration_frames / 2.0:
        if not state.calibration_failed:
            logger.warning(
                "Calibration window rejected: %s/%s samples within [%.2f, %.2f]",
                len(survivors),
                cfg.calibration_frames,
                cfg.min_pupil_diameter,
                cfg.max_pupil_diameter,
            )
            state.calibration_failed = True
        return False

    state.baseline_diameter = fmean(survivors)
    state.is_calibrated = True
    state.calibration_failed = False
    state.status = TrackerState.TRACKING
    logger.info(
        "Calibration complete: baseline %.3f from %s samples",
        state.baseline_diameter,
        len(survivors),
    )
    return True


def observe_sample(state: SessionState, avg_diameter: float) -> None:
    """Record a valid average diameter and calibrate when possible."""
    state.pupil_size_history.append(float(avg_diameter))
    if not state.is_calibrated:
        try_calibrate(state)


def reset_session(state: SessionState) -> None:
    """Forget baseline, history and output, keeping the configuration."""
    state.pupil_size_history.clear()
    state.baseline_diameter = 0.0
    state.is_calibrated = False
    state.calibration_failed = False
    state.concentration_level = 0.0
    state.left_pupil_size = 0.0
    state.right_pupil_size = 0.0
    state.last_dilation_ratio = 0.0
    state.last_stability = 0.0


class CalibrationTracker:
    """Object wrapper around :func:`observe_sample` and :func:`reset_session`."""

    def __init__(self, state: SessionState) -> None:
        self.state = state

    @property
    def is_calibrated(self) -> bool:
        return self.state.is_calibrated

    @property
    def baseline_diameter(self) -> float:
        return self.state.baseline_diameter

    def observe(self, avg_diameter: float) -> None:
        observe_sample(self.state, avg_diameter)

    def reset(self) -> None:
        reset_session(self.state)
