"""Mutable per-session state and the metrics snapshot read after each frame.

A ``SessionState`` is owned by exactly one caller for the lifetime of a
tracking session. The engine functions in :mod:`pupil_focus.tracker` mutate
it in place; nothing in the package keeps state of its own.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque

from .config import TrackerConfig


class TrackerState(Enum):
    IDLE = "idle"
    CALIBRATING = "calibrating"
    TRACKING = "tracking"


@dataclass
class SessionState:
    """Everything the engine needs to carry from one frame to the next."""

    config: TrackerConfig = field(default_factory=TrackerConfig)
    pupil_size_history: Deque[float] = field(default_factory=deque)
    baseline_diameter: float = 0.0
    is_calibrated: bool = False
    concentration_level: float = 0.0

    left_pupil_size: float = 0.0
    right_pupil_size: float = 0.0
    last_dilation_ratio: float = 0.0
    last_stability: float = 0.0

    status: TrackerState = TrackerState.IDLE
    frame_count: int = 0
    valid_frame_count: int = 0
    # Set while the current calibration window is rejected; cleared on success or reset
    calibration_failed: bool = False

    def __post_init__(self) -> None:
        self.pupil_size_history = deque(self.pupil_size_history, maxlen=self.config.max_history_size)

    @property
    def calibration_progress(self) -> float:
        frames = self.config.calibration_frames
        return min(100.0, len(self.pupil_size_history) / frames * 100.0)

    @property
    def average_pupil_size(self) -> float:
        return (self.left_pupil_size + self.right_pupil_size) / 2.0

    def resize_history(self) -> None:
        """Re-apply ``max_history_size`` after a config change, keeping the newest samples."""
        self.pupil_size_history = deque(self.pupil_size_history, maxlen=self.config.max_history_size)

    def snapshot(self) -> "ConcentrationMetrics":
        return ConcentrationMetrics(
            level=self.concentration_level,
            left_pupil_size=self.left_pupil_size,
            right_pupil_size=self.right_pupil_size,
            average_pupil_size=self.average_pupil_size,
            dilation_ratio=self.last_dilation_ratio,
            stability=self.last_stability,
            is_calibrated=self.is_calibrated,
            calibration_progress=self.calibration_progress,
            status=self.status,
        )


@dataclass(frozen=True)
class ConcentrationMetrics:
    """Externally visible output of one frame."""

    level: float
    left_pupil_size: float
    right_pupil_size: float
    average_pupil_size: float
    dilation_ratio: float
    stability: float
    is_calibrated: bool
    calibration_progress: float
    status: TrackerState

    def as_dict(self) -> dict:
        return {
            "level": self.level,
            "left_pupil_size": self.left_pupil_size,
            "right_pupil_size": self.right_pupil_size,
            "average_pupil_size": self.average_pupil_size,
            "dilation_ratio": self.dilation_ratio,
            "stability": self.stability,
            "is_calibrated": self.is_calibrated,
            "calibration_progress": self.calibration_progress,
            "status": self.status.value,
        }
