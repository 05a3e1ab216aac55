"""Configuration dataclasses for pupil-based concentration tracking."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal

SENSITIVITY_RANGE = (0.1, 10.0)
SMOOTHING_RANGE = (0.01, 0.99)
FRAME_RATE_RANGE = (1.0, 120.0)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, float(value)))


@dataclass(frozen=True)
class ScoringConfig:
    """Weights and breakpoints of the concentration scoring curve."""

    # Score at a dilation ratio of exactly 1.0
    baseline_score: float = 40.0
    # Extra points reached at dilation_cap_ratio and above
    dilation_bonus: float = 20.0
    dilation_cap_ratio: float = 1.3
    # Ratios below this floor all score 0 dilation points
    constriction_floor_ratio: float = 0.7

    stability_weight: float = 20.0
    # Optional long-window steadiness term, off by default
    focus_weight: float = 0.0

    variability_window: int = 10
    stability_window: int = 20

    def __post_init__(self) -> None:
        if self.dilation_cap_ratio <= 1.0:
            raise ValueError("dilation_cap_ratio must be greater than 1.0")
        if not 0.0 < self.constriction_floor_ratio < 1.0:
            raise ValueError("constriction_floor_ratio must be in (0, 1)")
        if self.variability_window < 2 or self.stability_window < 2:
            raise ValueError("statistics windows need at least 2 samples")
        if self.stability_weight < 0 or self.focus_weight < 0:
            raise ValueError("score weights must be non-negative")


@dataclass(frozen=True)
class TrackerConfig:
    """Configuration for a concentration tracking session."""

    # Target rate of the calling loop; the engine itself is frame-indexed
    frame_rate: float = 30.0

    # EMA weight kept from the previous output (higher = slower)
    smoothing_factor: float = 0.3

    # Multiplier applied to short-window variability before scoring
    sensitivity: float = 2.0

    # Number of valid samples that form the calibration window
    calibration_frames: int = 30
    max_history_size: int = 100

    # Valid range for the average pupil diameter, in diameter_unit
    min_pupil_diameter: float = 1.0
    max_pupil_diameter: float = 100.0

    # Vertical/horizontal eyelid ratio above which an eye counts as open
    eye_open_threshold: float = 0.1

    # Iris points only exist in the detector's refined mode
    required_landmarks: int = 478

    # "px" keeps iris distances in image pixels, "mm" rescales them
    # assuming the eye-corner distance is eye_width_mm
    diameter_unit: Literal["px", "mm"] = "px"
    eye_width_mm: float = 28.0

    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    def __post_init__(self) -> None:
        if self.calibration_frames < 1:
            raise ValueError("calibration_frames must be at least 1")
        if self.max_history_size < self.calibration_frames:
            raise ValueError("max_history_size must be >= calibration_frames")
        if self.min_pupil_diameter >= self.max_pupil_diameter:
            raise ValueError("min_pupil_diameter must be below max_pupil_diameter")
        if not 0.0 < self.smoothing_factor < 1.0:
            raise ValueError("smoothing_factor must be in (0, 1)")
        if self.sensitivity <= 0:
            raise ValueError("sensitivity must be positive")
        if self.frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        if self.diameter_unit not in ("px", "mm"):
            raise ValueError(f"Unknown diameter unit '{self.diameter_unit}'")

    @property
    def frame_interval_ms(self) -> float:
        return 1000.0 / self.frame_rate

    def with_updates(self, **changes) -> "TrackerConfig":
        """Return a copy with runtime-adjustable fields clamped to their ranges.

        ``sensitivity``, ``smoothing_factor`` and ``frame_rate`` are clamped;
        every other field goes through the normal validation and raises
        ``ValueError`` when inconsistent.
        """

        if "sensitivity" in changes:
            changes["sensitivity"] = clamp(changes["sensitivity"], *SENSITIVITY_RANGE)
        if "smoothing_factor" in changes:
            changes["smoothing_factor"] = clamp(changes["smoothing_factor"], *SMOOTHING_RANGE)
        if "frame_rate" in changes:
            changes["frame_rate"] = clamp(changes["frame_rate"], *FRAME_RATE_RANGE)
        return replace(self, **changes)
