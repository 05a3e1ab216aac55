"""Pupil-dilation based concentration tracking."""

from .config import ScoringConfig, TrackerConfig
from .geometry import EyeGeometry, eye_open, measure_eye, pupil_diameter
from .calibration import CalibrationTracker
from .stability import stability, variability
from .scoring import ScoreBreakdown, concentration_score, dilation_score, stability_score
from .smoothing import smooth
from .session import ConcentrationMetrics, SessionState, TrackerState
from .tracker import ConcentrationTracker, process_frame
from .loop import FrameRateGate, LandmarkEstimator, run_tracking
from .replay import SessionReplayer, replay_landmark_tsv
from .metrics import summarize_session

__all__ = [
    "ScoringConfig",
    "TrackerConfig",
    "EyeGeometry",
    "eye_open",
    "measure_eye",
    "pupil_diameter",
    "CalibrationTracker",
    "stability",
    "variability",
    "ScoreBreakdown",
    "concentration_score",
    "dilation_score",
    "stability_score",
    "smooth",
    "ConcentrationMetrics",
    "SessionState",
    "TrackerState",
    "ConcentrationTracker",
    "process_frame",
    "FrameRateGate",
    "LandmarkEstimator",
    "run_tracking",
    "SessionReplayer",
    "replay_landmark_tsv",
    "summarize_session",
]
