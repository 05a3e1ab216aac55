"""Concentration scoring from dilation ratio and signal stability.

The curve is a heuristic, not a physiological model:

- constricted pupils (ratio below 1.0) score 0-40 dilation points, reaching
  0 at the constriction floor;
- dilation above baseline scores 40-60, capped at ``dilation_cap_ratio``;
- a steady signal adds up to ``stability_weight`` points, a jittery one
  close to none.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .config import ScoringConfig, TrackerConfig
from .geometry import EyeGeometry
from .stability import stability, variability

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class ScoreBreakdown:
    dilation_ratio: float
    dilation_score: float
    variability: float
    stability_score: float
    stability: float
    focus_score: float
    raw_score: float


def average_diameter(left: EyeGeometry, right: EyeGeometry) -> float:
    return (left.pupil_diameter + right.pupil_diameter) / 2.0


def is_valid_sample(left: EyeGeometry, right: EyeGeometry, config: TrackerConfig) -> bool:
    """Gate deciding whether a frame may update calibration and score.

    A closed eye on either side, an undetected iris, or an average diameter
    outside the configured bounds all invalidate the frame.
    """

    if not (left.is_open and right.is_open):
        return False
    if left.pupil_diameter <= 0 or right.pupil_diameter <= 0:
        return False
    avg = average_diameter(left, right)
    return config.min_pupil_diameter <= avg <= config.max_pupil_diameter


def dilation_score(ratio: float, scoring: ScoringConfig | None = None) -> float:
    cfg = scoring or ScoringConfig()
    if ratio >= 1.0:
        effect = _clamp01((ratio - 1.0) / (cfg.dilation_cap_ratio - 1.0))
        return cfg.baseline_score + effect * cfg.dilation_bonus

    floor = cfg.constriction_floor_ratio
    effect = _clamp01((1.0 - max(floor, ratio)) / (1.0 - floor))
    return cfg.baseline_score - effect * cfg.baseline_score


def stability_score(
    variability_value: float,
    sensitivity: float,
    scoring: ScoringConfig | None = None,
) -> float:
    cfg = scoring or ScoringConfig()
    return (1.0 - min(1.0, variability_value * sensitivity)) * cfg.stability_weight


def concentration_score(
    avg_diameter: float,
    baseline_diameter: float,
    history: Iterable[float],
    config: TrackerConfig,
) -> ScoreBreakdown:
    """Raw (unsmoothed) score for a valid sample against a learned baseline."""

    if baseline_diameter <= 0:
        raise ValueError("baseline_diameter must be positive to score a sample")

    cfg = config.scoring
    samples = list(history)
    ratio = avg_diameter / baseline_diameter
    d_score = dilation_score(ratio, cfg)

    var = variability(samples, cfg.variability_window)
    s_score = stability_score(var, config.sensitivity, cfg)

    steady = stability(samples, cfg.stability_window)
    f_score = steady * cfg.focus_weight

    raw = max(SCORE_MIN, min(SCORE_MAX, d_score + s_score + f_score))
    return ScoreBreakdown(
        dilation_ratio=ratio,
        dilation_score=d_score,
        variability=var,
        stability_score=s_score,
        stability=steady,
        focus_score=f_score,
        raw_score=raw,
    )
