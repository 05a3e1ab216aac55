"""Per-eye geometry derived from face-mesh landmarks."""
from __future__ import annotations

from dataclasses import dataclass

from .config import TrackerConfig
from .landmarks import (
    EYELID_INDICES,
    IRIS_INDICES,
    REFINED_LANDMARK_COUNT,
    LandmarkSet,
    Side,
    distance,
    landmark_count,
    point_at,
)

DEFAULT_OPEN_THRESHOLD = 0.1


@dataclass(frozen=True)
class EyeGeometry:
    """Geometry of one eye in one frame."""

    openness: float
    is_open: bool
    pupil_diameter: float


def _has_refined_landmarks(landmarks: LandmarkSet, required: int) -> bool:
    return landmark_count(landmarks) >= required


def eye_openness(
    landmarks: LandmarkSet,
    side: Side,
    required_landmarks: int = REFINED_LANDMARK_COUNT,
) -> float:
    """Vertical eyelid distance over eye-corner distance.

    Returns 0.0 when the ratio cannot be determined (too few landmarks,
    missing points, or zero-length corner distance).
    """

    if not _has_refined_landmarks(landmarks, required_landmarks):
        return 0.0

    idx = EYELID_INDICES[side]
    top = point_at(landmarks, idx.top)
    bottom = point_at(landmarks, idx.bottom)
    outer = point_at(landmarks, idx.outer_corner)
    inner = point_at(landmarks, idx.inner_corner)
    if top is None or bottom is None or outer is None or inner is None:
        return 0.0

    horizontal = distance(outer, inner)
    if horizontal == 0:
        return 0.0
    return distance(top, bottom) / horizontal


def eye_open(
    landmarks: LandmarkSet,
    side: Side,
    threshold: float = DEFAULT_OPEN_THRESHOLD,
    required_landmarks: int = REFINED_LANDMARK_COUNT,
) -> bool:
    """True if the eyelid aspect ratio is above ``threshold``; fails closed."""
    return eye_openness(landmarks, side, required_landmarks) > threshold


def pupil_diameter(
    landmarks: LandmarkSet,
    side: Side,
    required_landmarks: int = REFINED_LANDMARK_COUNT,
) -> float:
    """Iris-based pupil diameter estimate in landmark (pixel) units.

    The diameter is the mean of the vertical and horizontal iris boundary
    distances. Only the ratio to a learned baseline matters downstream, so no
    absolute calibration is attempted. Returns 0.0 when undetectable.
    """

    if not _has_refined_landmarks(landmarks, required_landmarks):
        return 0.0

    idx = IRIS_INDICES[side]
    top = point_at(landmarks, idx.top)
    bottom = point_at(landmarks, idx.bottom)
    left = point_at(landmarks, idx.left)
    right = point_at(landmarks, idx.right)
    if top is None or bottom is None or left is None or right is None:
        return 0.0

    return (distance(top, bottom) + distance(left, right)) / 2.0


def pupil_diameter_mm(
    landmarks: LandmarkSet,
    side: Side,
    eye_width_mm: float = 28.0,
    required_landmarks: int = REFINED_LANDMARK_COUNT,
) -> float:
    """Pupil diameter rescaled to millimetres.

    Uses the eye-corner distance as a ruler of ``eye_width_mm``. This is a
    rough estimate; returns 0.0 when either distance is unavailable.
    """

    diameter_px = pupil_diameter(landmarks, side, required_landmarks)
    if diameter_px <= 0:
        return 0.0

    idx = EYELID_INDICES[side]
    outer = point_at(landmarks, idx.outer_corner)
    inner = point_at(landmarks, idx.inner_corner)
    if outer is None or inner is None:
        return 0.0

    eye_width_px = distance(outer, inner)
    if eye_width_px == 0:
        return 0.0
    px_per_mm = eye_width_px / eye_width_mm
    return diameter_px / px_per_mm


def measure_eye(landmarks: LandmarkSet, side: Side, config: TrackerConfig) -> EyeGeometry:
    openness = eye_openness(landmarks, side, config.required_landmarks)
    if config.diameter_unit == "mm":
        diameter = pupil_diameter_mm(landmarks, side, config.eye_width_mm, config.required_landmarks)
    else:
        diameter = pupil_diameter(landmarks, side, config.required_landmarks)
    return EyeGeometry(
        openness=openness,
        is_open=openness > config.eye_open_threshold,
        pupil_diameter=diameter,
    )
