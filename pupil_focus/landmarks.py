"""Face-mesh landmark indices and point coercion helpers.

Indices follow the MediaPipe face mesh with refined landmarks enabled
(478 points, the last ten of which are the iris boundaries). ``left`` and
``right`` are the sides as seen in the mirrored camera image.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Sequence

Side = Literal["left", "right"]

REFINED_LANDMARK_COUNT = 478


@dataclass(frozen=True)
class LandmarkPoint:
    x: float
    y: float


@dataclass(frozen=True)
class EyelidIndices:
    top: int
    bottom: int
    outer_corner: int
    inner_corner: int


@dataclass(frozen=True)
class IrisIndices:
    top: int
    bottom: int
    left: int
    right: int


EYELID_INDICES: Dict[str, EyelidIndices] = {
    "left": EyelidIndices(top=159, bottom=145, outer_corner=33, inner_corner=133),
    "right": EyelidIndices(top=386, bottom=374, outer_corner=362, inner_corner=263),
}

IRIS_INDICES: Dict[str, IrisIndices] = {
    "left": IrisIndices(top=474, bottom=476, left=477, right=475),
    "right": IrisIndices(top=469, bottom=471, left=472, right=470),
}

# Any sized, indexable collection of point-like values
LandmarkSet = Sequence[Any]


def _to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def to_point(value: object) -> Optional[LandmarkPoint]:
    """Coerce a detector point into a ``LandmarkPoint``.

    Accepts ``LandmarkPoint``, mappings with ``x``/``y`` keys, objects with
    ``x``/``y`` attributes and ``(x, y[, z])`` sequences or numpy rows.
    Returns ``None`` when the value does not carry two finite coordinates.
    """

    if value is None:
        return None
    if isinstance(value, LandmarkPoint):
        return value

    if isinstance(value, dict):
        x, y = value.get("x"), value.get("y")
    elif hasattr(value, "x") and hasattr(value, "y"):
        x, y = value.x, value.y
    else:
        try:
            x, y = value[0], value[1]
        except (TypeError, IndexError, KeyError):
            return None

    fx, fy = _to_float(x), _to_float(y)
    if fx is None or fy is None:
        return None
    return LandmarkPoint(fx, fy)


def landmark_count(landmarks: object) -> int:
    """Number of points in a landmark set, 0 for anything unsized."""
    if landmarks is None:
        return 0
    try:
        return len(landmarks)  # type: ignore[arg-type]
    except TypeError:
        return 0


def point_at(landmarks: LandmarkSet, index: int) -> Optional[LandmarkPoint]:
    if not 0 <= index < landmark_count(landmarks):
        return None
    try:
        raw = landmarks[index]
    except (TypeError, IndexError, KeyError):
        return None
    return to_point(raw)


def distance(a: LandmarkPoint, b: LandmarkPoint) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)
