"""Short-window dispersion of recent pupil-diameter samples."""
from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

import numpy as np


def _recent(history: Iterable[float], window: int) -> Optional[np.ndarray]:
    values = list(history)
    if len(values) < window:
        return None
    return np.asarray(values[-window:], dtype=float)


def coefficient_of_variation(samples: Sequence[float]) -> Optional[float]:
    """Population std over mean, or ``None`` for a zero or non-finite mean."""
    arr = np.asarray(samples, dtype=float)
    if arr.size == 0:
        return None
    mean = float(arr.mean())
    if mean == 0 or not math.isfinite(mean):
        return None
    return float(np.std(arr)) / mean


def variability(history: Iterable[float], window: int = 10) -> float:
    """Jitter of the last ``window`` samples in [0, 1]; 0 with too few samples."""
    recent = _recent(history, window)
    if recent is None:
        return 0.0
    cv = coefficient_of_variation(recent)
    if cv is None:
        return 0.0
    return min(1.0, cv)


def stability(history: Iterable[float], window: int = 20) -> float:
    """Steadiness of the last ``window`` samples in [0, 1]; 0 with too few samples."""
    recent = _recent(history, window)
    if recent is None:
        return 0.0
    cv = coefficient_of_variation(recent)
    if cv is None:
        return 0.0
    return min(1.0, max(0.0, 1.0 - cv))
