"""Exponential smoothing of the concentration output."""
from __future__ import annotations

LEVEL_MIN = 0.0
LEVEL_MAX = 100.0


def smooth(current: float, incoming: float, smoothing_factor: float) -> float:
    """Exponential moving average step.

    ``smoothing_factor`` is the weight kept from ``current``. The step is
    applied once per frame, not per unit of time, so the effective response
    speed scales with the caller's frame rate.
    """

    return current * smoothing_factor + incoming * (1.0 - smoothing_factor)


def smooth_level(current: float, incoming: float, smoothing_factor: float) -> float:
    """``smooth`` bounded to the [0, 100] concentration range."""
    value = smooth(current, incoming, smoothing_factor)
    return max(LEVEL_MIN, min(LEVEL_MAX, value))


def decay_level(current: float, smoothing_factor: float) -> float:
    """One smoothing step toward zero, used when there is no usable signal."""
    return smooth_level(current, 0.0, smoothing_factor)
