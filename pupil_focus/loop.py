"""Host-side frame loop around the concentration engine.

The engine does not know which detector produced the landmarks; any object
with an ``estimate_landmarks(frame)`` method can drive it.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Iterator, Optional, Protocol, Union

from .config import FRAME_RATE_RANGE, clamp
from .landmarks import LandmarkSet
from .session import ConcentrationMetrics
from .tracker import ConcentrationTracker

logger = logging.getLogger(__name__)


class LandmarkEstimator(Protocol):
    """Detector backend returning one face's landmarks, or ``None``."""

    def estimate_landmarks(self, frame: Any) -> Optional[LandmarkSet]:
        ...


class FrameRateGate:
    """Skip frames arriving sooner than ``1000 / frame_rate`` ms after the last one.

    ``frame_rate`` is either a number or a callable read on every frame, so a
    gate built with :meth:`for_tracker` follows runtime ``configure`` calls.
    The rate is clamped to ``FRAME_RATE_RANGE``.
    """

    def __init__(
        self,
        frame_rate: Union[float, Callable[[], float]],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._frame_rate = frame_rate
        self.clock = clock
        self._last_ms: Optional[float] = None

    @classmethod
    def for_tracker(
        cls, tracker: ConcentrationTracker, clock: Callable[[], float] = time.monotonic
    ) -> "FrameRateGate":
        return cls(lambda: tracker.config.frame_rate, clock)

    @property
    def frame_rate(self) -> float:
        rate = self._frame_rate() if callable(self._frame_rate) else self._frame_rate
        return clamp(rate, *FRAME_RATE_RANGE)

    @property
    def interval_ms(self) -> float:
        return 1000.0 / self.frame_rate

    def reset(self) -> None:
        self._last_ms = None

    def ready(self) -> bool:
        now_ms = self.clock() * 1000.0
        if self._last_ms is not None and now_ms - self._last_ms < self.interval_ms:
            return False
        self._last_ms = now_ms
        return True


def run_tracking(
    estimator: LandmarkEstimator,
    frames: Iterable[Any],
    tracker: Optional[ConcentrationTracker] = None,
    gate: Optional[FrameRateGate] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Iterator[ConcentrationMetrics]:
    """Feed frames through ``estimator`` into ``tracker``, yielding metrics per processed frame.

    The tracker is started if it is idle. Without an explicit ``gate`` the
    tracker's own ``frame_rate`` gates the loop, timed by ``clock``. Gated
    frames are skipped without reaching the detector.
    """

    tracker = tracker or ConcentrationTracker()
    if not tracker.is_tracking:
        tracker.start()
    gate = gate or FrameRateGate.for_tracker(tracker, clock)

    skipped = 0
    for frame in frames:
        if not gate.ready():
            skipped += 1
            continue
        landmarks = estimator.estimate_landmarks(frame)
        yield tracker.observe(landmarks)

    if skipped:
        logger.info("Frame gate skipped %s frames", skipped)
