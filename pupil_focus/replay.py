"""Replay recorded landmark sequences through the engine offline.

Recordings are long-format TSV files with one row per landmark point::

    frame   landmark   x        y
    0       0          312.4    201.7
    0       1          315.0    230.2
    ...

A frame whose rows carry no landmark index (e.g. a single row with an empty
``landmark`` column) is a frame without a detection.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from .config import TrackerConfig
from .landmarks import LandmarkSet, to_point
from .tracker import ConcentrationTracker

logger = logging.getLogger(__name__)

LANDMARK_COLUMNS = ("frame", "landmark", "x", "y")
METRIC_COLUMNS = [
    "frame",
    "level",
    "left_pupil_size",
    "right_pupil_size",
    "average_pupil_size",
    "dilation_ratio",
    "stability",
    "is_calibrated",
    "calibration_progress",
    "status",
]


def _require_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = set(columns) - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(sorted(missing))}")


def iter_landmark_frames(df: pd.DataFrame) -> Iterator[Tuple[object, Optional[np.ndarray]]]:
    """Yield ``(frame_id, points)`` per frame in frame order.

    ``points`` is an ``(n, 2)`` array where ``n`` is one past the highest
    landmark index present; indices without a row hold NaN. ``None`` marks a
    frame without a detection.
    """

    _require_columns(df, LANDMARK_COLUMNS)
    df = df.copy()
    df["landmark"] = pd.to_numeric(df["landmark"], errors="coerce")
    df["x"] = pd.to_numeric(df["x"], errors="coerce")
    df["y"] = pd.to_numeric(df["y"], errors="coerce")

    for frame_id, group in df.groupby("frame", sort=True):
        group = group[group["landmark"].notna() & (group["landmark"] >= 0)]
        if group.empty:
            yield frame_id, None
            continue

        indices = group["landmark"].astype(int).to_numpy()
        points = np.full((int(indices.max()) + 1, 2), np.nan)
        points[indices, 0] = group["x"].to_numpy(dtype=float)
        points[indices, 1] = group["y"].to_numpy(dtype=float)
        yield frame_id, points


def landmarks_to_dataframe(frames: Iterable[Optional[LandmarkSet]]) -> pd.DataFrame:
    """Flatten a sequence of landmark sets into the long replay format."""

    rows: List[dict] = []
    for frame_id, landmarks in enumerate(frames):
        if landmarks is None or len(landmarks) == 0:
            rows.append({"frame": frame_id, "landmark": pd.NA, "x": np.nan, "y": np.nan})
            continue
        for index, raw in enumerate(landmarks):
            point = to_point(raw)
            rows.append(
                {
                    "frame": frame_id,
                    "landmark": index,
                    "x": point.x if point is not None else np.nan,
                    "y": point.y if point is not None else np.nan,
                }
            )
    df = pd.DataFrame(rows, columns=list(LANDMARK_COLUMNS))
    df["landmark"] = df["landmark"].astype("Int64")
    return df


class SessionReplayer:
    """Run a recorded landmark sequence through a fresh tracking session."""

    def __init__(self, config: Optional[TrackerConfig] = None) -> None:
        self.config = config or TrackerConfig()

    def replay(self, df: pd.DataFrame) -> pd.DataFrame:
        tracker = ConcentrationTracker(self.config)
        tracker.start()

        rows: List[dict] = []
        for frame_id, points in iter_landmark_frames(df):
            metrics = tracker.observe(points)
            row = {"frame": frame_id}
            row.update(metrics.as_dict())
            rows.append(row)

        logger.info(
            "Replayed %s frames (%s valid), calibrated=%s, baseline=%.3f",
            len(rows),
            tracker.state.valid_frame_count,
            tracker.is_calibrated,
            tracker.baseline_diameter,
        )
        return pd.DataFrame(rows, columns=METRIC_COLUMNS)

    def replay_from_file(self, input_path: str | Path, output_path: str | Path | None = None) -> pd.DataFrame:
        df = pd.read_csv(input_path, sep="\t")
        result = self.replay(df)
        if output_path:
            result.to_csv(output_path, sep="\t", index=False)
        return result


def replay_landmark_tsv(
    input_path: str | Path,
    output_path: str | Path | None = None,
    config: Optional[TrackerConfig] = None,
) -> pd.DataFrame:
    return SessionReplayer(config).replay_from_file(input_path, output_path)
