"""Summary statistics over a replayed session."""
from __future__ import annotations

from typing import Any, Dict

import pandas as pd

SUMMARY_COLUMNS = ("level", "is_calibrated", "average_pupil_size")


def summarize_session(df: pd.DataFrame, threshold: float = 50.0, verbose: bool = True) -> Dict[str, Any]:
    """Summarize a metrics DataFrame as produced by :mod:`pupil_focus.replay`.

    Level statistics are computed over calibrated frames only; the
    calibration window always reads close to zero. ``calibrated_at_frame`` is
    the id from the ``frame`` column as recorded, or the row position when
    there is no such column.
    """

    missing = set(SUMMARY_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(sorted(missing))}")

    total = len(df)
    if total == 0:
        raise ValueError("No frames to summarize.")

    calibrated_mask = df["is_calibrated"].astype(str).str.lower().isin(["true", "1"])
    valid_mask = pd.to_numeric(df["average_pupil_size"], errors="coerce").fillna(0.0) > 0
    levels = pd.to_numeric(df.loc[calibrated_mask, "level"], errors="coerce").dropna()

    n_calibrated = int(calibrated_mask.sum())
    calibrated_at = -1
    if n_calibrated:
        first = int(calibrated_mask.to_numpy().argmax())
        if "frame" in df.columns:
            calibrated_at = df["frame"].iloc[first]
            if hasattr(calibrated_at, "item"):
                calibrated_at = calibrated_at.item()
        else:
            calibrated_at = first

    if len(levels):
        mean_level = float(levels.mean())
        max_level = float(levels.max())
        above = float((levels >= threshold).mean() * 100.0)
    else:
        mean_level = float("nan")
        max_level = float("nan")
        above = float("nan")

    stats = {
        "n_frames": total,
        "n_valid_frames": int(valid_mask.sum()),
        "n_calibrated_frames": n_calibrated,
        "calibrated_at_frame": calibrated_at,
        "mean_level": mean_level,
        "max_level": max_level,
        "percentage_above_threshold": above,
    }

    if verbose:
        print("=== Concentration session summary ===")
        print(f"Frames:             {total}")
        print(f"  with pupil data:  {stats['n_valid_frames']}")
        print(f"  calibrated:       {n_calibrated}")
        if n_calibrated:
            print(f"Calibrated at frame {calibrated_at}")
        else:
            print("Session never calibrated")
        print()
        print(f"Mean level:  {mean_level:.2f}")
        print(f"Max level:   {max_level:.2f}")
        print(f"Frames >= {threshold:g}: {above:.2f}%")
        print("=====================================")

    return stats
