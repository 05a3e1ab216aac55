"""Plots of a replayed session, one panel per metric.

matplotlib ships with the ``plot`` extra and is only imported when a figure
is drawn.
"""
from __future__ import annotations

from importlib import import_module
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

import pandas as pd

REQUIRED_COLUMNS = ("frame", "level", "left_pupil_size", "right_pupil_size")


def _pyplot(interactive: bool):
    try:
        matplotlib = import_module("matplotlib")
    except ModuleNotFoundError as exc:  # pragma: no cover - optional extra
        raise ModuleNotFoundError(
            "Plotting needs matplotlib: pip install 'pupil-focus[plot]'"
        ) from exc
    if not interactive:
        matplotlib.use("Agg")
    return import_module("matplotlib.pyplot")


def calibration_frame(df: pd.DataFrame) -> Optional[Any]:
    """Frame id of the first calibrated row, or ``None`` if the session never calibrated."""
    if "is_calibrated" not in df.columns:
        return None
    calibrated = df["is_calibrated"].astype(str).str.lower().isin(["true", "1"])
    if not calibrated.any():
        return None
    return df.loc[calibrated, "frame"].iloc[0]


def plot_level(ax, df: pd.DataFrame, threshold: Optional[float] = None) -> None:
    ax.plot(df["frame"], df["level"], color="tab:blue", label="concentration")
    calibrated_at = calibration_frame(df)
    if calibrated_at is not None:
        # the level is held at zero until the baseline exists
        ax.axvspan(df["frame"].iloc[0], calibrated_at, color="0.9", label="calibrating")
    if threshold is not None:
        ax.axhline(threshold, color="tab:red", linestyle="--", label=f"{threshold:g}")
    ax.set_ylim(0, 100)
    ax.set_ylabel("level")
    ax.legend(loc="upper left")


def plot_pupils(ax, df: pd.DataFrame) -> None:
    # zero means the face or an iris was lost on that frame
    for column, label in (("left_pupil_size", "left"), ("right_pupil_size", "right")):
        sizes = pd.to_numeric(df[column], errors="coerce").where(lambda s: s > 0)
        ax.plot(df["frame"], sizes, label=label)
    ax.set_ylabel("pupil diameter")
    ax.legend(loc="upper left")


def plot_calibration(ax, df: pd.DataFrame) -> None:
    if "calibration_progress" not in df.columns:
        ax.set_axis_off()
        return
    ax.fill_between(df["frame"], df["calibration_progress"], step="post", alpha=0.4)
    ax.set_ylim(0, 105)
    ax.set_ylabel("calibration %")


def plot_session(
    df: pd.DataFrame,
    output_path: str | Path | None = None,
    threshold: Optional[float] = None,
    show_calibration: bool = False,
    figsize: Tuple[float, float] = (10.0, 6.0),
    dpi: Optional[float] = None,
    show: bool = False,
) -> Path:
    """Draw the level and pupil panels, plus calibration progress on request, and save the figure."""

    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(sorted(missing))}")

    panels: List[Callable[[Any], None]] = [
        lambda ax: plot_level(ax, df, threshold),
        lambda ax: plot_pupils(ax, df),
    ]
    if show_calibration:
        panels.append(lambda ax: plot_calibration(ax, df))

    plt = _pyplot(show)
    fig, axes = plt.subplots(len(panels), 1, figsize=figsize, dpi=dpi, sharex=True, squeeze=False)
    for draw, ax in zip(panels, axes[:, 0]):
        draw(ax)
    axes[-1, 0].set_xlabel("frame")
    fig.tight_layout()

    output_path = Path(output_path or "concentration_plot.png")
    fig.savefig(output_path)
    if show:  # pragma: no cover - interactive
        plt.show()
    plt.close(fig)
    return output_path


def plot_session_file(input_path: str | Path, output_path: str | Path | None = None, **options) -> Path:
    """Plot a metrics TSV written by ``pupil-focus replay``."""
    return plot_session(pd.read_csv(input_path, sep="\t"), output_path, **options)


__all__ = [
    "calibration_frame",
    "plot_calibration",
    "plot_level",
    "plot_pupils",
    "plot_session",
    "plot_session_file",
]
