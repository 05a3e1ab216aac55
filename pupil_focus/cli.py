"""Command line interface for offline concentration analysis."""
from __future__ import annotations

import argparse
import logging

from .analyzer import plot_session_file
from .config import ScoringConfig, TrackerConfig
from .metrics import summarize_session
from .replay import SessionReplayer


def build_tracker_config(args: argparse.Namespace) -> TrackerConfig:
    """Map ``replay`` arguments to a ``TrackerConfig``; adjustable fields are clamped."""
    scoring = ScoringConfig(
        stability_weight=args.stability_weight,
        focus_weight=args.focus_weight,
    )
    base = TrackerConfig(
        calibration_frames=args.calibration_frames,
        max_history_size=max(args.history, args.calibration_frames),
        min_pupil_diameter=args.min_diameter,
        max_pupil_diameter=args.max_diameter,
        diameter_unit=args.unit,
        scoring=scoring,
    )
    return base.with_updates(
        sensitivity=args.sensitivity,
        smoothing_factor=args.smoothing,
        frame_rate=args.frame_rate,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pupil-based concentration tracking")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="Replay a landmark TSV and write per-frame metrics")
    replay.add_argument("input", help="Long-format TSV with frame, landmark, x, y columns")
    replay.add_argument("output", help="Path to write the metrics TSV")
    replay.add_argument("--sensitivity", type=float, default=2.0, help="Variability multiplier")
    replay.add_argument("--smoothing", type=float, default=0.3, help="EMA smoothing factor in (0, 1)")
    replay.add_argument("--frame-rate", type=float, default=30.0, help="Nominal frame rate")
    replay.add_argument("--calibration-frames", type=int, default=30, help="Calibration window size")
    replay.add_argument("--history", type=int, default=100, help="Maximum history size")
    replay.add_argument("--min-diameter", type=float, default=1.0, help="Minimum valid pupil diameter")
    replay.add_argument("--max-diameter", type=float, default=100.0, help="Maximum valid pupil diameter")
    replay.add_argument("--unit", choices=["px", "mm"], default="px", help="Pupil diameter unit")
    replay.add_argument("--stability-weight", type=float, default=20.0, help="Points for a steady signal")
    replay.add_argument("--focus-weight", type=float, default=0.0, help="Points for long-window stability")

    summarize = sub.add_parser("summarize", help="Print summary statistics of a metrics TSV")
    summarize.add_argument("input", help="Metrics TSV written by `replay`")
    summarize.add_argument("--threshold", type=float, default=50.0, help="Level counted as focused")

    plot = sub.add_parser("plot", help="Plot concentration level and pupil sizes")
    plot.add_argument("input", help="Metrics TSV written by `replay`")
    plot.add_argument("output", help="Path to write the generated plot (png or pdf)")
    plot.add_argument("--threshold", type=float, default=None, help="Optional level reference line")
    plot.add_argument(
        "--show-calibration",
        action="store_true",
        help="Include a calibration progress panel",
    )
    plot.add_argument(
        "--figsize",
        nargs=2,
        type=float,
        metavar=("WIDTH", "HEIGHT"),
        default=(10.0, 6.0),
        help="Figure size in inches (width height)",
    )
    plot.add_argument("--dpi", type=float, default=None, help="Optional DPI override for the figure")
    plot.add_argument(
        "--show",
        action="store_true",
        help="Display the plot window in addition to saving the file",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "replay":
        SessionReplayer(build_tracker_config(args)).replay_from_file(args.input, args.output)
        return

    if args.command == "summarize":
        import pandas as pd

        df = pd.read_csv(args.input, sep="\t")
        summarize_session(df, threshold=args.threshold)
        return

    if args.command == "plot":
        plot_session_file(
            args.input,
            args.output,
            threshold=args.threshold,
            show_calibration=args.show_calibration,
            figsize=tuple(args.figsize),
            dpi=args.dpi,
            show=args.show,
        )
        return


if __name__ == "__main__":
    main()
