import argparse
import json
import logging
import sys

from .exercise_analysis import ExerciseType
from .exercise_analysis.config_utils import load_exercise_config
from .feedback.events import DataQualityIssue, HoldProgressUpdated, SessionReset, StateChanged
from .pose_detection.frame_source import JsonLinesFrameSource
from .trainer import ExerciseTracker


def _setup_logging(level: str) -> None:
    logger = logging.getLogger()
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))


def describe_event(event) -> str:
    if isinstance(event, StateChanged):
        text = f"[STATE] in_position={event.in_position} reps={event.rep_count}"
        if event.feedback is not None:
            marker = "!" if event.feedback.is_critical else "-"
            text += f" {marker} {event.feedback.message}"
        return text
    if isinstance(event, HoldProgressUpdated):
        return f"[HOLD] {event.elapsed_seconds}s"
    if isinstance(event, SessionReset):
        return f"[RESET] {event.reason}"
    if isinstance(event, DataQualityIssue):
        return f"[DATA] {event.message}"
    return f"[EVENT] {event}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count exercise repetitions from a recorded landmark stream")
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="JSON lines file with one pose frame per line"
    )
    parser.add_argument(
        "--exercise",
        type=str,
        default="squat",
        choices=[t.value for t in ExerciseType],
        help="Type of exercise to analyze"
    )
    parser.add_argument(
        "--custom-name",
        type=str,
        default=None,
        help="Display name for a custom exercise"
    )
    parser.add_argument(
        "--thresholds",
        type=str,
        default=None,
        help="JSON file with threshold overrides for the selected exercise"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Alternative exercise configuration file"
    )
    parser.add_argument(
        "--no-filter",
        action="store_true",
        help="Analyze raw angles instead of Kalman-filtered ones"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the workout summary as JSON"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print the summary"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging level"
    )
    return parser


def main(argv=None) -> int:
    """Replay a recorded landmark stream through the tracker."""
    args = build_parser().parse_args(argv)
    _setup_logging(args.log_level)

    try:
        config = load_exercise_config(args.config)
        if args.no_filter:
            config.setdefault("tracker", {})["use_filter"] = False
        thresholds = None
        if args.thresholds:
            with open(args.thresholds, "r") as f:
                thresholds = json.load(f)
        tracker = ExerciseTracker(
            exercise_type=ExerciseType(args.exercise),
            custom_name=args.custom_name,
            thresholds=thresholds,
            config=config,
        )
    except (OSError, ValueError) as e:
        print(f"Error starting tracker: {e}", file=sys.stderr)
        return 1

    frame_count = 0
    try:
        for frame, error in JsonLinesFrameSource(args.input).frames():
            if error is not None:
                events = [DataQualityIssue(error)]
            else:
                frame_count += 1
                events = tracker.process(frame)
            if not args.quiet:
                for event in events:
                    print(describe_event(event))
    except OSError as e:
        print(f"Error reading {args.input}: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[INFO] KeyboardInterrupt received. Exiting gracefully...")

    summary = tracker.finish()
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print(f"Processed {frame_count} frames.")
        print(f"Exercise: {summary.exercise_name}")
        print(f"Repetitions: {summary.rep_count}/{summary.target_rep_count}")
        print(f"Duration: {summary.formatted_duration}")
        if summary.average_rep_duration is not None:
            print(f"Average repetition: {summary.average_rep_duration:.1f} s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
