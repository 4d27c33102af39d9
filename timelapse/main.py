import argparse
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .config.settings import TimelapseSettings, get_settings
from .dto import CaptureSession, StitchJob
from .durations import parse_duration
from .errors import InvalidParameters, TimelapseError
from .image_ops import open_camera, open_video_writer
from .logging_utils import configure_logging
from .notifications.telegram import TelegramNotifier, build_notifier, notify_stage
from .pipeline.capture import capture_frames
from .pipeline.stitch import stitch_frames

logger = logging.getLogger("timelapse.main")

COMMANDS = ("both", "capture", "stitch")
SESSION_DIR_FORMAT = "%a-%d-%b-%Y_%H-%M-%S"


def _uint(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid unsigned integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value!r}")
    return number


def _duration(value: str):
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timelapse",
        description="Capture webcam frames at fixed intervals and stitch them into a timelapse video.",
    )
    parser.add_argument("--cmd", default="both", help='The cmd can be either "capture", "stitch" or "both".')
    parser.add_argument(
        "--cam_device_id", type=_uint, default=0, help="[capture] Recording camera device ID."
    )
    parser.add_argument(
        "--duration",
        type=_duration,
        default=parse_duration("1h"),
        help="[capture] Total duration of time to record a timelapse for (e.g. 1h, 30m, 1h30m).",
    )
    parser.add_argument(
        "--interval",
        type=_duration,
        default=parse_duration("1m"),
        help="[capture] Time interval between the capture of each frame.",
    )
    parser.add_argument("--fps", type=_uint, default=25, help="[stitch] Frame rate of the output timelapse video.")
    parser.add_argument(
        "--frame_step",
        type=_uint,
        default=1,
        help="[stitch] The step by which to iterate over frames to be stitched/excluded.",
    )
    parser.add_argument(
        "--stitch_dir",
        default="",
        help='[stitch] The path to the directory containing frames to stitch. Ignored if cmd is not "stitch".',
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: env LOG_LEVEL or INFO).")
    parser.add_argument("--log-file", default=None, help="Also write JSON logs to this rotating file (default: env LOG_FILE).")
    return parser


def run(
    args: argparse.Namespace,
    settings: TimelapseSettings,
    camera_factory: Callable = open_camera,
    writer_factory: Callable = open_video_writer,
    notifier: Optional[TelegramNotifier] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.time,
    now: Optional[datetime] = None,
) -> bool:
    """
    Validate the CLI arguments and run the selected stages in order.

    Returns False when validation or a stage fails; failures are logged and
    never raised, so the process exits normally either way.
    """
    if args.frame_step == 0:
        logger.error("frame_step must be greater than 0")
        return False
    if args.fps == 0:
        logger.error("fps must be greater than 0")
        return False

    dir_name = (now or datetime.now()).strftime(SESSION_DIR_FORMAT)
    if args.cmd == "both":
        perform_capture, perform_stitch = True, True
    elif args.cmd == "capture":
        perform_capture, perform_stitch = True, False
    elif args.cmd == "stitch":
        perform_capture, perform_stitch = False, True
        if not args.stitch_dir:
            logger.error('stitch_dir is required when cmd is "stitch"')
            return False
    else:
        logger.error('cmd must be either "both", "capture" or "stitch"', extra={"extra_payload": {"cmd": args.cmd}})
        return False

    if perform_capture:
        frames_dir = Path(settings.output_root) / dir_name / "frames"
    else:
        frames_dir = Path(args.stitch_dir)

    session = CaptureSession(
        device_id=args.cam_device_id,
        duration=args.duration,
        interval=args.interval,
        frames_dir=frames_dir,
    )
    job = StitchJob(frames_dir=frames_dir, fps=args.fps, frame_step=args.frame_step, video_format=settings.video_format)
    try:
        if perform_capture:
            session.validate()
        job.validate()
    except InvalidParameters as exc:
        logger.error(str(exc))
        return False

    if perform_capture:
        logger.info("Starting timelapse frame capture")
        try:
            result = capture_frames(session, settings, camera_factory=camera_factory, sleep=sleep, clock=clock)
        except TimelapseError as exc:
            logger.error("failed to capture frames", extra={"extra_payload": {"error": str(exc)}})
            return False
        logger.info(
            "Timelapse frame capture complete",
            extra={"extra_payload": {"frames": result.frames, "frames_dir": result.path}},
        )
        notify_stage(notifier, result)

    if perform_stitch:
        logger.info("Generating timelapse video from frames")
        try:
            result = stitch_frames(job, settings, writer_factory=writer_factory)
        except TimelapseError as exc:
            logger.error("failed to stitch frames", extra={"extra_payload": {"error": str(exc)}})
            return False
        logger.info(
            "Timelapse video stitching complete",
            extra={"extra_payload": {"frames": result.frames, "video": result.path}},
        )
        notify_stage(notifier, result)

    logger.info("Timelapse processing complete")
    return True


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    settings = get_settings()
    run(args, settings, notifier=build_notifier(settings))


if __name__ == "__main__":
    main()
