import logging
import time
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Callable, Optional

from ..config.settings import TimelapseSettings
from ..dto import CaptureSession, StageResult
from ..image_ops import open_camera
from ..storage.frame_store import FileSystemFrameStore

logger = logging.getLogger("timelapse.capture")


def capture_frames(
    session: CaptureSession,
    settings: TimelapseSettings,
    camera_factory: Callable = open_camera,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.time,
) -> StageResult:
    """
    Capture one frame per interval until the elapsed time reaches the session
    duration. The frame at the duration boundary is always captured.

    Unreadable frames are logged and retried; a failed image write aborts the
    stage with ``FrameWriteError``.
    """
    session.validate()

    eta = datetime.fromtimestamp(clock(), tz=timezone.utc) + session.duration
    logger.info(
        "Timelapse capture planned",
        extra={
            "extra_payload": {
                "frames": session.frame_count,
                "duration": str(session.duration),
                "interval": str(session.interval),
                "estimated_completion": format_datetime(eta, usegmt=True),
            }
        },
    )

    store = FileSystemFrameStore(session.frames_dir, settings.image_format)
    written = 0
    last_frame: Optional[Path] = None
    with camera_factory(session.device_id, settings.camera_width, settings.camera_height) as camera:
        store.ensure()
        logger.info("Writing frames", extra={"extra_payload": {"frames_dir": str(session.frames_dir)}})

        elapsed = timedelta(0)
        while True:
            image = camera.read()
            if image is None:
                logger.warning(
                    "Cannot read from device",
                    extra={"extra_payload": {"device_id": session.device_id, "elapsed": str(elapsed)}},
                )
                sleep(settings.read_retry_delay)
                continue

            last_frame = store.save_frame(image, clock())
            written += 1
            logger.debug(
                "Frame written",
                extra={"extra_payload": {"path": str(last_frame), "frame": written}},
            )

            if elapsed >= session.duration:
                break
            sleep(session.interval.total_seconds())
            elapsed += session.interval

    return StageResult(stage="capture", path=session.frames_dir, frames=written, last_frame=last_frame)
