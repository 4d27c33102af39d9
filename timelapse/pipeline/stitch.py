import logging
from typing import Callable

from ..config.settings import TimelapseSettings
from ..dto import StageResult, StitchJob
from ..errors import StitchError
from ..image_ops import frame_size, open_video_writer, read_image
from ..storage.frame_store import FileSystemFrameStore

logger = logging.getLogger("timelapse.stitch")


def stitch_frames(
    job: StitchJob,
    settings: TimelapseSettings,
    writer_factory: Callable = open_video_writer,
) -> StageResult:
    """
    Write every ``frame_step``-th frame of ``job.frames_dir`` into a single
    video placed next to the frames directory.

    Frames are counted from 1, so the first one kept is at position
    ``frame_step``. The first frame on disk fixes the video dimensions.
    """
    job.validate()

    store = FileSystemFrameStore(job.frames_dir, settings.image_format)
    try:
        frames = store.list_frames()
    except OSError as exc:
        raise StitchError(f'error collecting files in "{job.frames_dir}" directory: {exc}') from exc
    if len(frames) < 2:
        raise StitchError("two or more image files are required to perform stitching")

    first = read_image(frames[0])
    if first is None:
        raise StitchError(f"error reading image file ({frames[0].name}) from \"{job.frames_dir}\" directory")
    size = frame_size(first)

    video_path = job.video_path
    logger.info(
        "Timelapse video will be named",
        extra={
            "extra_payload": {
                "video": job.video_name,
                "frames_available": len(frames),
                "width": size[0],
                "height": size[1],
            }
        },
    )

    written = 0
    with writer_factory(video_path, settings.video_codec, job.fps, size) as writer:
        for position, frame_path in enumerate(frames, start=1):
            if position % job.frame_step != 0:
                continue
            image = read_image(frame_path)
            if image is None:
                raise StitchError(
                    f"error reading image file ({frame_path.name}) from \"{job.frames_dir}\" directory"
                )
            writer.write(image)
            written += 1

    logger.debug("Frames stitched", extra={"extra_payload": {"video": str(video_path), "frames": written}})
    return StageResult(stage="stitch", path=video_path, frames=written)
