"""
Thin wrappers around the OpenCV camera, image and video writer calls.

Everything codec or device specific stays inside ``cv2``; these helpers only
turn OpenCV's status flags into exceptions and give the handles a context
manager so stages release them on every exit path.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np

from .errors import CameraError, FrameWriteError, StitchError

logger = logging.getLogger("timelapse.image_ops")

FrameSize = Tuple[int, int]


class Camera:
    def __init__(self, capture: cv2.VideoCapture, device_id: int) -> None:
        self._capture = capture
        self.device_id = device_id

    def read(self) -> Optional[np.ndarray]:
        ok, frame = self._capture.read()
        if not ok or frame is None or frame.size == 0:
            return None
        return frame

    def release(self) -> None:
        self._capture.release()

    def __enter__(self) -> "Camera":
        return self

    def __exit__(self, *_exc) -> None:
        self.release()


class VideoWriter:
    def __init__(self, writer: cv2.VideoWriter, path: Path) -> None:
        self._writer = writer
        self.path = path

    def write(self, image: np.ndarray) -> None:
        self._writer.write(image)

    def release(self) -> None:
        self._writer.release()

    def __enter__(self) -> "VideoWriter":
        return self

    def __exit__(self, *_exc) -> None:
        self.release()


def open_camera(device_id: int, width: int, height: int) -> Camera:
    capture = cv2.VideoCapture(device_id)
    if not capture.isOpened():
        capture.release()
        raise CameraError(f"failed to open video capture device {device_id}")
    capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    logger.debug(
        "Camera opened",
        extra={"extra_payload": {"device_id": device_id, "width": width, "height": height}},
    )
    return Camera(capture, device_id)


def write_image(path: Path, image: np.ndarray) -> None:
    try:
        ok = cv2.imwrite(str(path), image)
    except cv2.error as exc:
        raise FrameWriteError(f"failed to write image to {path}: {exc}") from exc
    if not ok:
        raise FrameWriteError(f"failed to write image to {path}")


def read_image(path: Path) -> Optional[np.ndarray]:
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None or image.size == 0:
        return None
    return image


def frame_size(image: np.ndarray) -> FrameSize:
    height, width = image.shape[:2]
    return int(width), int(height)


def open_video_writer(path: Path, codec: str, fps: float, size: FrameSize) -> VideoWriter:
    fourcc = cv2.VideoWriter_fourcc(*codec)
    writer = cv2.VideoWriter(str(path), fourcc, float(fps), size, True)
    if not writer.isOpened():
        writer.release()
        raise StitchError(f"error creating video writer for {path} (codec {codec})")
    return VideoWriter(writer, Path(path))
