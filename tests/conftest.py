from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import cv2
import numpy as np
import pytest

from timelapse.config.settings import TimelapseSettings

START = 1_700_000_000.0


class FakeClock:
    def __init__(self, start: float = START) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeCamera:
    def __init__(self, device_id: int, width: int, height: int, failures: Iterable[int] = ()) -> None:
        self.device_id = device_id
        self.resolution = (width, height)
        self.failures = set(failures)
        self.reads = 0
        self.released = False

    def read(self) -> Optional[np.ndarray]:
        index = self.reads
        self.reads += 1
        if index in self.failures:
            return None
        return np.full((24, 32, 3), index % 256, dtype=np.uint8)

    def __enter__(self) -> "FakeCamera":
        return self

    def __exit__(self, *_exc) -> None:
        self.released = True


class CameraFactory:
    def __init__(self, failures: Iterable[int] = ()) -> None:
        self.failures = tuple(failures)
        self.cameras: List[FakeCamera] = []

    def __call__(self, device_id: int, width: int, height: int) -> FakeCamera:
        camera = FakeCamera(device_id, width, height, self.failures)
        self.cameras.append(camera)
        return camera


class RecordingWriter:
    def __init__(self, path: Path, codec: str, fps: float, size: Tuple[int, int]) -> None:
        self.path = path
        self.codec = codec
        self.fps = fps
        self.size = size
        self.frames: List[np.ndarray] = []
        self.released = False

    def write(self, image: np.ndarray) -> None:
        self.frames.append(image)

    def __enter__(self) -> "RecordingWriter":
        return self

    def __exit__(self, *_exc) -> None:
        self.released = True


class WriterFactory:
    def __init__(self) -> None:
        self.writers: List[RecordingWriter] = []

    def __call__(self, path: Path, codec: str, fps: float, size: Tuple[int, int]) -> RecordingWriter:
        writer = RecordingWriter(path, codec, fps, size)
        self.writers.append(writer)
        return writer


def write_frames(frames_dir: Path, count: int, start: int = int(START), step: int = 60) -> List[Path]:
    """Write `count` solid grey JPEGs whose brightness encodes their 1-based position."""
    frames_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for position in range(1, count + 1):
        path = frames_dir / f"{start + (position - 1) * step}.jpg"
        cv2.imwrite(str(path), np.full((24, 32, 3), position * 20, dtype=np.uint8))
        paths.append(path)
    return paths


def position_of(image: np.ndarray) -> int:
    return int(round(float(image.mean()) / 20))


@pytest.fixture
def settings(tmp_path: Path) -> TimelapseSettings:
    return TimelapseSettings(
        output_root=str(tmp_path / "timelapses"),
        read_retry_delay=0.5,
        telegram_bot_token=None,
        telegram_chat_id=None,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def camera_factory() -> CameraFactory:
    return CameraFactory()


@pytest.fixture
def writer_factory() -> WriterFactory:
    return WriterFactory()
