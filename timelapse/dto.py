from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional

from .errors import InvalidParameters


@dataclass(frozen=True)
class CaptureSession:
    device_id: int
    duration: timedelta
    interval: timedelta
    frames_dir: Path

    def validate(self) -> None:
        if self.duration <= timedelta(0) or self.interval <= timedelta(0):
            raise InvalidParameters("duration and interval must be greater than zero")
        if self.duration <= self.interval:
            raise InvalidParameters("timelapse duration must be greater than the interval")

    @property
    def frame_count(self) -> int:
        # Informational only; the loop stops on elapsed time.
        return self.duration // self.interval + 1


@dataclass(frozen=True)
class StitchJob:
    frames_dir: Path
    fps: int
    frame_step: int
    video_format: str = "avi"

    def validate(self) -> None:
        if self.frame_step <= 0:
            raise InvalidParameters("frame_step must be greater than 0")
        if self.fps <= 0:
            raise InvalidParameters("fps must be greater than 0")

    @property
    def video_name(self) -> str:
        return f"fps-{self.fps}_step-{self.frame_step}_timelapse.{self.video_format}"

    @property
    def video_path(self) -> Path:
        # "." and ".." have no lexical parent.
        return Path(self.frames_dir).resolve().parent / self.video_name


@dataclass(frozen=True)
class StageResult:
    stage: str
    path: Path
    frames: int
    last_frame: Optional[Path] = None
