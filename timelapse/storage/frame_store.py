from pathlib import Path
from typing import List, Tuple

import numpy as np

from ..errors import FrameWriteError
from ..image_ops import write_image


def _frame_sort_key(path: Path) -> Tuple[int, int, str]:
    # Unix-second stems sort numerically; anything else goes last, by name.
    try:
        return (0, int(path.stem), path.name)
    except ValueError:
        return (1, 0, path.name)


class FileSystemFrameStore:
    def __init__(self, root: Path | str, image_format: str = "jpg") -> None:
        self.root = Path(root)
        self.image_format = image_format.lstrip(".").lower()

    def ensure(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FrameWriteError(f'failed to create directory "{self.root}" for timelapse images: {exc}') from exc

    def frame_path(self, captured_at: float) -> Path:
        return self.root / f"{int(captured_at)}.{self.image_format}"

    def save_frame(self, image: np.ndarray, captured_at: float) -> Path:
        path = self.frame_path(captured_at)
        write_image(path, image)
        return path

    def list_frames(self) -> List[Path]:
        suffix = f".{self.image_format}"
        frames = [
            path
            for path in self.root.iterdir()
            if path.is_file() and path.suffix.lower() == suffix
        ]
        return sorted(frames, key=_frame_sort_key)
