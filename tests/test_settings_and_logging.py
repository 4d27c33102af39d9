import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from timelapse.config.settings import TimelapseSettings
from timelapse.logging_utils import JsonFormatter, configure_logging


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("TIMELAPSE_ROOT", "/tmp/lapses")
    monkeypatch.setenv("IMAGE_FORMAT", ".PNG")
    monkeypatch.setenv("CAMERA_WIDTH", "1280")

    settings = TimelapseSettings()

    assert settings.output_root == "/tmp/lapses"
    assert settings.image_format == "png"
    assert settings.camera_width == 1280
    assert settings.video_codec == "MJPG"


def test_codec_must_be_fourcc():
    with pytest.raises(ValidationError):
        TimelapseSettings(video_codec="H264X")


def test_json_formatter_adds_stage_and_payload():
    record = logging.LogRecord("timelapse.capture", logging.INFO, __file__, 1, "Frame written", None, None)
    record.extra_payload = {"frame": 3, "path": Path("frames/1700000000.jpg")}

    entry = json.loads(JsonFormatter().format(record))

    assert entry["message"] == "Frame written"
    assert entry["level"] == "INFO"
    assert entry["stage"] == "capture"
    assert entry["frame"] == 3
    assert entry["path"] == str(Path("frames/1700000000.jpg"))
    assert entry["time"].endswith("Z")


def test_configure_logging_writes_json_lines_to_log_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "timelapse.log"
    try:
        configure_logging("debug", str(log_file))
        logging.getLogger("timelapse.stitch").debug("Frames stitched", extra={"extra_payload": {"frames": 3}})
        for handler in root.handlers:
            handler.flush()
        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    finally:
        for handler in root.handlers:
            if handler not in saved_handlers:
                handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    assert entry["stage"] == "stitch"
    assert entry["level"] == "DEBUG"
    assert entry["frames"] == 3
