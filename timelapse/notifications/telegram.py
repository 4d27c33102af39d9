import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from ..config.settings import TimelapseSettings
from ..dto import StageResult

logger = logging.getLogger("timelapse.notifications")


@dataclass
class TelegramSettings:
    token: str
    chat_id: str


class TelegramNotifier:
    def __init__(self, settings: TelegramSettings, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.settings = settings
        self.base_url = f"https://api.telegram.org/bot{settings.token}"
        self._transport = transport

    def send(self, message: str, image_path: Optional[Path] = None) -> None:
        with httpx.Client(timeout=10, transport=self._transport) as client:
            if image_path and Path(image_path).exists():
                data = {"chat_id": self.settings.chat_id, "caption": message}
                photo = Path(image_path).read_bytes()
                resp = client.post(
                    f"{self.base_url}/sendPhoto",
                    data=data,
                    files={"photo": (Path(image_path).name, photo)},
                )
            else:
                resp = client.post(
                    f"{self.base_url}/sendMessage",
                    json={"chat_id": self.settings.chat_id, "text": message},
                )
            resp.raise_for_status()


def build_notifier(settings: TimelapseSettings) -> Optional[TelegramNotifier]:
    if not (settings.notifications_enabled and settings.telegram_bot_token and settings.telegram_chat_id):
        return None
    return TelegramNotifier(TelegramSettings(token=settings.telegram_bot_token, chat_id=settings.telegram_chat_id))


def notify_stage(notifier: Optional[TelegramNotifier], result: StageResult) -> bool:
    """Best effort; a delivery failure never fails the run."""
    if notifier is None:
        return False
    if result.stage == "capture":
        message = f"Timelapse capture complete\nFrames: {result.frames}\nDirectory: {result.path}"
        image_path = result.last_frame
    else:
        message = f"Timelapse video ready\nFrames: {result.frames}\nVideo: {result.path}"
        image_path = None
    try:
        notifier.send(message, image_path)
    except httpx.HTTPError as exc:
        logger.error(
            "Failed to send notification",
            extra={"extra_payload": {"stage": result.stage, "error": str(exc)}},
        )
        return False
    return True
