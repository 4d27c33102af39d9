from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimelapseSettings(BaseSettings):
    output_root: str = Field("./timelapses", validation_alias="TIMELAPSE_ROOT")
    image_format: str = Field("jpg", validation_alias="IMAGE_FORMAT")
    video_format: str = Field("avi", validation_alias="VIDEO_FORMAT")
    video_codec: str = Field("MJPG", validation_alias="VIDEO_CODEC")
    camera_width: int = Field(1920, validation_alias="CAMERA_WIDTH")
    camera_height: int = Field(1080, validation_alias="CAMERA_HEIGHT")
    read_retry_delay: float = Field(0.5, validation_alias="READ_RETRY_DELAY")
    notifications_enabled: bool = Field(True, validation_alias="NOTIFICATIONS_ENABLED")
    telegram_bot_token: Optional[str] = Field(None, validation_alias="TELEGRAM_BOT_TOKEN")
    telegram_chat_id: Optional[str] = Field(None, validation_alias="TELEGRAM_CHAT_ID")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("image_format", "video_format")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        return value.lstrip(".").lower()

    @field_validator("video_codec")
    @classmethod
    def _fourcc(cls, value: str) -> str:
        if len(value) != 4:
            raise ValueError("video codec must be a four character code")
        return value


@lru_cache()
def get_settings() -> TimelapseSettings:
    return TimelapseSettings()
