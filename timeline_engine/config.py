from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TIMELINE_",
        extra="ignore",
    )

    # Application
    app_name: str = "Timeline Engine API"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Defaults for new compositions
    default_fps: int = 30
    default_width: int = 1920
    default_height: int = 1080
    default_duration_in_frames: int = 900

    # Keyframe batches whose earliest frame exceeds this are treated as
    # absolute composition frames and shifted to start at 0
    absolute_frame_threshold: int = 60

    # Scenes
    default_scene_duration_seconds: float = 5.0

    # Spring evaluation
    spring_settle_threshold: float = 0.005

    # Undo/redo snapshots kept in memory
    history_limit: int = 50

    # HTTP API
    host: str = "0.0.0.0"
    port: int = 8000

    # MCP server -> HTTP API
    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 30.0


@lru_cache
def get_settings() -> Settings:
    return Settings()
