"""Client configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_CONFIG_DIR = Path.home() / ".taskpad"


class ClientSettings(BaseSettings):
    api_url: str = "http://localhost:3000"
    owner_id: str | None = None
    offline_path: Path = DEFAULT_CONFIG_DIR / "offline_tasks.json"
    request_timeout: float = 30.0
    drag_warning_seconds: float = 10.0

    model_config = {"env_prefix": "TASKPAD_", "env_file": ".env", "extra": "ignore"}


settings = ClientSettings()
