"""Task API configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class TaskpadSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///taskpad.db"
    echo_sql: bool = False
    app_title: str = "Taskpad API"
    api_prefix: str = "/api"

    # Browser client runs on another origin (Vite dev server by default).
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    max_text_length: int = 100
    default_category: str = "Personal"

    model_config = {"env_prefix": "TASKPAD_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.database_url

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = TaskpadSettings()
