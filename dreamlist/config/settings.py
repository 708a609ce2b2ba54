"""
Application settings and configuration.
Everything is loaded from DREAMLIST_* environment variables (or a .env file).
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    """Settings shared by the task-list API and the sync agent."""

    model_config = SettingsConfigDict(
        env_prefix="DREAMLIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Task store (Dream List API)
    api_url: str = "http://localhost:8000/api"
    request_timeout_s: float = 10.0
    task_source: str = "openclaw"
    task_tag: Optional[str] = "bot"

    # Sync loop
    poll_interval_ms: int = 5000
    source_mode: str = "remote"  # "remote" or "file"
    max_history: int = 50
    cache_multiplier: int = 10

    # Local transcript strategy
    transcript_dir: str = "~/.openclaw/agents/main/sessions"

    # Remote session strategy
    gateway_url: str = "http://127.0.0.1:18789"
    gateway_token: Optional[str] = None
    session_kinds: str = "main,other"
    session_filter: str = "main,subagent"
    session_list_limit: int = 20

    # Task-list API storage
    todo_backend: str = "memory"  # "memory" or "sqlite"
    data_dir: str = "."

    debug: bool = False

    @property
    def database_url(self) -> str:
        """SQLite URL for the sqlite todo backend."""
        return f"sqlite+aiosqlite:///{self.data_dir}/todos.db"

    @property
    def transcript_path(self) -> Path:
        return Path(self.transcript_dir).expanduser()

    @property
    def session_kinds_list(self) -> List[str]:
        return _split_csv(self.session_kinds)

    @property
    def session_filter_list(self) -> List[str]:
        return _split_csv(self.session_filter)

    @property
    def poll_interval_seconds(self) -> float:
        return max(self.poll_interval_ms, 100) / 1000.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
