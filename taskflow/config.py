from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 9000
    log_level: str = "INFO"
    board_file: Path = Path("board.json")
    storage_key: str = "taskflow-board"
    gemini_api_key: str = ""
    primary_model: str = "gemini-2.0-flash-exp"
    fallback_model: str = "gemini-2.0-flash-lite"
    requests_per_minute: int = 9
    requests_per_day: int = 50
    enhance_timeout_ms: int = 60_000
    tick_interval: float = 1.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
