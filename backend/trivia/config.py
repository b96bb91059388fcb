from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ADMIN_KEY: str = "change-me"
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:8080"
    CORS_ORIGIN_REGEX: Optional[str] = None

    CORPUS_PATH: str = "data/trivia.sqlite"
    SEEN_CACHE_PATH: Optional[str] = "data/jeopardy-cache.json"

    ROUND_TIMEOUT_SECONDS: float = 300
    ANSWER_TIMEOUT_SECONDS: float = 30
    WINNING_SCORE: int = 10000
    SCORING_MODE: Literal["dollars", "points"] = "dollars"

    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
