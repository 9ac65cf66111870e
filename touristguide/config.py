# touristguide/config.py
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field

# Корень проекта (рядом лежит .env)
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    # Backend API
    API_BASE_URL: str = Field(
        default="http://localhost:5000/api",
        validation_alias="API_BASE_URL"
    )
    REQUEST_TIMEOUT: float = Field(
        default=30.0,
        validation_alias="REQUEST_TIMEOUT"
    )

    # Справочник работает только по одному городу
    CITY: str = Field(default="Surat", validation_alias="CITY")
    SEARCH_AREAS: List[str] = Field(
        default=["surat", "dumas", "nanpura", "adajan", "vesu"],
        validation_alias="SEARCH_AREAS"
    )
    # Запросы длиннее этого значения без упоминания района отклоняются
    SEARCH_MAX_FOREIGN_LENGTH: int = Field(
        default=3,
        validation_alias="SEARCH_MAX_FOREIGN_LENGTH"
    )

    # Сессия (None -> хранится только в памяти)
    SESSION_FILE: Optional[Path] = Field(
        default=None,
        validation_alias="SESSION_FILE"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        validation_alias="LOG_FORMAT"
    )

    class Config:
        env_file = PROJECT_ROOT / ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def clean_api_base_url(self) -> str:
        return self.API_BASE_URL.strip().rstrip("/")


# Единый экземпляр для всего проекта
config = Settings()
