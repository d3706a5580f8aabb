from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    STORAGE_BACKEND: Literal["sql", "memory"] = "sql"
    DATABASE_URL: str = "sqlite:///./tenantnotes.db"
    DATABASE_ECHO: bool = False

    LOG_LEVEL: Optional[str] = None
    ENVIRONMENT: str = "development"  # "development" or "production"

    @property
    def is_production(self):
        return self.ENVIRONMENT == "production"

    @property
    def log_level(self):
        # Explicit LOG_LEVEL wins; otherwise quieter in production
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        return "WARNING" if self.is_production else "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
