from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./documents.db"
    database_echo: bool = False

    # Окно неактивности перед автосохранением, в секундах
    autosave_delay_seconds: float = Field(3.0, gt=0)

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "AIWRITER_", "extra": "ignore"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level


settings = Settings()
