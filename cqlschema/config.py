from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from cqlschema.validation.errors import ValidationMode


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_JSON: bool = False  # True for structured JSON, False for colored console output

    # Validation
    VALIDATION_MODE: ValidationMode = ValidationMode.FAIL_FAST
    MAX_ERRORS: int = 50

    model_config = SettingsConfigDict(env_prefix="CQLSCHEMA_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
