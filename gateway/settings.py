import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gateway.services.errors import ConfigurationError

load_dotenv()


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Cache Configuration
    cache_enabled: bool = Field(default=True, alias="CACHE_ENABLED")
    cache_ttl_seconds: float = Field(default=300, gt=0, alias="CACHE_TTL")
    cache_max_size: int = Field(default=1000, ge=1, alias="CACHE_MAX_SIZE")
    cache_debug: bool = Field(default=False, alias="CACHE_DEBUG")

    # Adapter Defaults
    default_timeout: float = Field(default=30.0, gt=0, alias="DEFAULT_TIMEOUT")
    default_retries: int = Field(default=3, ge=0, alias="DEFAULT_RETRIES")
    adapters_config_path: str | None = Field(default=None, alias="ADAPTERS_CONFIG_PATH")


def load_settings() -> Settings:
    """
    Build settings from the process environment (and .env).

    Raises ConfigurationError if a variable holds an invalid value.
    """
    try:
        return Settings.model_validate(dict(os.environ))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment settings: {e}") from e
