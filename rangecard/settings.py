"""Process settings, overridable via environment variables."""

from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import EngineConfig
from .errors import ConfigError


class Settings(BaseSettings):
    """Run settings, read from ``RANGECARD_*`` variables or a ``.env`` file."""

    # Engine
    SENSITIVITY_PCT: float = Field(50.0, gt=0.0, le=100.0)
    WORKERS: int | None = Field(None, ge=1)
    MAX_RANGE_M: float = Field(4000.0, gt=0.0)
    DUPLICATE_POLICY: str = "last"

    # Output
    OUTPUT_DIR: Path = Path("Ballistic")
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="RANGECARD_", env_file=".env", extra="ignore")

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            sensitivity_pct=self.SENSITIVITY_PCT,
            workers=self.WORKERS,
            max_range_m=self.MAX_RANGE_M,
            duplicate_policy=self.DUPLICATE_POLICY,
        ).validate()


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"invalid settings: {exc}") from exc
