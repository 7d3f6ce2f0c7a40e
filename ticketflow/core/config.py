from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Progress engine
    progress_tick_interval_s: float = Field(0.1, alias="PROGRESS_TICK_INTERVAL_S", gt=0)
    progress_step: float = Field(0.01, alias="PROGRESS_STEP", gt=0, le=1)
    progress_autostart: bool = Field(True, alias="PROGRESS_AUTOSTART")

    # Placeholder analysis output
    placeholder_seed: int = Field(0, alias="PLACEHOLDER_SEED")

    # Uploads. Bodies are drained and discarded, never stored.
    upload_max_bytes: int | None = Field(None, alias="UPLOAD_MAX_BYTES")

    # Runtime
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8080, alias="PORT")


settings = Settings()
