# src/pai_core/config.py
from pathlib import Path

from loguru import logger
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pai_core.logging_utils import log_event


class Settings(BaseSettings):
    """
    PAI plugin glue configuration.
    Loads variables from .env file or environment variables.
    """
    # --- Observability ---
    PAI_OBSERVABILITY_HOST: str = "localhost"
    PAI_OBSERVABILITY_PORT: int = 8889
    # Anything other than "false" keeps emission on
    PAI_OBSERVABILITY_ENABLED: str = "true"
    PAI_OBSERVABILITY_TIMEOUT_MS: int = 1000

    # --- Model selection ---
    # Empty means <parent of cwd>/opencode.json (hosts run from .opencode/)
    PAI_OPENCODE_CONFIG: str = ""

    # --- Logging ---
    PAI_LOG_LEVEL: str = "INFO"
    PAI_LOG_FILE: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_file_encoding='utf-8'
    )

    @property
    def observability_enabled(self) -> bool:
        return self.PAI_OBSERVABILITY_ENABLED.strip().lower() != "false"

    @property
    def observability_url(self) -> str:
        return f"http://{self.PAI_OBSERVABILITY_HOST}:{self.PAI_OBSERVABILITY_PORT}/events"

    @property
    def observability_timeout_seconds(self) -> float:
        return max(0.05, self.PAI_OBSERVABILITY_TIMEOUT_MS / 1000.0)

    @property
    def opencode_config_path(self) -> Path:
        if self.PAI_OPENCODE_CONFIG.strip():
            return Path(self.PAI_OPENCODE_CONFIG.strip()).expanduser()
        return Path.cwd().parent / "opencode.json"


def load_settings() -> Settings:
    """
    Build settings from the environment.

    A malformed variable (e.g. a non-numeric port) logs a warning and falls
    back to its default; the remaining variables are still honoured.
    """
    try:
        return Settings()
    except ValidationError as exc:
        invalid = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
        logger.warning(log_event("config.invalid", fields=",".join(invalid), fallback="defaults"))

    defaults = {name: Settings.model_fields[name].default for name in invalid if name in Settings.model_fields}
    try:
        return Settings(**defaults)
    except ValidationError:
        return Settings.model_construct()
