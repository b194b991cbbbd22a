from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
  model_config = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
  )

  gemini_api_key: str = Field(..., alias="GEMINI_API_KEY")
  gemini_model: str = Field("gemini-2.0-flash", alias="GEMINI_MODEL")
  host: str = Field("0.0.0.0", alias="HOST")
  port: int = Field(8080, alias="PORT")
  processing_timeout_ms: int = Field(300_000, alias="PROCESSING_TIMEOUT_MS")
  rate_limit_window_ms: int = Field(15 * 60 * 1000, alias="RATE_LIMIT_WINDOW_MS")
  rate_limit_max: int = Field(10, alias="RATE_LIMIT_MAX")
  public_dir: Path = Field(Path("./public"), alias="PUBLIC_DIR")
  log_level: str = Field("INFO", alias="LOG_LEVEL")

  @field_validator("gemini_api_key")
  @classmethod
  def _require_api_key(cls, value: str) -> str:
    if not value.strip():
      raise ValueError("GEMINI_API_KEY must not be empty")
    return value

  @field_validator("public_dir", mode="before")
  @classmethod
  def _ensure_path(cls, value: Any) -> Path:
    return Path(value).resolve()


def load_settings(**overrides: Any) -> Settings:
  """Build settings from the environment, exiting the process when the API key is missing."""
  try:
    return Settings(**overrides)
  except ValidationError as error:
    fields = {str(part) for err in error.errors() for part in err["loc"]}
    if fields & {"GEMINI_API_KEY", "gemini_api_key"}:
      logger.error("GEMINI_API_KEY environment variable is not set!")
      logger.info("Please set your API key using:")
      logger.info("   export GEMINI_API_KEY=your_api_key_here")
      logger.info("   or create a .env file with: GEMINI_API_KEY=your_api_key_here")
    else:
      logger.error(f"Invalid configuration: {error}")
    sys.exit(1)


def mask_api_key(api_key: str) -> str:
  if not api_key:
    return "NOT_SET"
  return f"{api_key[:10]}...{api_key[-4:]}"


def configure_logging(level: str = "INFO") -> None:
  logging.basicConfig(
    level=getattr(logging, level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
  )
