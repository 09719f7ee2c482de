# src/cotizador/settings.py
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .policy import DEFAULT_TIMEZONE, HOLIDAY_COUNTRY, SKIP_WEEKENDS, VOLUMETRIC_DIVISOR


class EngineSettings(BaseSettings):
    # --- Peso volumétrico ---
    volumetric_divisor: int = Field(VOLUMETRIC_DIVISOR, gt=0)

    # --- Calendario ---
    timezone: str = DEFAULT_TIMEZONE
    holiday_country: Optional[str] = HOLIDAY_COUNTRY
    skip_weekends: bool = SKIP_WEEKENDS

    model_config = SettingsConfigDict(
        env_prefix="COTIZADOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> EngineSettings:
    return EngineSettings()  # lee .env / COTIZADOR_*
