from __future__ import annotations

"""Configuration module for the dining offers engine."""
import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_SOURCES: Tuple[str, ...] = ("Zomato", "EazyDiner", "BookMyShow")


class Settings(BaseSettings):
    """Environment-driven settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", populate_by_name=True)

    catalog_path: Path = Field(default=Path("./data/combined.json"), validation_alias="CATALOG_PATH")
    state_path: Path = Field(default=Path("./data/state.sqlite3"), validation_alias="STATE_DB_PATH")
    locale: str = Field(default="en", validation_alias="LOCALE")
    timezone: str = Field(default="UTC", validation_alias="TZ")
    carousel_interval: float = Field(default=3.0, gt=0, validation_alias="CAROUSEL_INTERVAL")
    currency_symbol: str = Field(default="₹", validation_alias="CURRENCY_SYMBOL")
    # OFFER_SOURCES accepts "Zomato,EazyDiner" or a JSON array
    sources: Annotated[Tuple[str, ...], NoDecode] = Field(default=DEFAULT_SOURCES, validation_alias="OFFER_SOURCES")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    shared_query: str = Field(default="", validation_alias="SHARED_QUERY")

    @field_validator("sources", mode="before")
    @classmethod
    def split_sources(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return tuple(item.strip() for item in text.split(",") if item.strip())


@lru_cache()
def load_settings() -> Settings:
    return Settings()
