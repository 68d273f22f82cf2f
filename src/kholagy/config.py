"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (KHOLAGY__SCRIPTURE__API_KEY=...)
  2. kholagy.yaml           (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional. The only value without a usable default is the
scripture API key, and its absence is reported when a scripture request is
first made, not at startup.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("kholagy")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "cache.db")


def _find_config_file() -> str | None:
    """Return the path of the first kholagy.yaml found, or None."""
    candidates = [
        Path("kholagy.yaml"),
        Path(platformdirs.user_config_dir("kholagy")) / "kholagy.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ScriptureSettings(BaseModel):
    base_url: str = "https://api.scripture.api.bible/v1"
    api_key: str = ""
    # language code → translation id
    translations: dict[str, str] = {
        "en": "de4e12af7f28f599-02",  # King James Version
        "ar": "65eec8e0b60e656b-01",  # Smith & Van Dyke
        "ru": "c9e485b1eb295f0c-01",  # Synodal
    }
    default_language: str = "en"
    search_limit: int = 25


class CalendarSettings(BaseModel):
    base_url: str = "https://coptic.io"
    # Tried in order; {iso}, {year}, {month}, {day} are substituted.
    date_paths: list[str] = [
        "api/v1/calendar/gregorian/{iso}",
        "api/calendar/gregorian/{iso}",
        "calendar/gregorian/{iso}",
        "api/v1/calendar/day?date={iso}",
        "calendar/day?date={iso}",
    ]
    readings_paths: list[str] = [
        "api/v1/readings/{year}/{month}/{day}",
        "api/readings/{year}/{month}/{day}",
        "readings/{year}/{month}/{day}",
        "api/v1/calendar/coptic/{year}/{month}/{day}",
        "calendar/coptic/{year}/{month}/{day}",
    ]


class OrthocalSettings(BaseModel):
    base_url: str = "https://orthocal.info/api/oca"


class CacheTtlSettings(BaseModel):
    catalog: timedelta = timedelta(hours=24)
    chapters: timedelta = timedelta(hours=12)
    chapter_content: timedelta = timedelta(hours=6)
    search: timedelta = timedelta(minutes=30)
    calendar: timedelta = timedelta(hours=12)


class CacheSettings(BaseModel):
    db_path: str = _DEFAULT_DB_PATH
    namespace: str = "digital-kholagy:cache:"
    ttl: CacheTtlSettings = CacheTtlSettings()
    deduplicate_inflight: bool = True
    retention_days: int = 30
    cleanup_interval_hours: int = 24


class ContentSettings(BaseModel):
    default_language: str = "en"
    synaxarium_dir: str | None = None
    documents_dir: str | None = None


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: KHOLAGY__CACHE__DB_PATH=/tmp/c.db
        env_prefix="KHOLAGY__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    scripture: ScriptureSettings = ScriptureSettings()
    calendar: CalendarSettings = CalendarSettings()
    orthocal: OrthocalSettings = OrthocalSettings()
    cache: CacheSettings = CacheSettings()
    content: ContentSettings = ContentSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
