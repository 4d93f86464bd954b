from datetime import datetime
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BusMapConfig(BaseSettings):
    """Configuration for the bus map server.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    data_dir: Path = Field(default=Path("data"), alias="BUSMAP_DATA_DIR")
    # Timetables are local times of the operator
    timezone: str = Field(default="Asia/Tokyo", alias="BUSMAP_TIMEZONE")
    search_limit_max: int = Field(default=50, alias="BUSMAP_SEARCH_LIMIT_MAX")

    def now(self) -> datetime:
        """Current wall-clock time in the operator's timezone."""
        return datetime.now(ZoneInfo(self.timezone))


@lru_cache
def get_config() -> BusMapConfig:
    """Get bus map configuration (cached singleton).

    Returns:
        BusMapConfig with values from .env file or environment variables.
    """
    return BusMapConfig()
