import datetime as dt
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 30-minute slots across clinic hours; the lunch hour is left out.
DEFAULT_SLOT_TIMES: list[dt.time] = [
    dt.time(9, 0), dt.time(9, 30), dt.time(10, 0), dt.time(10, 30),
    dt.time(11, 0), dt.time(11, 30),
    dt.time(13, 0), dt.time(13, 30), dt.time(14, 0), dt.time(14, 30),
    dt.time(15, 0), dt.time(15, 30), dt.time(16, 0), dt.time(16, 30),
    dt.time(17, 0),
]  # fmt: skip


class StoreAdapter(Enum):
    MEMORY = "memory"
    SEEDED = "seeded"


class ClinicConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLINIC_", env_file=".env", extra="ignore")

    timezone: str = "America/New_York"
    slot_times: list[dt.time] = Field(default_factory=lambda: list(DEFAULT_SLOT_TIMES))
    booking_horizon_months: int = Field(default=3, ge=0)

    @field_validator("slot_times")
    @classmethod
    def _sorted_unique(cls, value: list[dt.time]) -> list[dt.time]:
        return sorted(set(value))


class StoreConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STORE_", env_file=".env", extra="ignore")

    adapter: StoreAdapter = StoreAdapter.SEEDED


class SessionConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SESSION_", env_file=".env", extra="ignore")

    ttl_minutes: int = Field(default=60, gt=0)


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    clinic: ClinicConfig = Field(default_factory=lambda: ClinicConfig())
    store: StoreConfig = Field(default_factory=lambda: StoreConfig())
    session: SessionConfig = Field(default_factory=lambda: SessionConfig())
