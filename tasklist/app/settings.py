from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Ustawienia procesu czytane ze zmiennych środowiskowych (i opcjonalnie .env)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # HTTP
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)

    # Cloud Foundry binding
    service_name: str | None = Field(default=None)
    vcap_services: str | None = Field(default=None)

    # magazyn
    backend: Literal["datastore", "sql", "memory"] = Field(
        default="datastore",
        validation_alias=AliasChoices("TASKLIST_BACKEND", "backend"),
    )
    sql_url: str = Field(
        default="sqlite:///data/tasks.db",
        validation_alias=AliasChoices("TASKLIST_SQL_URL", "sql_url"),
    )

    # logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["plain", "json"] = Field(default="plain")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("log_format", mode="before")
    @classmethod
    def _lower_format(cls, v):
        return v.lower() if isinstance(v, str) else v


@lru_cache
def get_settings(**kwargs) -> AppSettings:
    # Only include kwargs that are not None, so env/defaults are used for the rest
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return AppSettings(**filtered_kwargs)
