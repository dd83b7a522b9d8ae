# ----------------------
# file   : blog/core/config.py
# function: environment based settings shared by the API and front servers (.env supported)
# ----------------------

import os
from typing import List, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # document store
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "blog"

    # session store
    REDIS_URL: str = "redis://localhost:6379/0"
    SESSION_STORE: Literal["redis", "memory"] = "redis"
    SESSION_MAX_AGE: int = Field(default=24 * 60 * 60, ge=0)

    # request pipeline (comma separated origins)
    CORS_ORIGINS: str = "*"
    BODY_LIMIT: int = Field(default=1024 * 1024, gt=0)

    # logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # API process
    API_PORT: int = 3000
    SEED_ON_START: bool = True

    # front process
    APP_ENV: str = Field(default="development", validation_alias=AliasChoices("APP_ENV", "NODE_ENV"))
    PORT: int = 5050
    DIST_DIR: str = "dist"
    PUBLIC_DIR: str = "public"
    WATCH_INTERVAL: float = Field(default=1.0, gt=0)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("DIST_DIR", "PUBLIC_DIR")
    @classmethod
    def _absolute(cls, value: str) -> str:
        return os.path.abspath(value)

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_prod(self) -> bool:
        return self.APP_ENV == "production"


settings = Settings()
